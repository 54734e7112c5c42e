from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .files import read_text, write_file

logger = logging.getLogger(__name__)


DOCKER_FRAGMENT = (
    'export DOCKER_HOST="unix:///var/run/docker.sock"',
    'export DOCKER_TLS_VERIFY="1"',
    'export DOCKER_CERT_PATH="$HOME/.docker/certs"',
)

PYENV_FRAGMENT = (
    'export PYENV_ROOT="$HOME/.pyenv"',
    'export PATH=$(echo $PATH | sed -E "s@([^:]*\\.pyenv/[^:]*(:|$))@@g")',
    '[[ -d $PYENV_ROOT/bin ]] && export PATH="$PYENV_ROOT/bin:$PATH"',
    'eval "$(pyenv init -)"',
)

NVM_FRAGMENT = (
    'export NVM_DIR="$HOME/.nvm"',
    '[ -s "$NVM_DIR/nvm.sh" ] && \\. "$NVM_DIR/nvm.sh" # This loads nvm',
    '[ -s "$NVM_DIR/bash_completion" ] && \\. "$NVM_DIR/bash_completion"  # This loads nvm bash_completion',
)


def direnv_fragment(shell: str) -> tuple[str, ...]:
    return (f'eval "$(direnv hook {shell})"',)


def render_fragment(lines: Sequence[str]) -> str:
    return "\n".join(lines) + "\n"


def fragment_is_current(path: Path, lines: Sequence[str]) -> bool:
    return read_text(path) == render_fragment(lines)


def write_fragment(profile_dir: Path, name: str, lines: Sequence[str], *, dry_run: bool) -> Path:
    """Write a profile fragment wholesale; fragments are never appended to."""

    p = profile_dir / name
    logger.info("Creating %s entry in %s", name, str(profile_dir))
    write_file(p, render_fragment(lines), dry_run=dry_run)
    return p
