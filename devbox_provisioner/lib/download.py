from __future__ import annotations

import logging
from typing import Mapping, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)


def fetch(runner: CommandRunner, url: str) -> str:
    """Download a URL to memory with curl; fails loudly on HTTP errors."""

    r = runner.run(["curl", "-fsSL", url], read_only=True)
    return r.stdout


def fetch_and_execute(
    runner: CommandRunner,
    url: str,
    interpreter: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
) -> None:
    """Download an installer script and pipe it to an interpreter."""

    if runner.dry_run:
        logger.info("Would download %s and run it with %s", url, " ".join(interpreter))
        return
    script = fetch(runner, url)
    runner.run(list(interpreter), input_text=script, env=env)
