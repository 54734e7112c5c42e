from __future__ import annotations

import logging
import os
from pathlib import Path

from .command import CommandRunner

logger = logging.getLogger(__name__)

# Shell rc files and host config may hold bytes that are not UTF-8.
TEXT_ERRORS = "surrogateescape"


def read_text(path: Path) -> str:
    """Return file contents, or "" when the file does not exist.

    Undecodable bytes are carried as surrogates so that write_file() puts
    them back unchanged.
    """
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8", errors=TEXT_ERRORS)


def write_file(path: Path, contents: str, *, dry_run: bool, mode: int | None = None) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8", errors=TEXT_ERRORS)
    if mode is not None:
        path.chmod(mode)


def write_privileged_file(runner: CommandRunner, path: Path, contents: str) -> None:
    """Write a file, going through `sudo tee` when the parent is not writable."""

    parent = path.parent
    if parent.is_dir() and os.access(parent, os.W_OK):
        write_file(path, contents, dry_run=runner.dry_run)
        return
    runner.run(["tee", str(path)], sudo=True, input_text=contents)


def ensure_dir(path: Path, *, mode: int, dry_run: bool) -> bool:
    """Create a directory with mode; returns True when it had to be created."""
    if path.is_dir():
        return False
    if dry_run:
        logger.info("Would create %s", str(path))
        return True
    path.mkdir(mode=mode, parents=True)
    # mkdir's mode is filtered by the umask.
    path.chmod(mode)
    return True
