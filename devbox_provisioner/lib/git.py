from __future__ import annotations

from pathlib import Path
from typing import Optional

from .command import CommandRunner


def clone(runner: CommandRunner, url: str, dest: Path) -> None:
    runner.run(["git", "clone", url, str(dest)])


def latest_tag(runner: CommandRunner, repo: Path) -> Optional[str]:
    """Highest tag by version:refname ordering, or None for an untagged repo."""

    r = runner.run(
        ["git", "-C", str(repo), "tag", "--list", "--sort=version:refname"],
        check=False,
        read_only=True,
    )
    if not r.ok:
        return None
    tags = [t.strip() for t in r.stdout.splitlines() if t.strip()]
    return tags[-1] if tags else None


def checkout(runner: CommandRunner, repo: Path, ref: str) -> None:
    runner.run(["git", "-C", str(repo), "checkout", "--quiet", ref])
