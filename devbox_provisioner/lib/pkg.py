from __future__ import annotations

import logging
from typing import Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)


def apt_update(runner: CommandRunner) -> None:
    runner.run(["apt-get", "update", "-y"], sudo=True)


def apt_upgrade(runner: CommandRunner) -> None:
    runner.run(["apt-get", "upgrade", "-y"], sudo=True)


def apt_install(runner: CommandRunner, packages: Sequence[str], *, fix_broken: bool = True) -> None:
    """Install packages; apt reports already-installed ones as satisfied."""
    if not packages:
        return
    argv = ["apt-get", "install", "-y"]
    if fix_broken:
        argv.append("-f")
    runner.run([*argv, *packages], sudo=True)


def dpkg_is_installed(runner: CommandRunner, package: str) -> bool:
    r = runner.run(
        ["dpkg-query", "-W", "-f=${Status}", package],
        check=False,
        read_only=True,
    )
    return r.ok and r.stdout.strip().endswith("install ok installed")


def missing_packages(runner: CommandRunner, packages: Sequence[str]) -> list[str]:
    return [p for p in packages if not dpkg_is_installed(runner, p)]
