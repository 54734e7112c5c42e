from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..config import ProvisionConfig
from ..lib.download import fetch
from ..lib.env import DOCKER_APT_URL, DOCKER_GPG_URL, PATHS
from ..lib.files import read_text, write_privileged_file
from ..lib.fragments import DOCKER_FRAGMENT
from ..lib.pkg import apt_install, apt_update
from .base import ToolInstallerStep

logger = logging.getLogger(__name__)


DOCKER_PREREQUISITES = ("ca-certificates", "curl", "gnupg")
DOCKER_PACKAGES = (
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
)


def os_release_codename(text: str) -> Optional[str]:
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip() == "VERSION_CODENAME":
            return value.strip().strip("\"'") or None
    return None


class DockerStep(ToolInstallerStep):
    step_id = "40_docker"
    tool = "docker"

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.docker_enabled

    def marker(self, config: ProvisionConfig) -> Path:
        return Path(PATHS.docker_bin)

    def fragment_lines(self, config: ProvisionConfig) -> Sequence[str]:
        return DOCKER_FRAGMENT

    def _add_repository(self, ctx) -> None:
        keyring_dir = Path(PATHS.docker_keyring_dir)
        keyring = keyring_dir / "docker.gpg"

        ctx.runner.run(["install", "-m", "0755", "-d", str(keyring_dir)], sudo=True)
        key = fetch(ctx.runner, DOCKER_GPG_URL)
        ctx.runner.run(["gpg", "--batch", "--yes", "--dearmor", "-o", str(keyring)], sudo=True, input_text=key)
        ctx.runner.run(["chmod", "a+r", str(keyring)], sudo=True)

        arch = ctx.runner.run(["dpkg", "--print-architecture"], read_only=True).stdout.strip()
        codename = os_release_codename(read_text(Path(PATHS.os_release)))
        if not arch or not codename:
            raise RuntimeError(f"Cannot determine apt arch/codename (arch={arch!r} codename={codename!r})")

        line = f"deb [arch={arch} signed-by={keyring}] {DOCKER_APT_URL} {codename} stable\n"
        write_privileged_file(ctx.runner, Path(PATHS.docker_sources_list), line)

    def _grant_user(self, ctx) -> None:
        # Lets the user talk to the daemon without sudo.
        group = ctx.runner.run(["getent", "group", "docker"], check=False, read_only=True)
        if not group.ok:
            ctx.runner.run(["groupadd", "docker"], sudo=True)
        ctx.runner.run(["usermod", "-aG", "docker", ctx.config.user], sudo=True)

    def install(self, ctx) -> None:
        apt_update(ctx.runner)
        apt_install(ctx.runner, DOCKER_PREREQUISITES)
        self._add_repository(ctx)
        apt_update(ctx.runner)
        apt_install(ctx.runner, DOCKER_PACKAGES)
        self._grant_user(ctx)
