from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..config import ProvisionConfig
from ..lib import git
from ..lib.env import NVM_REPO_URL
from ..lib.fragments import NVM_FRAGMENT
from .base import ToolInstallerStep

logger = logging.getLogger(__name__)


class NvmStep(ToolInstallerStep):
    """nvm is installed from git: clone, then check out the newest tag."""

    step_id = "60_nvm"
    tool = "nvm"

    def __init__(self) -> None:
        self._tag: Optional[str] = None

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.nvm_enabled

    def marker(self, config: ProvisionConfig) -> Path:
        return config.nvm_dir / "nvm.sh"

    def fragment_lines(self, config: ProvisionConfig) -> Sequence[str]:
        return NVM_FRAGMENT

    def install(self, ctx) -> None:
        nvm_dir = ctx.config.nvm_dir
        if not nvm_dir.is_dir():
            git.clone(ctx.runner, NVM_REPO_URL, nvm_dir)

        logger.info("Getting latest nvm version")
        tag = git.latest_tag(ctx.runner, nvm_dir)
        if tag is None:
            if ctx.dry_run:
                return
            raise RuntimeError(f"No tags found in {nvm_dir}")

        logger.info("Setting nvm version to %s", tag)
        git.checkout(ctx.runner, nvm_dir, tag)
        self._tag = tag

    def installed_version(self, ctx) -> Optional[str]:
        return self._tag
