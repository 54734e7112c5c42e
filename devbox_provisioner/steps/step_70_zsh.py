from __future__ import annotations

import logging
import shutil

from ..config import ProvisionConfig
from ..lib.download import fetch_and_execute
from ..lib.env import OH_MY_ZSH_INSTALLER_URL
from ..lib.pkg import apt_install
from ..state_store import record_tool
from .base import BaseStep

logger = logging.getLogger(__name__)


class ZshStep(BaseStep):
    """zsh from apt, made the login shell, customized by oh-my-zsh."""

    step_id = "70_zsh"

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.zsh_enabled

    def is_needed(self, ctx) -> bool:
        if ctx.config.oh_my_zsh_dir.is_dir():
            logger.info("zsh is already installed... Done")
            return False
        return True

    def apply(self, ctx) -> None:
        logger.info("Installing apt zsh...")
        apt_install(ctx.runner, ["zsh"], fix_broken=False)

        if not ctx.config.shell_is_zsh:
            zsh = shutil.which("zsh") or "/usr/bin/zsh"
            ctx.runner.run(["chsh", "-s", zsh], capture=False)

        logger.info("Installing oh-my-zsh...")
        # The installer must neither switch shells nor start zsh on its own.
        fetch_and_execute(
            ctx.runner,
            OH_MY_ZSH_INSTALLER_URL,
            ["sh", "-s", "--", "--unattended"],
            env={"RUNZSH": "no", "CHSH": "no"},
        )
        record_tool(ctx.state, "oh-my-zsh")
