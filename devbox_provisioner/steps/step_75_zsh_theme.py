from __future__ import annotations

import logging

from ..config import ProvisionConfig
from ..lib.files import read_text, write_file
from ..lib.profile import read_zsh_theme, set_zsh_theme
from .base import BaseStep

logger = logging.getLogger(__name__)


class ZshThemeStep(BaseStep):
    step_id = "75_zsh_theme"

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.zsh_enabled

    def is_needed(self, ctx) -> bool:
        theme = ctx.config.zsh_theme
        if read_zsh_theme(read_text(ctx.config.home / ".zshrc")) == theme:
            logger.info("zsh theme %s is already installed... Done", theme)
            return False
        return True

    def apply(self, ctx) -> None:
        zshrc = ctx.config.home / ".zshrc"
        logger.info("Installing %s as zsh theme", ctx.config.zsh_theme)
        write_file(zshrc, set_zsh_theme(read_text(zshrc), ctx.config.zsh_theme), dry_run=ctx.dry_run)
