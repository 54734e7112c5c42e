from __future__ import annotations

import logging

from ..lib.pkg import apt_install, apt_update, apt_upgrade, missing_packages
from .base import BaseStep

logger = logging.getLogger(__name__)


class SystemPackagesStep(BaseStep):
    step_id = "30_system_packages"

    def is_needed(self, ctx) -> bool:
        missing = missing_packages(ctx.runner, ctx.config.system_packages)
        if missing:
            logger.info("Missing system packages: %s", " ".join(missing))
        return bool(missing)

    def apply(self, ctx) -> None:
        logger.info("Installing system dependencies...")
        apt_update(ctx.runner)
        if ctx.config.apt_upgrade:
            apt_upgrade(ctx.runner)
        apt_install(ctx.runner, ctx.config.system_packages)
