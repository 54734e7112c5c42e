from __future__ import annotations

import logging
import os

from ..errors import PrivilegeError
from .base import BaseStep

logger = logging.getLogger(__name__)


def running_as_root() -> bool:
    return os.geteuid() == 0


class PreflightStep(BaseStep):
    """Refuse to run as root, then warm the sudo credential cache."""

    step_id = "00_preflight"

    def is_needed(self, ctx) -> bool:
        return True

    def apply(self, ctx) -> None:
        if running_as_root():
            logger.error("Please run without sudo and wait for the sudo password to be requested")
            raise PrivilegeError("refusing to run as root")

        r = ctx.runner.run(
            ["echo", f"Starting local dev setup for {ctx.config.user}..."],
            sudo=True,
            check=False,
            capture=False,
        )
        if not r.ok:
            logger.error("Aborted")
            raise PrivilegeError("sudo priming declined or failed")

    def verify(self, ctx) -> bool:
        return True
