from __future__ import annotations

import logging

from ..lib.files import ensure_dir
from .base import BaseStep

logger = logging.getLogger(__name__)


class ProfileDirStep(BaseStep):
    step_id = "20_profile_dir"

    def is_needed(self, ctx) -> bool:
        return not ctx.config.profile_dir.is_dir()

    def apply(self, ctx) -> None:
        logger.info("Creating %s", str(ctx.config.profile_dir))
        ensure_dir(ctx.config.profile_dir, mode=0o755, dry_run=ctx.dry_run)
