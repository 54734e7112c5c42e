from __future__ import annotations

import logging

from ..lib.files import read_text, write_file
from ..lib.profile import has_block, include_directive, legacy_include_directive, upsert_block
from .base import BaseStep

logger = logging.getLogger(__name__)


BLOCK_NAME = "profile.d"


class ProfileAggregateStep(BaseStep):
    """Wire every fragment in the profile directory into the primary profile."""

    step_id = "80_profile_aggregate"

    def _comment(self, ctx) -> str:
        return f"# Include all files in {ctx.config.profile_dir}"

    def _legacy(self, ctx) -> tuple[str, ...]:
        return (legacy_include_directive(ctx.config.profile_dir),)

    def is_needed(self, ctx) -> bool:
        text = read_text(ctx.config.primary_profile)
        directive = include_directive(ctx.config.profile_dir)
        if not has_block(text, BLOCK_NAME, directive):
            return True
        # Left behind by older, marker-less runs.
        return any(line.strip() in self._legacy(ctx) for line in text.splitlines())

    def apply(self, ctx) -> None:
        profile = ctx.config.primary_profile
        logger.info("Including %s from %s", str(ctx.config.profile_dir), str(profile))
        updated = upsert_block(
            read_text(profile),
            BLOCK_NAME,
            include_directive(ctx.config.profile_dir),
            comment=self._comment(ctx),
            legacy_lines=self._legacy(ctx),
        )
        write_file(profile, updated, dry_run=ctx.dry_run)
