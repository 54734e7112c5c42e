from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..config import ProvisionConfig
from ..lib.fragments import fragment_is_current, write_fragment
from ..state_store import record_tool

logger = logging.getLogger(__name__)


class BaseStep:
    """Defaults shared by the step classes.

    A step is enabled unless it overrides enabled(), and it is verified when
    it is no longer needed.
    """

    step_id = ""

    def enabled(self, config: ProvisionConfig) -> bool:
        return True

    def verify(self, ctx) -> bool:
        return not self.is_needed(ctx)

    def is_needed(self, ctx) -> bool:
        raise NotImplementedError

    def apply(self, ctx) -> None:
        raise NotImplementedError


class ToolInstallerStep(BaseStep):
    """An optional tool: marker on disk plus one profile fragment.

    Subclasses provide marker(), fragment_lines(), install() and
    optionally installed_version().
    """

    tool = ""

    def marker(self, config: ProvisionConfig) -> Path:
        raise NotImplementedError

    def fragment_lines(self, config: ProvisionConfig) -> Sequence[str]:
        raise NotImplementedError

    def install(self, ctx) -> None:
        raise NotImplementedError

    def installed_version(self, ctx) -> Optional[str]:
        return None

    def is_installed(self, ctx) -> bool:
        return self.marker(ctx.config).exists()

    def is_needed(self, ctx) -> bool:
        if not self.is_installed(ctx):
            return True
        fragment = ctx.config.profile_dir / self.tool
        if not fragment_is_current(fragment, self.fragment_lines(ctx.config)):
            logger.info("%s is installed but its profile entry is missing or stale", self.tool)
            return True
        logger.info("%s is already installed... Done", self.tool)
        return False

    def apply(self, ctx) -> None:
        if self.is_installed(ctx):
            logger.info("%s is already installed", self.tool)
        else:
            logger.info("Installing %s", self.tool)
            self.install(ctx)

        path = write_fragment(
            ctx.config.profile_dir,
            self.tool,
            self.fragment_lines(ctx.config),
            dry_run=ctx.dry_run,
        )
        record_tool(ctx.state, self.tool, installed_version=self.installed_version(ctx), fragment_path=path)
