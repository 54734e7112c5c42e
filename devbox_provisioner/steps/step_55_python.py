from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..config import ProvisionConfig
from ..lib.versions import ensure_concrete, is_latest, latest_prefix, pick_latest
from ..state_store import record_tool
from .base import BaseStep

logger = logging.getLogger(__name__)


class PythonStep(BaseStep):
    """Install one CPython build through pyenv."""

    step_id = "55_python"

    def __init__(self) -> None:
        self._version: Optional[str] = None

    def _env(self, config: ProvisionConfig) -> Dict[str, str]:
        return {"PYENV_ROOT": str(config.pyenv_root)}

    def _pyenv(self, ctx, *args: str, read_only: bool = False):
        return ctx.runner.run(
            [str(ctx.config.pyenv_bin), *args],
            env=self._env(ctx.config),
            read_only=read_only,
        )

    def resolve_version(self, ctx) -> str:
        """Turn the selector into a concrete version, querying pyenv for "latest"."""

        if self._version is not None:
            return self._version

        selector = ctx.config.pyenv_python_version
        if is_latest(selector):
            listing = self._pyenv(ctx, "install", "--list", read_only=True).stdout
            resolved = pick_latest(listing.splitlines(), latest_prefix(selector))
            self._version = ensure_concrete(selector, resolved)
            logger.info("Resolved python %s to %s", selector, self._version)
        else:
            self._version = ensure_concrete(selector, selector)
        return self._version

    def installed_versions(self, ctx) -> List[str]:
        out = self._pyenv(ctx, "versions", "--bare", read_only=True).stdout
        return [line.strip() for line in out.splitlines() if line.strip()]

    def _has(self, installed: List[str], version: str) -> bool:
        return version in installed or pick_latest(installed, version) is not None

    def is_needed(self, ctx) -> bool:
        if not ctx.config.pyenv_bin.exists():
            logger.warning("pyenv not found, skipping installation")
            return False

        version = self.resolve_version(ctx)
        if self._has(self.installed_versions(ctx), version):
            logger.info("python %s is already installed... Done", version)
            record_tool(ctx.state, "python", installed_version=version)
            return False
        return True

    def apply(self, ctx) -> None:
        version = self.resolve_version(ctx)
        logger.info("Installing python %s", version)
        self._pyenv(ctx, "install", version)
        record_tool(ctx.state, "python", installed_version=version)
