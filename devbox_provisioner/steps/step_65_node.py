from __future__ import annotations

import logging
import shlex
from typing import Optional

from ..lib.versions import ensure_concrete, is_latest
from ..state_store import record_tool
from .base import BaseStep

logger = logging.getLogger(__name__)


class NodeStep(BaseStep):
    """Install one Node.js release through nvm.

    nvm is a shell function, so every call sources nvm.sh in a bash child.
    """

    step_id = "65_node"

    def __init__(self) -> None:
        self._version: Optional[str] = None

    def _nvm(self, ctx, *args: str, read_only: bool = False, check: bool = True):
        script = '. "$NVM_DIR/nvm.sh" && nvm ' + " ".join(shlex.quote(a) for a in args)
        return ctx.runner.run(
            ["bash", "-c", script],
            env={"NVM_DIR": str(ctx.config.nvm_dir)},
            read_only=read_only,
            check=check,
        )

    def resolve_version(self, ctx) -> str:
        if self._version is not None:
            return self._version

        selector = ctx.config.nvm_node_version
        if is_latest(selector):
            out = self._nvm(ctx, "version-remote", "--lts", read_only=True).stdout.strip()
            resolved = None if out in {"", "N/A"} else out.lstrip("v")
            self._version = ensure_concrete(selector, resolved)
            logger.info("Resolved node %s to %s", selector, self._version)
        else:
            self._version = ensure_concrete(selector, selector.lstrip("v"))
        return self._version

    def is_installed(self, ctx, version: str) -> bool:
        r = self._nvm(ctx, "version", version, read_only=True, check=False)
        out = r.stdout.strip()
        return r.ok and out not in {"", "N/A"}

    def is_needed(self, ctx) -> bool:
        if not (ctx.config.nvm_dir / "nvm.sh").exists():
            logger.warning("nvm not found, skipping installation")
            return False

        version = self.resolve_version(ctx)
        if self.is_installed(ctx, version):
            logger.info("node %s is already installed... Done", version)
            record_tool(ctx.state, "node", installed_version=version)
            return False
        return True

    def apply(self, ctx) -> None:
        version = self.resolve_version(ctx)
        logger.info("Installing node %s", version)
        self._nvm(ctx, "install", version)
        record_tool(ctx.state, "node", installed_version=version)
