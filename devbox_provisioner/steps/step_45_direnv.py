from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..config import ProvisionConfig
from ..lib.env import PATHS
from ..lib.fragments import direnv_fragment
from ..lib.pkg import apt_install
from .base import ToolInstallerStep


class DirenvStep(ToolInstallerStep):
    step_id = "45_direnv"
    tool = "direnv"

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.direnv_enabled

    def marker(self, config: ProvisionConfig) -> Path:
        return Path(PATHS.direnv_bin)

    def fragment_lines(self, config: ProvisionConfig) -> Sequence[str]:
        return direnv_fragment(config.primary_shell)

    def install(self, ctx) -> None:
        apt_install(ctx.runner, ["direnv"], fix_broken=False)
