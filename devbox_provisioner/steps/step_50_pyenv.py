from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..config import ProvisionConfig
from ..lib.download import fetch_and_execute
from ..lib.env import PYENV_INSTALLER_URL
from ..lib.fragments import PYENV_FRAGMENT
from .base import ToolInstallerStep


class PyenvStep(ToolInstallerStep):
    step_id = "50_pyenv"
    tool = "pyenv"

    def enabled(self, config: ProvisionConfig) -> bool:
        return config.pyenv_enabled

    def marker(self, config: ProvisionConfig) -> Path:
        return config.pyenv_bin

    def fragment_lines(self, config: ProvisionConfig) -> Sequence[str]:
        return PYENV_FRAGMENT

    def install(self, ctx) -> None:
        fetch_and_execute(ctx.runner, PYENV_INSTALLER_URL, ["bash"])
