from .step_00_preflight import PreflightStep
from .step_10_host_config import HostConfigStep
from .step_20_profile_dir import ProfileDirStep
from .step_30_system_packages import SystemPackagesStep
from .step_40_docker import DockerStep
from .step_45_direnv import DirenvStep
from .step_50_pyenv import PyenvStep
from .step_55_python import PythonStep
from .step_60_nvm import NvmStep
from .step_65_node import NodeStep
from .step_70_zsh import ZshStep
from .step_75_zsh_theme import ZshThemeStep
from .step_80_profile_aggregate import ProfileAggregateStep

__all__ = [
    "PreflightStep",
    "HostConfigStep",
    "ProfileDirStep",
    "SystemPackagesStep",
    "DockerStep",
    "DirenvStep",
    "PyenvStep",
    "PythonStep",
    "NvmStep",
    "NodeStep",
    "ZshStep",
    "ZshThemeStep",
    "ProfileAggregateStep",
]
