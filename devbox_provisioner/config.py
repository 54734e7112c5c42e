from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError
from .lib.env import PATHS

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_PACKAGES: Tuple[str, ...] = (
    "git",
    "build-essential",
    "python3-dev",
    "python3-tk",
    "tk-dev",
    "zlib1g-dev",
    "libssl-dev",
    "libbz2-dev",
    "libffi-dev",
    "libreadline-dev",
    "libsqlite3-dev",
    "libncurses-dev",
    "liblzma-dev",
)

# Environment variable -> config field. Values are strings in the environment.
ENV_VARS: Dict[str, str] = {
    "ZSH_ENABLED": "zsh_enabled",
    "ZSH_THEME": "zsh_theme",
    "DOCKER_ENABLED": "docker_enabled",
    "DIRENV_ENABLED": "direnv_enabled",
    "PYENV_ENABLED": "pyenv_enabled",
    "PYENV_PYTHON_VERSION": "pyenv_python_version",
    "NVM_ENABLED": "nvm_enabled",
    "NVM_NODE_VERSION": "nvm_node_version",
    "APT_UPGRADE": "apt_upgrade",
}

_TRUE = {"yes", "y", "true", "1", "on"}
_FALSE = {"no", "n", "false", "0", "off"}


def parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    s = str(value).strip().lower()
    if s in _TRUE:
        return True
    if s in _FALSE:
        return False
    raise ConfigError(f"{name} must be yes/no (got {value!r})")


@dataclass(frozen=True)
class ProvisionConfig:
    """Immutable run configuration, built once and handed to every step."""

    home: Path
    user: str
    shell: str = "/bin/bash"

    zsh_enabled: bool = True
    zsh_theme: str = "robbyrussell"
    docker_enabled: bool = False
    direnv_enabled: bool = False
    pyenv_enabled: bool = True
    pyenv_python_version: str = "3:latest"
    nvm_enabled: bool = True
    nvm_node_version: str = "latest"
    apt_upgrade: bool = True

    system_packages: Tuple[str, ...] = DEFAULT_SYSTEM_PACKAGES
    host_config_path: Path = Path(PATHS.host_config)
    profile_dir_override: Optional[Path] = None

    dry_run: bool = False
    exec_shell: bool = False

    @property
    def profile_dir(self) -> Path:
        return self.profile_dir_override or (self.home / PATHS.profile_dir_rel)

    @property
    def shell_is_zsh(self) -> bool:
        return "zsh" in self.shell

    @property
    def primary_shell(self) -> str:
        return "zsh" if (self.zsh_enabled or self.shell_is_zsh) else "bash"

    @property
    def primary_profile(self) -> Path:
        return self.home / (".zshrc" if self.primary_shell == "zsh" else ".bashrc")

    @property
    def pyenv_root(self) -> Path:
        return self.home / ".pyenv"

    @property
    def pyenv_bin(self) -> Path:
        return self.pyenv_root / "bin" / "pyenv"

    @property
    def nvm_dir(self) -> Path:
        return self.home / ".nvm"

    @property
    def oh_my_zsh_dir(self) -> Path:
        return self.home / ".oh-my-zsh"


_BOOL_FIELDS = {f.name for f in fields(ProvisionConfig) if f.type in ("bool", bool)}
_VERSION_FIELDS = {"pyenv_python_version", "nvm_node_version"}


def _coerce(key: str, value: Any) -> Any:
    if key in _BOOL_FIELDS:
        return parse_bool(key, value)
    if key == "system_packages":
        if isinstance(value, str):
            value = value.split()
        if not isinstance(value, (list, tuple)):
            raise ConfigError("system_packages must be a list of package names")
        return tuple(str(p).strip() for p in value if str(p).strip())
    if key in {"host_config_path", "home", "profile_dir"}:
        return Path(str(value)).expanduser()
    if key in _VERSION_FIELDS and not isinstance(value, str):
        # YAML reads an unquoted 3.10 as the float 3.1.
        raise ConfigError(f"{key} must be a string; quote it in the config file (got {value!r})")
    return str(value).strip()


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return raw


def load_config(
    *,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ProvisionConfig:
    """Build the run configuration: defaults < YAML file < environment < overrides."""

    env = dict(os.environ if environ is None else environ)

    home = Path(env.get("HOME") or Path.home())
    user = env.get("USER") or env.get("LOGNAME") or home.name
    cfg = ProvisionConfig(home=home, user=user, shell=env.get("SHELL") or "/bin/bash")

    layered: Dict[str, Any] = {}
    if config_path:
        for key, value in load_config_file(config_path).items():
            layered[str(key).lower()] = value
    for var, key in ENV_VARS.items():
        if var in env:
            layered[key] = env[var]
    for key, value in (overrides or {}).items():
        if value is not None:
            layered[key] = value

    known = ({f.name for f in fields(ProvisionConfig)} - {"profile_dir_override"}) | {"profile_dir"}
    changes: Dict[str, Any] = {}
    for key, value in layered.items():
        if key not in known:
            raise ConfigError(f"Unknown config key: {key}")
        coerced = _coerce(key, value)
        changes["profile_dir_override" if key == "profile_dir" else key] = coerced

    cfg = replace(cfg, **changes)
    if not cfg.zsh_theme:
        raise ConfigError("zsh_theme must not be empty")
    for key in ("pyenv_python_version", "nvm_node_version"):
        if not getattr(cfg, key):
            raise ConfigError(f"{key} must not be empty")

    logger.debug("Loaded config: %s", cfg)
    return cfg
