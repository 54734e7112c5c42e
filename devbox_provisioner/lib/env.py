from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    state_rel: str = ".local/state/devbox-provisioner/state.json"
    log_rel: str = ".local/state/devbox-provisioner/provision.log"
    profile_dir_rel: str = ".profile.d"
    host_config: str = "/etc/wsl.conf"
    docker_bin: str = "/usr/bin/docker"
    direnv_bin: str = "/usr/bin/direnv"
    docker_keyring_dir: str = "/etc/apt/keyrings"
    docker_sources_list: str = "/etc/apt/sources.list.d/docker.list"
    os_release: str = "/etc/os-release"

    def state_default(self, home: Path) -> Path:
        return home / self.state_rel

    def log_default(self, home: Path) -> Path:
        return home / self.log_rel


PATHS = Paths()

PYENV_INSTALLER_URL = "https://pyenv.run"
NVM_REPO_URL = "https://github.com/nvm-sh/nvm.git"
OH_MY_ZSH_INSTALLER_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
DOCKER_GPG_URL = "https://download.docker.com/linux/ubuntu/gpg"
DOCKER_APT_URL = "https://download.docker.com/linux/ubuntu"
