"""
Tests for configuration loading and layering.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from devbox_provisioner.config import DEFAULT_SYSTEM_PACKAGES, load_config, parse_bool
from devbox_provisioner.errors import ConfigError

BASE_ENV = {"HOME": "/home/dev", "USER": "dev", "SHELL": "/bin/bash"}


class TestDefaults:
    def test_documented_defaults(self):
        cfg = load_config(environ=BASE_ENV)
        assert cfg.zsh_enabled is True
        assert cfg.zsh_theme == "robbyrussell"
        assert cfg.docker_enabled is False
        assert cfg.direnv_enabled is False
        assert cfg.pyenv_enabled is True
        assert cfg.pyenv_python_version == "3:latest"
        assert cfg.nvm_enabled is True
        assert cfg.nvm_node_version == "latest"
        assert cfg.system_packages == DEFAULT_SYSTEM_PACKAGES
        assert cfg.host_config_path == Path("/etc/wsl.conf")

    def test_derived_paths(self):
        cfg = load_config(environ=BASE_ENV)
        assert cfg.profile_dir == Path("/home/dev/.profile.d")
        assert cfg.pyenv_bin == Path("/home/dev/.pyenv/bin/pyenv")
        assert cfg.nvm_dir == Path("/home/dev/.nvm")

    def test_primary_profile_follows_zsh(self):
        assert load_config(environ=BASE_ENV).primary_profile == Path("/home/dev/.zshrc")
        no_zsh = dict(BASE_ENV, ZSH_ENABLED="no")
        assert load_config(environ=no_zsh).primary_profile == Path("/home/dev/.bashrc")
        zsh_shell = dict(no_zsh, SHELL="/usr/bin/zsh")
        assert load_config(environ=zsh_shell).primary_profile == Path("/home/dev/.zshrc")


class TestLayering:
    def test_environment_overrides_defaults(self):
        cfg = load_config(environ=dict(BASE_ENV, DOCKER_ENABLED="yes", NVM_NODE_VERSION="20"))
        assert cfg.docker_enabled is True
        assert cfg.nvm_node_version == "20"

    def test_file_then_env_then_overrides(self, tmp_path):
        cfg_file = tmp_path / "devbox.yaml"
        cfg_file.write_text(
            "zsh_theme: agnoster\n"
            "docker_enabled: true\n"
            "system_packages: [git, curl]\n"
            "profile_dir: /opt/profile.d\n"
        )
        cfg = load_config(
            environ=dict(BASE_ENV, DOCKER_ENABLED="no"),
            config_path=str(cfg_file),
            overrides={"dry_run": True, "exec_shell": None},
        )
        assert cfg.zsh_theme == "agnoster"
        assert cfg.docker_enabled is False
        assert cfg.system_packages == ("git", "curl")
        assert cfg.profile_dir == Path("/opt/profile.d")
        assert cfg.dry_run is True
        assert cfg.exec_shell is False

    def test_config_is_frozen(self):
        cfg = load_config(environ=BASE_ENV)
        with pytest.raises(Exception):
            cfg.docker_enabled = True  # type: ignore[misc]


class TestValidation:
    @pytest.mark.parametrize("value", ["yes", "YES", "true", "1", "on"])
    def test_truthy(self, value):
        assert parse_bool("X", value) is True

    @pytest.mark.parametrize("value", ["no", "False", "0", "off"])
    def test_falsy(self, value):
        assert parse_bool("X", value) is False

    def test_bad_toggle(self):
        with pytest.raises(ConfigError):
            load_config(environ=dict(BASE_ENV, PYENV_ENABLED="maybe"))

    def test_unknown_file_key(self, tmp_path):
        cfg_file = tmp_path / "devbox.yaml"
        cfg_file.write_text("ruby_enabled: yes\n")
        with pytest.raises(ConfigError):
            load_config(environ=BASE_ENV, config_path=str(cfg_file))

    def test_non_yaml_file(self, tmp_path):
        cfg_file = tmp_path / "devbox.json"
        cfg_file.write_text("{}")
        with pytest.raises(ConfigError):
            load_config(environ=BASE_ENV, config_path=str(cfg_file))

    def test_empty_theme(self):
        with pytest.raises(ConfigError):
            load_config(environ=dict(BASE_ENV, ZSH_THEME=" "))

    @pytest.mark.parametrize("line", ["pyenv_python_version: 3.10\n", "nvm_node_version: 20\n"])
    def test_unquoted_version_in_file(self, tmp_path, line):
        cfg_file = tmp_path / "devbox.yaml"
        cfg_file.write_text(line)
        with pytest.raises(ConfigError, match="quote"):
            load_config(environ=BASE_ENV, config_path=str(cfg_file))

    def test_quoted_version_in_file(self, tmp_path):
        cfg_file = tmp_path / "devbox.yaml"
        cfg_file.write_text('pyenv_python_version: "3.10"\n')
        cfg = load_config(environ=BASE_ENV, config_path=str(cfg_file))
        assert cfg.pyenv_python_version == "3.10"
