"""
Shared test fixtures: a temporary HOME and a scripted fake machine.

The fake machine stands in for every external command the provisioner runs
and reproduces the on-disk effects (binaries, manager homes, rc files) that
the steps use as their idempotency markers.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from devbox_provisioner.config import load_config
from devbox_provisioner.errors import CommandError
from devbox_provisioner.lib.command import CmdResult
from devbox_provisioner.steps import step_00_preflight

PYENV_LISTING = "\n".join(
    [
        "Available versions:",
        "  2.7.18",
        "  3.11.9",
        "  3.12.4",
        "  3.13.1",
        "  3.13.1t",
        "  3.14.0a3",
        "  pypy3.10-7.3.17",
    ]
)

NVM_TAGS = "v0.39.7\nv0.40.0\nv0.40.1\n"

LTS_NODE = "v22.11.0"

ZSHRC = 'export ZSH="$HOME/.oh-my-zsh"\nZSH_THEME="robbyrussell"\nsource $ZSH/oh-my-zsh.sh\n'

Handler = Callable[[List[str], Optional[str]], Tuple[int, str]]


class FakeMachine:
    """Records commands and simulates their effects under a temporary HOME."""

    def __init__(self, home: Path, *, dry_run: bool = False) -> None:
        self.home = home
        self.dry_run = dry_run
        self.calls: List[List[str]] = []
        self.inputs: Dict[int, Optional[str]] = {}
        self.packages = set()
        self.pythons: List[str] = []
        self.nodes: List[str] = []
        self.failures: Dict[str, int] = {}
        self.overrides: List[Tuple[str, Handler]] = []

    # --- scripting -------------------------------------------------------

    def fail(self, needle: str, returncode: int = 100) -> None:
        """Make any command whose text contains needle exit non-zero."""
        self.failures[needle] = returncode

    def on(self, needle: str, handler: Handler) -> None:
        self.overrides.append((needle, handler))

    def commands(self, needle: str = "") -> List[str]:
        return [" ".join(c) for c in self.calls if needle in " ".join(c)]

    # --- runner protocol -------------------------------------------------

    def run(
        self,
        argv,
        *,
        check=True,
        env=None,
        cwd=None,
        input_text=None,
        sudo=False,
        read_only=False,
        capture=True,
    ) -> CmdResult:
        full = ["sudo", *argv] if sudo else list(argv)
        text = " ".join(full)
        if self.dry_run and not read_only:
            self.calls.append(full)
            return CmdResult(argv=full, returncode=0, stdout="", stderr="")

        self.calls.append(full)
        self.inputs[len(self.calls) - 1] = input_text

        rc, out = 0, ""
        for needle, code in self.failures.items():
            if needle in text:
                rc, out = code, ""
                break
        else:
            for needle, handler in reversed(self.overrides):
                if needle in text:
                    rc, out = handler(full, input_text)
                    break
            else:
                rc, out = self._simulate(full, text, input_text)

        if check and rc != 0:
            raise CommandError(full, rc, "simulated failure")
        return CmdResult(argv=full, returncode=rc, stdout=out, stderr="")

    # --- behaviour -------------------------------------------------------

    def _touch(self, path: Path, contents: str = "") -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")

    def _simulate(self, argv: List[str], text: str, input_text: Optional[str]) -> Tuple[int, str]:
        if argv[0] == "dpkg-query":
            pkg = argv[-1]
            if pkg in self.packages:
                return 0, "install ok installed"
            return 1, ""
        if "apt-get install" in text:
            self.packages.update(a for a in argv if not a.startswith("-") and a not in {"sudo", "apt-get", "install"})
            return 0, ""
        if argv[0] == "curl":
            return 0, f"#!/bin/sh\n# installer from {argv[-1]}\n"
        if argv == ["bash"] and input_text and "pyenv.run" in input_text:
            self._touch(self.home / ".pyenv" / "bin" / "pyenv")
            return 0, ""
        if argv[:2] == ["sh", "-s"] and input_text and "ohmyzsh" in input_text:
            (self.home / ".oh-my-zsh").mkdir(parents=True, exist_ok=True)
            zshrc = self.home / ".zshrc"
            if not zshrc.exists():
                self._touch(zshrc, ZSHRC)
            return 0, ""
        if argv[0].endswith("pyenv"):
            sub = argv[1:]
            if sub == ["install", "--list"]:
                return 0, PYENV_LISTING
            if sub == ["versions", "--bare"]:
                return 0, "\n".join(self.pythons)
            if sub[0] == "install":
                self.pythons.append(sub[1])
                return 0, ""
        if argv[:2] == ["git", "clone"]:
            Path(argv[-1]).mkdir(parents=True, exist_ok=True)
            return 0, ""
        if argv[0] == "git" and "tag" in argv:
            return 0, NVM_TAGS
        if argv[0] == "git" and "checkout" in argv:
            self._touch(Path(argv[2]) / "nvm.sh")
            return 0, ""
        if argv[:2] == ["bash", "-c"] and "nvm " in argv[2]:
            cmd = argv[2].split("nvm ", 1)[1].split()
            if cmd[:2] == ["version-remote", "--lts"]:
                return 0, LTS_NODE
            if cmd[0] == "version":
                return (0, "v" + cmd[1]) if cmd[1] in self.nodes else (0, "N/A")
            if cmd[0] == "install":
                self.nodes.append(cmd[1])
                return 0, ""
        if argv[:2] == ["getent", "group"]:
            return 2, ""
        if argv[0] == "dpkg" and "--print-architecture" in argv:
            return 0, "amd64\n"
        return 0, ""


@pytest.fixture(autouse=True)
def not_root(monkeypatch):
    """Tests may run as root inside containers; the preflight must not see it."""
    monkeypatch.setattr(step_00_preflight.os, "geteuid", lambda: 1000)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home" / "dev"
    h.mkdir(parents=True)
    return h


@pytest.fixture
def etc_dir(tmp_path: Path) -> Path:
    d = tmp_path / "etc"
    d.mkdir()
    return d


@pytest.fixture
def make_config(home: Path, etc_dir: Path):
    """Build a config against the temporary HOME; keyword args are env vars."""

    def _make(**env: str):
        environ = {"HOME": str(home), "USER": "dev", "SHELL": "/bin/bash"}
        environ.update(env)
        return load_config(
            environ=environ,
            overrides={"host_config_path": str(etc_dir / "wsl.conf")},
        )

    return _make


@pytest.fixture
def machine(home: Path) -> FakeMachine:
    return FakeMachine(home)


@pytest.fixture
def state_path(tmp_path: Path) -> str:
    return str(tmp_path / "state" / "state.json")


@pytest.fixture
def dry_machine(home: Path) -> FakeMachine:
    return FakeMachine(home, dry_run=True)
