from __future__ import annotations

import argparse
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ProvisionConfig, load_config
from .errors import CommandError, PrivilegeError, ProvisionError, StepFailed
from .lib.command import CommandRunner
from .lib.env import PATHS
from .logging_utils import configure_logging
from .pipeline import StepContext, run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    DirenvStep,
    DockerStep,
    HostConfigStep,
    NodeStep,
    NvmStep,
    PreflightStep,
    ProfileAggregateStep,
    ProfileDirStep,
    PythonStep,
    PyenvStep,
    SystemPackagesStep,
    ZshStep,
    ZshThemeStep,
)
from .steps.step_00_preflight import running_as_root

logger = logging.getLogger(__name__)


def build_steps():
    return [
        PreflightStep(),
        HostConfigStep(),
        ProfileDirStep(),
        SystemPackagesStep(),
        DockerStep(),
        DirenvStep(),
        PyenvStep(),
        PythonStep(),
        NvmStep(),
        NodeStep(),
        ZshStep(),
        ZshThemeStep(),
        ProfileAggregateStep(),
    ]


def run(
    config: ProvisionConfig,
    *,
    runner: Optional[CommandRunner] = None,
    state_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    steps=None,
) -> Dict[str, Any]:
    """Run the provisioning pipeline, persisting the tool state after every step."""

    state_file = state_path or str(PATHS.state_default(config.home))
    runner = runner or CommandRunner(dry_run=config.dry_run)

    state = ensure_defaults(load_state(state_file))
    ctx = StepContext(config=config, runner=runner, state=state)

    def persist(s: Dict[str, Any]) -> None:
        if not runner.dry_run:
            save_state(state_file, s)

    # A refused run must leave no files behind.
    refused = False
    try:
        result = run_pipeline(
            ctx=ctx,
            steps=steps if steps is not None else build_steps(),
            start_at=start_at,
            stop_after=stop_after,
            on_step_done=persist,
        )
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        summary["disabled_steps"] = result.disabled_steps
        return result.state
    except PrivilegeError:
        refused = True
        raise
    finally:
        if not refused:
            persist(state)


def exec_login_shell(config: ProvisionConfig) -> None:
    """Replace this process with a zsh login shell when zsh is wanted but not active."""

    if not (config.zsh_enabled and not config.shell_is_zsh):
        return
    zsh = shutil.which("zsh")
    if zsh is None:
        logger.warning("zsh not found on PATH; re-open your terminal instead")
        return
    logger.info("Starting %s", zsh)
    for h in logging.getLogger().handlers:
        h.flush()
    os.execv(zsh, [zsh, "-l"])


def exit_code_for(error: BaseException) -> int:
    cause = error.cause if isinstance(error, StepFailed) else error
    if isinstance(cause, PrivilegeError):
        return 0
    if isinstance(cause, CommandError):
        return cause.returncode or 1
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="devbox-provision")
    p.add_argument("--config", default=None, help="Optional YAML config file")
    p.add_argument("--state", default=None, help="Path to tool state (json|yaml)")
    p.add_argument("--log", default=None, help="Path to provisioning log")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 50_pyenv)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--dry-run", action="store_true", help="Log mutating commands without running them")
    p.add_argument("--exec-shell", action="store_true", help="Re-exec into zsh after a successful run")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    home = Path(os.environ.get("HOME") or Path.home())
    # As root the preflight refuses the run; log to the console only.
    log_path = None if running_as_root() else (args.log or str(PATHS.log_default(home)))
    configure_logging(
        log_path=log_path,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        config = load_config(
            config_path=args.config,
            overrides={
                "dry_run": True if args.dry_run else None,
                "exec_shell": True if args.exec_shell else None,
            },
        )
        run(
            config,
            state_path=args.state,
            start_at=args.start_at,
            stop_after=args.stop_after,
        )
    except PrivilegeError as e:
        logger.info("Provisioning aborted: %s", e)
        return 0
    except (ProvisionError, ValueError) as e:
        if not isinstance(e, StepFailed):
            logger.error("%s", e)
        return exit_code_for(e)
    except OSError as e:
        logger.error("State file error: %s", e)
        return 1

    if config.exec_shell:
        exec_login_shell(config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
