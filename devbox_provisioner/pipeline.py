from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .config import ProvisionConfig
from .errors import PrivilegeError, StepFailed, StepVerificationError
from .lib.command import CommandRunner
from .state_store import mark_step_completed

logger = logging.getLogger(__name__)

COMPLETION_NOTICE = "All done, ensure to re-open your terminal to get all changes."


@dataclass
class StepContext:
    config: ProvisionConfig
    runner: CommandRunner
    state: Dict[str, Any]

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run


class Step(Protocol):
    """A single idempotent step.

    is_needed() must be side-effect free. After apply(), verify() must hold,
    which makes the next run's is_needed() false.
    """

    step_id: str

    def enabled(self, config: ProvisionConfig) -> bool:
        ...

    def is_needed(self, ctx: StepContext) -> bool:
        ...

    def apply(self, ctx: StepContext) -> None:
        ...

    def verify(self, ctx: StepContext) -> bool:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]
    disabled_steps: List[str] = field(default_factory=list)


def run_pipeline(
    *,
    ctx: StepContext,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    on_step_done: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> PipelineResult:
    """Run steps in order; the first failure aborts the run."""

    ids = [s.step_id for s in steps]
    for bound in (start_at, stop_after):
        if bound is not None and bound not in ids:
            raise ValueError(f"Unknown step id {bound!r} (known: {', '.join(ids)})")
    if start_at is not None and stop_after is not None and ids.index(stop_after) < ids.index(start_at):
        raise ValueError(f"stop_after {stop_after!r} comes before start_at {start_at!r}")

    ran: List[str] = []
    skipped: List[str] = []
    disabled: List[str] = []
    state = ctx.state

    started = start_at is None

    for index, step in enumerate(steps):
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        state.setdefault("execution", {})["current_step"] = step.step_id

        try:
            if not step.enabled(ctx.config):
                logger.info("Skipping step %s (disabled)", step.step_id)
                disabled.append(step.step_id)
            elif not step.is_needed(ctx):
                logger.info("Skipping step %s (already done)", step.step_id)
                skipped.append(step.step_id)
            else:
                logger.info("Running step %s", step.step_id)
                step.apply(ctx)
                if not ctx.dry_run and not step.verify(ctx):
                    raise StepVerificationError(f"{step.step_id} did not reach its desired state")
                ran.append(step.step_id)
        except PrivilegeError:
            raise
        except Exception as e:
            remaining = ids[index + 1 :]
            logger.error("Step %s failed: %s", step.step_id, e)
            if remaining:
                logger.error("Not running: %s", ", ".join(remaining))
            state.setdefault("execution", {}).setdefault("errors", []).append(
                {"step": step.step_id, "error": str(e)}
            )
            raise StepFailed(step.step_id, remaining, e) from e

        mark_step_completed(state, step.step_id)
        if on_step_done is not None:
            on_step_done(state)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    logger.info(COMPLETION_NOTICE)
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped, disabled_steps=disabled)
