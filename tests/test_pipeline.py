"""
Tests for the pipeline driver: ordering, skips, fail-fast.
"""

from __future__ import annotations

import pytest

from devbox_provisioner.errors import PrivilegeError, StepFailed
from devbox_provisioner.pipeline import StepContext, run_pipeline
from devbox_provisioner.state_store import ensure_defaults
from devbox_provisioner.steps.base import BaseStep


class RecordingStep(BaseStep):
    def __init__(self, step_id, log, *, enabled=True, needed=True, raises=None, sticks=False):
        self.step_id = step_id
        self.log = log
        self._enabled = enabled
        self._needed = needed
        self._raises = raises
        self._sticks = sticks

    def enabled(self, config):
        return self._enabled

    def is_needed(self, ctx):
        return self._needed

    def apply(self, ctx):
        self.log.append(self.step_id)
        if self._raises is not None:
            raise self._raises
        if not self._sticks:
            self._needed = False


@pytest.fixture
def ctx(make_config, machine):
    return StepContext(config=make_config(), runner=machine, state=ensure_defaults({}))


class TestRunPipeline:
    def test_runs_in_order(self, ctx):
        log = []
        steps = [RecordingStep(s, log) for s in ("a", "b", "c")]

        result = run_pipeline(ctx=ctx, steps=steps)

        assert log == ["a", "b", "c"]
        assert result.ran_steps == ["a", "b", "c"]
        assert ctx.state["execution"]["completed_steps"] == ["a", "b", "c"]
        assert ctx.state["execution"]["current_step"] is None

    def test_disabled_and_satisfied_steps_are_skipped(self, ctx):
        log = []
        steps = [
            RecordingStep("a", log, enabled=False),
            RecordingStep("b", log, needed=False),
            RecordingStep("c", log),
        ]

        result = run_pipeline(ctx=ctx, steps=steps)

        assert log == ["c"]
        assert result.disabled_steps == ["a"]
        assert result.skipped_steps == ["b"]

    def test_failure_aborts_and_reports_remaining(self, ctx):
        log = []
        steps = [
            RecordingStep("a", log),
            RecordingStep("b", log, raises=RuntimeError("boom")),
            RecordingStep("c", log),
            RecordingStep("d", log),
        ]

        with pytest.raises(StepFailed) as exc:
            run_pipeline(ctx=ctx, steps=steps)

        assert log == ["a", "b"]
        assert exc.value.step_id == "b"
        assert exc.value.remaining == ["c", "d"]
        assert isinstance(exc.value.cause, RuntimeError)
        assert ctx.state["execution"]["errors"] == [{"step": "b", "error": "boom"}]
        assert "b" not in ctx.state["execution"]["completed_steps"]

    def test_unverified_step_fails(self, ctx):
        log = []
        steps = [RecordingStep("a", log, sticks=True), RecordingStep("b", log)]

        with pytest.raises(StepFailed) as exc:
            run_pipeline(ctx=ctx, steps=steps)

        assert exc.value.step_id == "a"
        assert log == ["a"]

    def test_privilege_error_passes_through(self, ctx):
        log = []
        steps = [RecordingStep("a", log, raises=PrivilegeError("root")), RecordingStep("b", log)]

        with pytest.raises(PrivilegeError):
            run_pipeline(ctx=ctx, steps=steps)
        assert log == ["a"]

    def test_start_at_and_stop_after(self, ctx):
        log = []
        steps = [RecordingStep(s, log) for s in ("a", "b", "c", "d")]

        run_pipeline(ctx=ctx, steps=steps, start_at="b", stop_after="c")

        assert log == ["b", "c"]

    def test_unknown_bound_rejected(self, ctx):
        with pytest.raises(ValueError):
            run_pipeline(ctx=ctx, steps=[RecordingStep("a", [])], start_at="zz")

    def test_stop_before_start_rejected(self, ctx):
        log = []
        steps = [RecordingStep(s, log) for s in ("a", "b", "c")]

        with pytest.raises(ValueError):
            run_pipeline(ctx=ctx, steps=steps, start_at="c", stop_after="a")
        assert log == []

    def test_callback_after_each_step(self, ctx):
        seen = []
        steps = [RecordingStep(s, []) for s in ("a", "b")]

        run_pipeline(ctx=ctx, steps=steps, on_step_done=lambda s: seen.append(list(s["execution"]["completed_steps"])))

        assert seen == [["a"], ["a", "b"]]
