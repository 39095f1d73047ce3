"""
Unit tests for the pipeline engine.
"""

import pytest

from kernel_ci.core.exceptions import CopyError
from kernel_ci.core.inputs import resolve_inputs
from kernel_ci.core.pipeline.context import PipelineContext
from kernel_ci.core.pipeline.engine import (
    ExecutionStatus,
    PipelineEngine,
    PipelineStage,
    SkipStage,
)
from kernel_ci.core.target import select_target


@pytest.fixture
def context(workflow, factory):
    inputs = resolve_inputs({})
    return PipelineContext(
        inputs=inputs,
        selection=select_target(inputs),
        workflow=workflow,
        services=factory,
    )


def _record(name, calls, returns=None):
    def handler(ctx):
        calls.append(name)
        return returns

    return handler


class TestPipelineEngine:
    """Stage ordering and termination."""

    def test_runs_stages_in_order(self, context):
        calls = []
        engine = PipelineEngine(
            [
                PipelineStage("a", "A", _record("a", calls)),
                PipelineStage("b", "B", _record("b", calls, returns="out")),
            ]
        )

        result = engine.execute(context)

        assert calls == ["a", "b"]
        assert result.success
        assert result.stages_completed == 2
        assert result.get_stage_result("b").artifact_path == "out"

    def test_add_stage(self, context):
        calls = []
        engine = PipelineEngine()
        engine.add_stage(PipelineStage("a", "A", _record("a", calls)))

        assert engine.execute(context).success
        assert calls == ["a"]

    def test_first_failure_stops_the_run(self, context):
        calls = []

        def failing(ctx):
            raise CopyError("disk full")

        engine = PipelineEngine(
            [
                PipelineStage("a", "A", failing),
                PipelineStage("b", "B", _record("b", calls)),
            ]
        )

        result = engine.execute(context)

        assert calls == []
        assert result.status == ExecutionStatus.FAILED
        assert result.error == "disk full"
        assert result.error_type == "CopyError"
        assert result.stages_failed == 1

    def test_unexpected_exception_is_recorded(self, context):
        def broken(ctx):
            raise RuntimeError()

        result = PipelineEngine([PipelineStage("a", "A", broken)]).execute(context)

        assert not result.success
        assert result.error is None
        assert result.error_type == "RuntimeError"

    def test_condition_skips_stage(self, context):
        calls = []
        engine = PipelineEngine(
            [
                PipelineStage("a", "A", _record("a", calls), condition=lambda ctx: False, skip_message="nope"),
                PipelineStage("b", "B", _record("b", calls)),
            ]
        )

        result = engine.execute(context)

        assert calls == ["b"]
        skipped = result.get_stage_result("a")
        assert skipped.status == ExecutionStatus.SKIPPED
        assert skipped.message == "nope"
        assert result.success

    def test_skip_stage_with_warning(self, context):
        def skipping(ctx):
            raise SkipStage("credentials missing", warning=True)

        result = PipelineEngine([PipelineStage("a", "A", skipping)]).execute(context)

        assert result.success
        assert result.get_stage_result("a").status == ExecutionStatus.SKIPPED
        assert result.warnings == ["credentials missing"]

    def test_halt_ends_run_successfully(self, context):
        calls = []

        def halting(ctx):
            ctx.halt("done early")

        engine = PipelineEngine(
            [
                PipelineStage("a", "A", halting),
                PipelineStage("b", "B", _record("b", calls)),
            ]
        )

        result = engine.execute(context)

        assert calls == []
        assert result.success
        assert result.halted_by == "a"
        assert [r.stage_name for r in result.stage_results] == ["a"]

    def test_progress_callback(self, context):
        events = []

        def failing(ctx):
            raise CopyError()

        engine = PipelineEngine(
            [
                PipelineStage("a", "A", _record("a", [])),
                PipelineStage("s", "S", _record("s", []), condition=lambda ctx: False),
                PipelineStage("b", "B", failing),
            ]
        )
        engine.set_progress_callback(lambda title, current, total, status: events.append((title, current, status)))

        engine.execute(context)

        assert events == [
            ("A", 1, "running"),
            ("A", 1, "completed"),
            ("B", 3, "running"),
            ("B", 3, "failed"),
        ]

    def test_to_dict(self, context):
        result = PipelineEngine([PipelineStage("a", "A", _record("a", []))]).execute(context)

        data = result.to_dict()

        assert data["status"] == "completed"
        assert data["stage_results"][0]["stage_name"] == "a"
        assert data["stage_results"][0]["status"] == "completed"


class TestPipelineContext:
    def test_add_path_updates_search_path_and_workflow(self, context, workflow):
        context.add_path("/nix/bin")
        context.add_path("/nix/bin")

        assert context.search_path == ["/nix/bin"]
        assert workflow.paths == ["/nix/bin"]
