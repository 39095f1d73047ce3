# core/pipeline/orchestrator.py
"""
Run Orchestration
=================

Top-level entry point of the action:

    raw inputs -> resolve_inputs -> select_target -> stages -> report

A ValidationError stops the run before any external command is started.
"""

from typing import Mapping, Optional

from kernel_ci.core.exceptions import ValidationError
from kernel_ci.core.inputs import resolve_inputs
from kernel_ci.core.logger import get_logger
from kernel_ci.core.process import CommandRunner
from kernel_ci.core.target import select_target
from kernel_ci.core.workflow import Workflow
from kernel_ci.services.factory import ServiceFactory

from .context import PipelineContext
from .engine import PipelineEngine, ProgressCallback
from .reporter import RunOutcome, report_outcome
from .stages import build_pipeline

logger = get_logger(__name__)


def group_callback(workflow: Workflow) -> ProgressCallback:
    """Progress callback folding each stage into a log group."""

    def callback(title: str, current: int, total: int, status: str) -> None:
        if status == "running":
            workflow.start_group(title)
        else:
            workflow.end_group()

    return callback


def run_pipeline(
    raw_inputs: Mapping[str, str],
    workflow: Workflow,
    services: Optional[ServiceFactory] = None,
    engine: Optional[PipelineEngine] = None,
) -> RunOutcome:
    """
    Run the action.

    Args:
        raw_inputs: Mapping of input name to raw string value
        workflow: Handle on the workflow step
        services: Service factory (default: one whose runner echoes to workflow)
        engine: Pipeline engine (default: the standard stages)

    Returns:
        RunOutcome, already reported to the workflow
    """
    try:
        inputs = resolve_inputs(raw_inputs)
    except ValidationError as e:
        outcome = RunOutcome(success=False, message=e.message, error_type=type(e).__name__)
        report_outcome(workflow, outcome)
        return outcome

    for secret in inputs.secrets:
        workflow.add_mask(secret)

    selection = select_target(inputs)
    if selection.overridden:
        logger.info(
            f"Building {selection.effective_target} instead of {selection.requested_target} "
            f"to upload to {inputs.hf_repo}"
        )

    context = PipelineContext(
        inputs=inputs,
        selection=selection,
        workflow=workflow,
        services=services or ServiceFactory(runner=CommandRunner(workflow)),
    )

    engine = engine or build_pipeline()
    engine.set_progress_callback(group_callback(workflow))
    result = engine.execute(context)

    outcome = RunOutcome(
        success=result.success,
        kernel_path=context.kernel_path if result.success else "",
        artifact_name=inputs.artifact_name if result.success else "",
        message=result.error,
        error_type=result.error_type,
        stage_results=result.stage_results,
        warnings=result.warnings,
    )
    report_outcome(workflow, outcome)
    return outcome
