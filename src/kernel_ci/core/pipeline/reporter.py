"""
Outcome Reporting
=================

Turns the result of a run into the step's final state: outputs on success,
a failure annotation otherwise, and a job summary either way.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from kernel_ci.core.constants import OUTPUT_ARTIFACT_NAME, OUTPUT_KERNEL_PATH
from kernel_ci.core.exceptions import KernelCIError
from kernel_ci.core.logger import get_logger
from kernel_ci.core.workflow import Workflow
from kernel_ci.models.base import ToDictMixin

from .engine import ExecutionStatus, StageResult

logger = get_logger(__name__)

SUCCESS_MESSAGE = "Action completed successfully!"

_STATUS_ICONS = {
    ExecutionStatus.COMPLETED: "✅",
    ExecutionStatus.FAILED: "❌",
    ExecutionStatus.SKIPPED: "⏭️",
}


@dataclass
class RunOutcome(ToDictMixin):
    """
    Final state of a run.

    ``kernel_path`` is empty when the run ended without a packaged kernel
    (run mode without a result, or a direct Hub upload). Outputs are only
    published when ``success`` is true.
    """

    success: bool
    kernel_path: str = ""
    artifact_name: str = ""
    message: Optional[str] = None
    error_type: Optional[str] = None
    stage_results: List[StageResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def failure_message(self) -> str:
        return self.message or KernelCIError.default_message


def render_summary(outcome: RunOutcome) -> str:
    """Markdown job summary listing each stage and its status."""
    lines = ["## Kernel build", ""]

    if outcome.stage_results:
        lines.extend(["| Stage | Status | Duration |", "| --- | --- | --- |"])
        for result in outcome.stage_results:
            icon = _STATUS_ICONS.get(result.status, "")
            duration = f"{result.duration_seconds:.1f}s" if result.duration_seconds else ""
            lines.append(f"| {result.title} | {icon} {result.status.value} | {duration} |")
        lines.append("")

    if outcome.success:
        lines.append(f"**Kernel path:** `{outcome.kernel_path}`" if outcome.kernel_path else "No kernel output directory.")
        lines.append(f"**Artifact name:** `{outcome.artifact_name}`")
    else:
        lines.append(f"**Failed:** {outcome.failure_message}")

    for warning in outcome.warnings:
        lines.append(f"> ⚠️ {warning}")

    return "\n".join(lines) + "\n"


def report_outcome(workflow: Workflow, outcome: RunOutcome) -> None:
    """
    Publish the outcome of a run to the workflow.

    On success both outputs are set. On failure the step is marked failed
    with the first error's message and no outputs are set.
    """
    workflow.append_summary(render_summary(outcome))

    if not outcome.success:
        workflow.set_failed(outcome.failure_message)
        return

    workflow.set_output(OUTPUT_KERNEL_PATH, outcome.kernel_path)
    workflow.set_output(OUTPUT_ARTIFACT_NAME, outcome.artifact_name)
    logger.info(SUCCESS_MESSAGE)
