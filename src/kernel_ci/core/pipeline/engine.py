# core/pipeline/engine.py
"""
Pipeline Execution Engine
=========================

Runs the stages of the action in a fixed order with support for:
- Conditional stages that are skipped without running
- Progress callbacks (used to fold each stage into a log group)
- Early, successful termination when a stage halts the run
- Stopping at the first failure and recording its error

Example:
    from kernel_ci.core.pipeline.engine import PipelineEngine, PipelineStage

    engine = PipelineEngine()
    engine.add_stage(PipelineStage("build-kernel", "Build Kernel", build_kernel))

    result = engine.execute(context)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from kernel_ci.core.exceptions import KernelCIError
from kernel_ci.core.logger import get_logger

if TYPE_CHECKING:
    from .context import PipelineContext

logger = get_logger(__name__)

__all__ = [
    "PipelineEngine",
    "PipelineStage",
    "ExecutionResult",
    "StageResult",
    "ExecutionStatus",
    "SkipStage",
]


class ExecutionStatus(Enum):
    """Status of pipeline or stage execution."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SkipStage(Exception):
    """
    Raised by a stage handler that decides at run time not to do its work.

    Args:
        reason: Message recorded on the stage result
        warning: Record the reason as a warning rather than an informational skip
    """

    def __init__(self, reason: str, warning: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.warning = warning


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StageResult:
    """Result of executing a single stage."""

    stage_name: str
    title: str
    status: ExecutionStatus
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    artifact_path: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "stage_name": self.stage_name,
            "title": self.title,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "artifact_path": self.artifact_path,
            "error": self.error,
            "error_type": self.error_type,
            "warnings": self.warnings,
            "message": self.message,
        }


@dataclass
class ExecutionResult:
    """Result of a pipeline run."""

    status: ExecutionStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_duration_seconds: float = 0.0
    stage_results: List[StageResult] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None
    halted_by: Optional[str] = None

    @property
    def stages_completed(self) -> int:
        """Number of completed stages."""
        return sum(1 for r in self.stage_results if r.status == ExecutionStatus.COMPLETED)

    @property
    def stages_failed(self) -> int:
        """Number of failed stages."""
        return sum(1 for r in self.stage_results if r.status == ExecutionStatus.FAILED)

    @property
    def success(self) -> bool:
        """Whether execution was successful."""
        return self.status == ExecutionStatus.COMPLETED

    @property
    def warnings(self) -> List[str]:
        """Warnings of every stage, in stage order."""
        return [w for r in self.stage_results for w in r.warnings]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "total_duration_seconds": self.total_duration_seconds,
            "stages_completed": self.stages_completed,
            "stages_failed": self.stages_failed,
            "stage_results": [r.to_dict() for r in self.stage_results],
            "error": self.error,
            "error_type": self.error_type,
            "halted_by": self.halted_by,
        }

    def get_stage_result(self, stage_name: str) -> Optional[StageResult]:
        """Get result for a specific stage."""
        for result in self.stage_results:
            if result.stage_name == stage_name:
                return result
        return None


# A handler returns the path of the artifact it produced, or None
StageHandler = Callable[["PipelineContext"], Optional[str]]

# Decides from the context whether a stage runs at all
StageCondition = Callable[["PipelineContext"], bool]

# Type for progress callbacks: (stage title, current, total, status)
ProgressCallback = Callable[[str, int, int, str], None]


@dataclass
class PipelineStage:
    """
    A named unit of work.

    Attributes:
        name: Machine name, e.g. "build-kernel"
        title: Human title, used as the log group name
        handler: Function doing the work
        condition: Optional predicate; the stage is skipped when it returns False
        skip_message: Logged when the condition skips the stage
    """

    name: str
    title: str
    handler: StageHandler
    condition: Optional[StageCondition] = None
    skip_message: Optional[str] = None

    def should_run(self, context: "PipelineContext") -> bool:
        return self.condition is None or bool(self.condition(context))


class PipelineEngine:
    """
    Engine for executing the action's stages.

    Stages run strictly in the order they were added. The first failure
    stops the run; a stage may also end the run successfully by halting
    the context.
    """

    def __init__(self, stages: Optional[List[PipelineStage]] = None) -> None:
        """Initialize the pipeline engine."""
        self._stages: List[PipelineStage] = list(stages or [])
        self._progress_callback: Optional[ProgressCallback] = None

    def add_stage(self, stage: PipelineStage) -> None:
        """Append a stage to the pipeline."""
        self._stages.append(stage)
        logger.debug(f"Registered stage: {stage.name}")

    def set_progress_callback(self, callback: ProgressCallback) -> None:
        """
        Set callback for progress updates.

        Callback signature: (stage_title, current, total, status) -> None.
        It is called with "running" before a stage starts and with the
        final status after it ends. Stages skipped by their condition do
        not trigger it.
        """
        self._progress_callback = callback

    def execute(self, context: "PipelineContext") -> ExecutionResult:
        """
        Execute the pipeline.

        Args:
            context: Shared state of the run

        Returns:
            ExecutionResult with execution details
        """
        started_at = _now()
        total_stages = len(self._stages)
        stage_results: List[StageResult] = []
        final_status = ExecutionStatus.COMPLETED
        final_error = None
        final_error_type = None
        halted_by = None

        for idx, stage in enumerate(self._stages):
            if context.halted:
                break

            if not stage.should_run(context):
                logger.info(stage.skip_message or f"Skipping stage '{stage.name}': condition not met")
                stage_results.append(
                    StageResult(
                        stage_name=stage.name,
                        title=stage.title,
                        status=ExecutionStatus.SKIPPED,
                        message=stage.skip_message,
                    )
                )
                continue

            if self._progress_callback:
                self._progress_callback(stage.title, idx + 1, total_stages, "running")

            result = self._execute_stage(stage, context)
            stage_results.append(result)

            if self._progress_callback:
                self._progress_callback(stage.title, idx + 1, total_stages, result.status.value)

            if result.status == ExecutionStatus.FAILED:
                final_status = ExecutionStatus.FAILED
                final_error = result.error
                final_error_type = result.error_type
                break

            if context.halted:
                halted_by = stage.name
                logger.debug(f"Stage '{stage.name}' ended the run: {context.halt_reason}")

        completed_at = _now()

        return ExecutionResult(
            status=final_status,
            started_at=started_at,
            completed_at=completed_at,
            total_duration_seconds=(completed_at - started_at).total_seconds(),
            stage_results=stage_results,
            error=final_error,
            error_type=final_error_type,
            halted_by=halted_by,
        )

    def _execute_stage(self, stage: PipelineStage, context: "PipelineContext") -> StageResult:
        """Execute a single stage."""
        result = StageResult(
            stage_name=stage.name,
            title=stage.title,
            status=ExecutionStatus.RUNNING,
            started_at=_now(),
        )

        try:
            result.artifact_path = stage.handler(context)
            result.status = ExecutionStatus.COMPLETED
        except SkipStage as e:
            result.status = ExecutionStatus.SKIPPED
            result.message = e.reason
            if e.warning:
                result.warnings.append(e.reason)
            else:
                logger.info(e.reason)
        except KernelCIError as e:
            result.status = ExecutionStatus.FAILED
            result.error = e.message
            result.error_type = type(e).__name__
            logger.debug(f"Stage '{stage.name}' failed: {e.message}")
        except Exception as e:
            result.status = ExecutionStatus.FAILED
            result.error = str(e) or None
            result.error_type = type(e).__name__
            logger.exception(f"Stage '{stage.name}' raised an unexpected error")

        result.completed_at = _now()
        result.duration_seconds = (result.completed_at - result.started_at).total_seconds()

        return result
