"""
Pipeline
========

Stage engine, stage handlers and outcome reporting for a kernel build run.
"""

from .context import PipelineContext
from .engine import (
    ExecutionResult,
    ExecutionStatus,
    PipelineEngine,
    PipelineStage,
    SkipStage,
    StageResult,
)
from .orchestrator import run_pipeline
from .reporter import RunOutcome, report_outcome
from .stages import build_pipeline, default_stages

__all__ = [
    "ExecutionResult",
    "ExecutionStatus",
    "PipelineContext",
    "PipelineEngine",
    "PipelineStage",
    "RunOutcome",
    "SkipStage",
    "StageResult",
    "build_pipeline",
    "default_stages",
    "report_outcome",
    "run_pipeline",
]
