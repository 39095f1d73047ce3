"""State shared by the stages of one run."""

from dataclasses import dataclass, field
from typing import List, Optional

from kernel_ci.core.workflow import Workflow
from kernel_ci.models.inputs import ActionInputs, TargetSelection
from kernel_ci.services.factory import ServiceFactory


@dataclass
class PipelineContext:
    """
    Context passed to every stage handler.

    The search path only grows. Every external command receives it
    explicitly, so a directory added by one stage is visible to all
    later stages.

    Attributes:
        inputs: Resolved action inputs
        selection: Effective build target
        workflow: Handle on the workflow step
        services: Service factory
        search_path: Directories prepended to PATH for external commands
        result_path: Build result produced by the build stage
        output_dir: Packaged kernel directory
        kernel_path: Value published as the ``kernel-path`` output
    """

    inputs: ActionInputs
    selection: TargetSelection
    workflow: Workflow
    services: ServiceFactory
    search_path: List[str] = field(default_factory=list)
    result_path: Optional[str] = None
    output_dir: Optional[str] = None
    kernel_path: str = ""
    halted: bool = False
    halt_reason: Optional[str] = None

    def add_path(self, entry: str) -> None:
        """Add a directory to the search path of this run and of later workflow steps."""
        if entry in self.search_path:
            return
        self.search_path.append(entry)
        self.workflow.add_path(entry)

    def halt(self, reason: str) -> None:
        """End the run successfully after the current stage."""
        self.halted = True
        self.halt_reason = reason
