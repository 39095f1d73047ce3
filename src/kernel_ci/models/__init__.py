"""Data models for kernel-ci."""

from kernel_ci.models.artifact import UploadResult
from kernel_ci.models.base import ToDictMixin
from kernel_ci.models.build import BuildResult, CacheResult, CopyResult, InstallResult
from kernel_ci.models.huggingface import PushResult
from kernel_ci.models.inputs import ActionInputs, TargetSelection

__all__ = [
    "ToDictMixin",
    "ActionInputs",
    "TargetSelection",
    "InstallResult",
    "CacheResult",
    "BuildResult",
    "CopyResult",
    "UploadResult",
    "PushResult",
]
