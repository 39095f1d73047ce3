"""
kernel-ci - Build, package and publish Nix-built compute kernels
================================================================

Version: 0.2.0
"""

__version__ = "0.2.0"

from kernel_ci.core.exceptions import KernelCIError, ValidationError
from kernel_ci.core.inputs import resolve_inputs
from kernel_ci.core.target import select_target

__all__ = [
    "__version__",
    "KernelCIError",
    "ValidationError",
    "resolve_inputs",
    "select_target",
]
