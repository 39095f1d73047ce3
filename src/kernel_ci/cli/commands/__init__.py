"""CLI command modules for kernel-ci."""

from .config import config
from .plan import plan
from .run import run

__all__ = [
    "config",
    "plan",
    "run",
]
