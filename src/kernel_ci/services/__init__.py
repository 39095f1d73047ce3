# services/__init__.py
"""
Services Package
================

Services wrap the external collaborators of the action. Each method returns
a ServiceResult; the pipeline stages decide what a failure means for the run.

Architecture:
    Pipeline stage
        ↓ (resolved inputs, search path)
    Service
        ↓ (delegates to)
    External tool (nix, cachix, artifact store, Hugging Face Hub)
"""

from .artifact import ArtifactService
from .base import BaseService, ServiceResult
from .build import BuildService
from .cachix import CachixService
from .factory import ServiceFactory
from .huggingface import HuggingFaceService
from .packaging import PackagingService
from .toolchain import NixService

__all__ = [
    # Base
    "BaseService",
    "ServiceResult",
    # Factory
    "ServiceFactory",
    # Environment
    "NixService",
    "CachixService",
    # Build and packaging
    "BuildService",
    "PackagingService",
    # Distribution
    "ArtifactService",
    "HuggingFaceService",
]
