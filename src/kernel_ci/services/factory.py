"""
Service Factory
===============

Reusable factory for instantiating services with proper dependency injection.

Architecture Principle:
- Factory provides sensible defaults (a real CommandRunner, the global config)
- Applications and tests override them by passing their own runner or config
- Services remain decoupled from concrete implementations

Usage:
    from kernel_ci.services.factory import ServiceFactory

    factory = ServiceFactory()
    factory.build.build(".", "ci")

    # Tests - inject a recording runner
    factory = ServiceFactory(runner=RecordingRunner())
"""

from typing import Mapping, Optional

import requests

from kernel_ci.core.config import Config, get_config
from kernel_ci.core.process import CommandRunner

from .artifact import ArtifactService
from .build import BuildService
from .cachix import CachixService
from .huggingface import HuggingFaceService
from .packaging import PackagingService
from .toolchain import NixService


class ServiceFactory:
    """
    Factory for creating service instances with proper dependency injection.

    Services are created lazily and cached, so every stage of a run shares
    the same runner and configuration.

    Attributes:
        runner: Command runner used by services that drive external tools
        config: Configuration passed to every service
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        config: Optional[Config] = None,
        session: Optional[requests.Session] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Initialize the factory.

        Args:
            runner: Command runner (default: CommandRunner)
            config: Configuration (default: the global configuration)
            session: HTTP session for the artifact store
            environ: Environment the artifact store credentials are read from
        """
        self.runner = runner or CommandRunner()
        self.config = config or get_config()
        self._session = session
        self._environ = environ

        self._nix: Optional[NixService] = None
        self._cachix: Optional[CachixService] = None
        self._build: Optional[BuildService] = None
        self._packaging: Optional[PackagingService] = None
        self._artifact: Optional[ArtifactService] = None
        self._huggingface: Optional[HuggingFaceService] = None

    @property
    def nix(self) -> NixService:
        """Get NixService instance."""
        if self._nix is None:
            self._nix = NixService(runner=self.runner, config=self.config)
        return self._nix

    @property
    def cachix(self) -> CachixService:
        """Get CachixService instance."""
        if self._cachix is None:
            self._cachix = CachixService(runner=self.runner, config=self.config)
        return self._cachix

    @property
    def build(self) -> BuildService:
        """Get BuildService instance."""
        if self._build is None:
            self._build = BuildService(runner=self.runner, config=self.config)
        return self._build

    @property
    def packaging(self) -> PackagingService:
        """Get PackagingService instance."""
        if self._packaging is None:
            self._packaging = PackagingService(config=self.config)
        return self._packaging

    @property
    def artifact(self) -> ArtifactService:
        """Get ArtifactService instance."""
        if self._artifact is None:
            self._artifact = ArtifactService(
                session=self._session,
                environ=self._environ,
                config=self.config,
            )
        return self._artifact

    @property
    def huggingface(self) -> HuggingFaceService:
        """Get HuggingFaceService instance."""
        if self._huggingface is None:
            self._huggingface = HuggingFaceService(config=self.config)
        return self._huggingface
