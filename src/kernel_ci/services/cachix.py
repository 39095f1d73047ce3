# services/cachix.py
"""
Service for configuring a Cachix binary cache.
"""

from pathlib import Path
from typing import Sequence

from kernel_ci.core.exceptions import CacheError, CommandError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.build import CacheResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class CachixService(BaseService):
    """Service for installing the Cachix client and registering a cache."""

    def setup(
        self,
        name: str,
        auth_token: str = "",
        search_path: Sequence[str] = (),
    ) -> ServiceResult[CacheResult]:
        """
        Install cachix and use the named cache as a substituter.

        Args:
            name: Cache name. Must not be empty; callers skip setup instead.
            auth_token: Optional auth token for pushing to the cache
            search_path: Search path entries (must include the Nix profile bin)

        Returns:
            ServiceResult containing the configured cache
        """
        if not name:
            return ServiceResult.from_error(CacheError("No Cachix cache name provided"))

        logger.info(f"Setting up Cachix cache: {name}")
        secrets = (auth_token,) if auth_token else ()
        # nix-env installs into the user profile, which is not on the installer's PATH entry
        profile_bin = str(Path(self.config.cachix["profile_bin"]).expanduser())
        cachix_path = [*search_path, profile_bin]

        try:
            self.runner.run(
                ["nix-env", "-iA", "cachix", "-f", self.config.cachix["install_url"]],
                search_path=search_path,
            )
            if auth_token:
                self.runner.run(
                    ["cachix", "authtoken", auth_token],
                    search_path=cachix_path,
                    secrets=secrets,
                )
            self.runner.run(["cachix", "use", name], search_path=cachix_path)
        except CommandError as e:
            return ServiceResult.from_error(CacheError(f"Cachix setup failed: {e.message}"))

        return ServiceResult.ok(
            data=CacheResult(cache_name=name, authenticated=bool(auth_token), profile_bin=profile_bin),
            message="Cachix configured successfully",
        )
