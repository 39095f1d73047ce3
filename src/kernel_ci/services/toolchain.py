# services/toolchain.py
"""
Service for installing the Nix toolchain.

Nix is installed with the Determinate Systems installer. The installer is
downloaded with curl and run non-interactively with an extra nix.conf block
derived from the action inputs.
"""

import getpass
from typing import List, Optional, Sequence

from kernel_ci.core.constants import SANDBOX_DIRECTIVES, SANDBOX_FALLBACK_DIRECTIVE
from kernel_ci.core.exceptions import CommandError, InstallError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.build import InstallResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


def sandbox_directive(sandbox: str) -> str:
    """
    Map the sandbox input to a nix.conf directive.

    "relaxed", "true" and "false" set ``sandbox`` directly. "fallback" and
    any unrecognized value disable the sandbox fallback instead, so Nix
    errors out rather than silently building unsandboxed.
    """
    return SANDBOX_DIRECTIVES.get(sandbox, SANDBOX_FALLBACK_DIRECTIVE)


def default_trusted_users() -> List[str]:
    """root plus the user running the job."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        return ["root"]
    return ["root"] if user == "root" else ["root", user]


def render_nix_conf(
    max_jobs: str,
    cores: str,
    sandbox: str,
    extra_conf: str = "",
    experimental_features: str = "nix-command flakes",
    trusted_users: Optional[Sequence[str]] = None,
) -> str:
    """
    Render the extra nix.conf block passed to the installer.

    User-supplied ``extra_conf`` goes last so its settings win.
    """
    users = list(trusted_users) if trusted_users else default_trusted_users()
    lines = [
        f"max-jobs = {max_jobs}",
        f"cores = {cores}",
        sandbox_directive(sandbox),
        f"experimental-features = {experimental_features}",
        f"trusted-users = {' '.join(users)}",
    ]
    if extra_conf:
        lines.append(extra_conf)
    return "\n".join(lines)


class NixService(BaseService):
    """
    Service for installing Nix on the runner.

    Provides ServiceResult-wrapped methods around the Nix installer.
    """

    def install(
        self,
        max_jobs: str,
        cores: str,
        sandbox: str,
        extra_conf: str = "",
        search_path: Sequence[str] = (),
    ) -> ServiceResult[InstallResult]:
        """
        Download and run the Nix installer.

        Args:
            max_jobs: Value for ``max-jobs``
            cores: Value for ``cores``
            sandbox: Sandbox policy ("relaxed", "true", "false", "fallback")
            extra_conf: Verbatim nix.conf text appended after generated settings
            search_path: Current search path entries

        Returns:
            ServiceResult containing the profile bin directory to add to PATH
        """
        nix = self.config.nix
        nix_conf = render_nix_conf(
            max_jobs,
            cores,
            sandbox,
            extra_conf,
            experimental_features=nix.get("experimental_features", "nix-command flakes"),
            trusted_users=nix.get("trusted_users"),
        )
        installer_path = nix["installer_path"]

        if sandbox not in SANDBOX_DIRECTIVES and sandbox != "fallback":
            logger.warning(f"Unrecognized sandbox mode '{sandbox}', disabling sandbox fallback")

        logger.info("Installing Nix...")
        logger.debug(f"nix.conf additions:\n{nix_conf}")

        try:
            self.runner.run(
                [
                    "curl",
                    "--proto",
                    "=https",
                    "--tlsv1.2",
                    "-sSf",
                    "-L",
                    nix["installer_url"],
                    "-o",
                    installer_path,
                ],
                search_path=search_path,
            )
            self.runner.run(
                ["sh", installer_path, "install", "--no-confirm", "--extra-conf", nix_conf],
                search_path=search_path,
            )
        except CommandError as e:
            return ServiceResult.from_error(InstallError(f"Nix installation failed: {e.message}"))

        return ServiceResult.ok(
            data=InstallResult(profile_bin=nix["profile_bin"], nix_conf=nix_conf),
            message="Nix installed successfully",
        )
