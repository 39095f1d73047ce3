# services/build.py
"""
Service for building kernels with Nix.
"""

from pathlib import Path
from typing import Dict, List, Sequence

from kernel_ci.core.constants import HUB_REPO_ENV, HUB_TOKEN_ENV, MODE_BUILD, MODE_RUN, RESULT_LINK
from kernel_ci.core.exceptions import BuildError, CommandError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.build import BuildResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


def build_command(mode: str, target: str, verbose: bool = True) -> List[str]:
    """
    Command line for building or running a flake output.

    Args:
        mode: "build" or "run"
        target: Flake output name
        verbose: Print full build logs (-L)
    """
    args = ["nix", mode]
    if verbose:
        args.append("-L")
    args.append(f".#{target}")
    return args


def build_environment(hf_repo: str = "", hf_token: str = "", mode: str = MODE_BUILD) -> Dict[str, str]:
    """
    Variables that let self-publishing targets see the Hub repository.

    The token is only handed to ``nix run`` targets.
    """
    env = {}
    if hf_repo:
        env[HUB_REPO_ENV] = hf_repo
        if hf_token and mode == MODE_RUN:
            env[HUB_TOKEN_ENV] = hf_token
    return env


class BuildService(BaseService):
    """Service for running ``nix build`` / ``nix run`` in a kernel directory."""

    def build(
        self,
        kernel_path: str,
        target: str,
        mode: str = MODE_BUILD,
        verbose: bool = True,
        hf_repo: str = "",
        hf_token: str = "",
        search_path: Sequence[str] = (),
    ) -> ServiceResult[BuildResult]:
        """
        Build or run a flake output of the kernel.

        Args:
            kernel_path: Kernel source directory (relative to the working directory)
            target: Flake output to build or run
            mode: "build" or "run"
            verbose: Print full build logs
            hf_repo: Hub repository exposed to the target as HF_REPO
            hf_token: Hub token exposed as HF_TOKEN to run-mode targets (with hf_repo only)
            search_path: Search path entries (must include the Nix profile bin)

        Returns:
            ServiceResult containing the BuildResult. ``result_path`` is None
            when the invocation left no result link behind.
        """
        kernel_dir = Path(kernel_path).resolve()
        error = self._validate_input_path(str(kernel_dir))
        if error:
            return ServiceResult.from_error(BuildError(error))

        logger.info(f"Building kernel at {kernel_path} with target {target}")

        command = build_command(mode, target, verbose)
        try:
            self.runner.run(
                command,
                cwd=kernel_dir,
                extra_env=build_environment(hf_repo, hf_token, mode),
                search_path=search_path,
                secrets=(hf_token,) if hf_token else (),
            )
        except CommandError as e:
            return ServiceResult.from_error(BuildError(f"Kernel build failed: {e.message}"))

        result_path = kernel_dir / RESULT_LINK
        result = BuildResult(
            kernel_dir=str(kernel_dir),
            target=target,
            mode=mode,
            command=command,
            result_path=str(result_path) if result_path.exists() else None,
        )

        return ServiceResult.ok(
            data=result,
            message=f"nix {mode} .#{target} finished",
            expected_result_path=str(result_path),
        )
