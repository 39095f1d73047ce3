"""
External Commands
=================

Runs the external tools the action drives (curl, the Nix installer, nix,
nix-env, cachix) one at a time, streaming their output to the job log.

The search path is passed in explicitly on every call. Entries are put in
front of the inherited PATH, so tools installed by an earlier stage resolve
without touching os.environ.
"""

import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Union

from kernel_ci.core.exceptions import CommandError
from kernel_ci.core.workflow import Workflow

REDACTED = "***"


def redact(args: Sequence[str], secrets: Sequence[str] = ()) -> List[str]:
    """Replace every occurrence of a secret value, also inside longer arguments."""
    redacted = []
    for arg in args:
        for secret in secrets:
            if secret:
                arg = arg.replace(secret, REDACTED)
        redacted.append(arg)
    return redacted


def build_env(
    search_path: Sequence[str] = (),
    extra_env: Optional[Mapping[str, str]] = None,
    base_env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Compose the environment for a child process.

    Args:
        search_path: Directories to put in front of the inherited PATH
        extra_env: Additional variables for this invocation only
        base_env: Environment to start from (default: os.environ)

    Returns:
        New environment mapping
    """
    env = dict(os.environ if base_env is None else base_env)
    if search_path:
        inherited = env.get("PATH", "")
        entries = list(search_path) + ([inherited] if inherited else [])
        env["PATH"] = os.pathsep.join(entries)
    if extra_env:
        env.update(extra_env)
    return env


class CommandRunner:
    """
    Blocking runner for external commands.

    Each call waits for the process to exit; a non-zero exit status raises
    CommandError so the calling stage can fail the run.

    Args:
        workflow: Where command lines are echoed (default: a Workflow on stdout)
    """

    def __init__(self, workflow: Optional[Workflow] = None) -> None:
        self.workflow = workflow or Workflow()

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Union[str, Path]] = None,
        extra_env: Optional[Mapping[str, str]] = None,
        search_path: Sequence[str] = (),
        secrets: Sequence[str] = (),
    ) -> int:
        """
        Run a command to completion.

        Args:
            args: Command line
            cwd: Working directory
            extra_env: Variables added to the child's environment
            search_path: Directories prepended to PATH
            secrets: Values to redact from logged command lines

        Returns:
            The exit status (always 0)

        Raises:
            CommandError: If the command cannot be started or exits non-zero
        """
        shown = redact(args, secrets)
        self.workflow.echo_command(" ".join(shown))

        env = build_env(search_path, extra_env)
        executable = args[0]
        resolved = _which(executable, env.get("PATH"))

        try:
            completed = subprocess.run(
                [resolved or executable, *args[1:]],
                cwd=str(cwd) if cwd is not None else None,
                env=env,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(shown, 127, f"Unable to locate executable '{executable}': {e}") from e
        except OSError as e:
            raise CommandError(shown, 126, f"Unable to run '{executable}': {e}") from e

        if completed.returncode != 0:
            raise CommandError(shown, completed.returncode)

        return completed.returncode


def _which(executable: str, path: Optional[str]) -> Optional[str]:
    if os.sep in executable:
        return None
    return shutil.which(executable, path=path)
