"""
Workflow Commands
=================

Talks to the GitHub Actions runner: step outputs, PATH additions, log
groups, annotations, secret masking and the job summary.

Outputs, PATH entries and the summary are appended to the files named by
GITHUB_OUTPUT, GITHUB_PATH and GITHUB_STEP_SUMMARY. Everything else is a
``::command::`` line on stdout. Outside a runner the file-backed commands
are logged instead, so the CLI can be used locally.
"""

import os
import sys
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, TextIO

from kernel_ci.core.logger import get_logger

logger = get_logger(__name__)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class Workflow:
    """
    Handle on the current workflow step.

    Args:
        environ: Environment to read GITHUB_* file locations from (default: os.environ)
        stream: Where ``::command::`` lines are written (default: sys.stdout)
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._stream = stream
        self.outputs: Dict[str, str] = {}
        self.paths: List[str] = []
        self.failed = False
        self.failure_message: Optional[str] = None

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def on_runner(self) -> bool:
        """Whether we are running inside a GitHub Actions job."""
        return self._environ.get("GITHUB_ACTIONS") == "true"

    def _file(self, name: str) -> Optional[Path]:
        value = self._environ.get(name)
        return Path(value) if value else None

    def _append(self, name: str, text: str) -> bool:
        path = self._file(name)
        if path is None:
            return False
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)
        return True

    def issue(self, command: str, message: str = "", **properties: str) -> None:
        """Write a ``::command key=value::message`` line."""
        props = ",".join(f"{k}={_escape_property(str(v))}" for k, v in properties.items() if v)
        head = f"::{command} {props}::" if props else f"::{command}::"
        self.stream.write(f"{head}{_escape_data(message)}\n")
        self.stream.flush()

    def echo_command(self, command_line: str) -> None:
        """Echo a command line the way the runner highlights it."""
        self.stream.write(f"[command]{command_line}\n")
        self.stream.flush()

    # -------------------------------------------------------------------------
    # Outputs and environment
    # -------------------------------------------------------------------------

    def set_output(self, name: str, value: str) -> None:
        """Set a step output."""
        self.outputs[name] = value
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        if not self._append("GITHUB_OUTPUT", f"{name}<<{delimiter}\n{value}\n{delimiter}\n"):
            logger.info(f"Output {name}={value!r}")

    def add_path(self, entry: str) -> None:
        """Make a directory available on PATH for later steps of the job."""
        self.paths.append(entry)
        if not self._append("GITHUB_PATH", f"{entry}\n"):
            logger.debug(f"GITHUB_PATH not set; {entry} only applies to this run")

    def add_mask(self, value: str) -> None:
        """Register a secret so the runner masks it in the log."""
        if value:
            self.issue("add-mask", value)

    def append_summary(self, markdown: str) -> None:
        """Append markdown to the job summary."""
        self._append("GITHUB_STEP_SUMMARY", markdown if markdown.endswith("\n") else markdown + "\n")

    # -------------------------------------------------------------------------
    # Log groups and annotations
    # -------------------------------------------------------------------------

    def start_group(self, title: str) -> None:
        self.issue("group", title)

    def end_group(self) -> None:
        self.issue("endgroup")

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """Fold the log lines of a block under a title."""
        self.start_group(title)
        try:
            yield
        finally:
            self.end_group()

    def warning(self, message: str, title: str = "") -> None:
        logger.warning(message)
        self.issue("warning", message, title=title)

    def error(self, message: str, title: str = "") -> None:
        self.issue("error", message, title=title)

    def set_failed(self, message: str) -> None:
        """Mark the step as failed. The caller is responsible for the exit status."""
        self.failed = True
        self.failure_message = message
        self.error(message)
