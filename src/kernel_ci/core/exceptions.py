"""
Exception Classes
=================

Every failure the pipeline can report derives from KernelCIError. Each stage
raises the error type of the collaborator that failed; the pipeline engine
records the first one and stops.
"""

from typing import Optional, Sequence


class KernelCIError(Exception):
    """Base class for all kernel-ci errors."""

    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(KernelCIError):
    """Raised when action inputs are invalid. Nothing has been invoked yet."""

    default_message = "Invalid action inputs"


class CommandError(KernelCIError):
    """
    Raised when an external command exits non-zero or cannot be started.

    Attributes:
        command: The command line, with secrets redacted
        returncode: Process exit status (127 when the executable was not found)
    """

    def __init__(self, command: Sequence[str], returncode: int, message: Optional[str] = None) -> None:
        self.command = list(command)
        self.returncode = returncode
        if message is None:
            message = f"Command '{' '.join(self.command)}' failed with exit code {returncode}"
        super().__init__(message)


class InstallError(KernelCIError):
    """Raised when the Nix installation fails."""

    default_message = "Nix installation failed"


class CacheError(KernelCIError):
    """Raised when the Cachix binary cache cannot be configured."""

    default_message = "Cachix setup failed"


class BuildError(KernelCIError):
    """Raised when the build tool itself fails."""

    default_message = "Kernel build failed"


class BuildResultMissing(KernelCIError):
    """Raised when a build-mode invocation produced no result link."""

    def __init__(self, result_path: str, message: Optional[str] = None) -> None:
        self.result_path = result_path
        super().__init__(message or f"Build result not found at {result_path}")


class CopyError(KernelCIError):
    """Raised when the kernel cannot be copied to its output directory."""

    default_message = "Copying the kernel failed"


class UploadError(KernelCIError):
    """Raised when an artifact or direct Hub upload fails."""

    default_message = "Upload failed"


class PublishError(KernelCIError):
    """Raised when publishing to the Hugging Face Hub fails."""

    default_message = "Publishing to Hugging Face failed"
