# services/base.py
"""
Base class and utilities for all services.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, Type, TypeVar

from kernel_ci.core.config import Config, get_config
from kernel_ci.core.exceptions import KernelCIError

if TYPE_CHECKING:
    from kernel_ci.core.process import CommandRunner

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Result object returned by service operations.

    Provides a consistent interface for the pipeline stages and the CLI to
    handle operation outcomes. ``error_type`` names the exception class the
    failure maps to, so a stage can re-raise it with the right type.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T = None,
        message: str = None,
        warnings: List[str] = None,
        **metadata,
    ) -> "ServiceResult[T]":
        """Create a successful result."""
        return cls(
            success=True,
            data=data,
            message=message,
            warnings=warnings or [],
            metadata=metadata,
        )

    @classmethod
    def fail(
        cls,
        error: str,
        error_type: Optional[str] = None,
        warnings: List[str] = None,
        **metadata,
    ) -> "ServiceResult[T]":
        """Create a failed result."""
        return cls(
            success=False,
            error=error,
            error_type=error_type,
            warnings=warnings or [],
            metadata=metadata,
        )

    @classmethod
    def from_error(cls, exc: KernelCIError, **metadata) -> "ServiceResult[T]":
        """Create a failed result from a kernel-ci error."""
        return cls.fail(exc.message, error_type=type(exc).__name__, **metadata)

    def unwrap(self, error_class: Type[KernelCIError] = KernelCIError) -> T:
        """
        Return the data of a successful result.

        Raises:
            error_class: With the result's error message, if the result failed
        """
        if not self.success:
            raise error_class(self.error)
        return self.data


class BaseService:
    """
    Base class for all services.

    Provides common functionality for:
    - Access to the command runner and configuration
    - Path validation
    - Directory size accounting
    """

    def __init__(
        self,
        runner: Optional["CommandRunner"] = None,
        config: Optional[Config] = None,
    ) -> None:
        """Initialize the service.

        Args:
            runner: Command runner for services that drive external tools.
                    Not needed for services that only use Python APIs.
            config: Configuration (default: the global configuration)
        """
        self.runner = runner
        self._config = config

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = get_config()
        return self._config

    def _validate_input_path(self, path: str, must_exist: bool = True) -> Optional[str]:
        """
        Validate an input path.

        Returns:
            None if valid, error message if invalid
        """
        p = Path(path)
        if must_exist and not p.exists():
            return f"Path does not exist: {path}"
        return None

    @staticmethod
    def _iter_files(path: Path) -> List[Path]:
        """All regular files below a directory, sorted."""
        return sorted(p for p in path.rglob("*") if p.is_file())

    def _get_folder_size(self, path: str) -> int:
        """Calculate the total size of a folder in bytes."""
        return sum(p.stat().st_size for p in self._iter_files(Path(path)))

    def _count_files(self, path: str) -> int:
        """Count the total number of files in a folder."""
        return len(self._iter_files(Path(path)))
