"""Data models for environment, build and packaging operations."""

from dataclasses import dataclass, field
from typing import List, Optional

from .base import ToDictMixin


@dataclass
class InstallResult(ToDictMixin):
    """Result of installing Nix."""

    profile_bin: str
    nix_conf: str


@dataclass
class CacheResult(ToDictMixin):
    """Result of configuring a Cachix cache."""

    cache_name: str
    authenticated: bool
    profile_bin: str = ""


@dataclass
class BuildResult(ToDictMixin):
    """Result of a nix build / nix run invocation."""

    kernel_dir: str
    target: str
    mode: str
    command: List[str] = field(default_factory=list)
    result_path: Optional[str] = None

    @property
    def has_result(self) -> bool:
        return self.result_path is not None


@dataclass
class CopyResult(ToDictMixin):
    """Result of copying a kernel to its output directory."""

    source_path: str
    output_path: str
    files_copied: int
    total_size_bytes: int
