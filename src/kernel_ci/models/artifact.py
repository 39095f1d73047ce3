"""Data models for artifact store uploads."""

from dataclasses import dataclass

from .base import ToDictMixin


@dataclass
class UploadResult(ToDictMixin):
    """Result of uploading an artifact bundle."""

    artifact_name: str
    artifact_id: str
    files_uploaded: int
    size_bytes: int
    digest: str
