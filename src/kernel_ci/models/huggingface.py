"""
Data models for Hugging Face Hub uploads.
"""

from dataclasses import dataclass
from typing import Optional

from .base import ToDictMixin


@dataclass
class PushResult(ToDictMixin):
    """A folder uploaded to a Hub repository.

    ``path_in_repo`` is None when the folder became the repository root.
    """

    repo_id: str
    repo_type: str
    url: str
    files_uploaded: int
    total_size_bytes: int
    path_in_repo: Optional[str] = None
