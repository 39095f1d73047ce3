"""Serialization helpers shared by the result models."""

from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class ToDictMixin:
    """
    Adds to_dict() to a dataclass.

    Values are converted recursively: enums to their value, paths to
    strings, sequences to lists, and nested objects through their own
    to_dict(). Subclasses can override fields in the output through
    _to_dict_extra(), e.g. to redact secrets.

    Example:
        @dataclass
        class CopyResult(ToDictMixin):
            output_path: str
            files_copied: int

        CopyResult("kernel-output", 5).to_dict()
        # {"output_path": "kernel-output", "files_copied": 5}
    """

    def to_dict(self) -> Dict[str, Any]:
        if not is_dataclass(self):
            raise TypeError(f"{type(self).__name__} is not a dataclass")

        data = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        data.update(self._to_dict_extra() or {})
        return data

    def _to_dict_extra(self) -> Optional[Dict[str, Any]]:
        """Fields to add or replace in the to_dict() output."""
        return None


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    return str(value)
