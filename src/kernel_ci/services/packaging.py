# services/packaging.py
"""
Service for copying a built kernel to a stable output directory.
"""

import os
import shutil
import stat
from pathlib import Path
from typing import Optional, Union

from kernel_ci.core.constants import OUTPUT_DIR_SUFFIX
from kernel_ci.core.exceptions import CopyError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.build import CopyResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


def output_dir_name(artifact_name: str) -> str:
    """Name of the directory a kernel is copied to."""
    return f"{artifact_name}{OUTPUT_DIR_SUFFIX}"


def _make_writable(path: Path) -> None:
    """Add the user write bit below path; Nix store copies are read-only."""
    paths = [path]
    if path.is_dir():
        paths.extend(path.rglob("*"))
    for p in paths:
        if p.is_symlink():
            continue
        mode = p.stat().st_mode
        if not mode & stat.S_IWUSR:
            p.chmod(mode | stat.S_IWUSR)


def _remove(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        _make_writable(path)
        shutil.rmtree(path)


class PackagingService(BaseService):
    """Service for copying a kernel, dereferencing symlinks, to ``<artifact>-output``."""

    def copy_kernel(
        self,
        result_path: str,
        artifact_name: str,
        base_dir: Optional[Union[str, Path]] = None,
    ) -> ServiceResult[CopyResult]:
        """
        Copy the build result to ``<artifact_name>-output``.

        Any existing output directory of that name is replaced. Symbolic
        links are resolved, so the copy contains regular files only. File
        times are not carried over from the Nix store (which pins them to
        1970), so the copy can be zipped.

        Args:
            result_path: Build result (usually the ``result`` link)
            artifact_name: Artifact name the output directory is derived from
            base_dir: Directory to create the output in (default: working directory)

        Returns:
            ServiceResult containing the CopyResult. ``output_path`` is
            relative to base_dir.
        """
        output_name = output_dir_name(artifact_name)
        base = Path(base_dir) if base_dir is not None else Path.cwd()
        destination = base / output_name
        source = Path(result_path)

        logger.info(f"Copying kernel from {result_path} to {output_name}")

        if not source.exists():
            return ServiceResult.from_error(CopyError(f"Build result not found at {result_path}"))

        try:
            if destination.exists() or destination.is_symlink():
                _remove(destination)

            if source.is_dir():
                shutil.copytree(source, destination, symlinks=False, copy_function=shutil.copy)
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy(source, destination)

            _make_writable(destination)
        except (OSError, shutil.Error) as e:
            return ServiceResult.from_error(CopyError(f"Failed to copy kernel to {output_name}: {e}"))

        if destination.is_dir():
            files_copied = self._count_files(str(destination))
            size = self._get_folder_size(str(destination))
        else:
            files_copied = 1
            size = os.path.getsize(destination)

        return ServiceResult.ok(
            data=CopyResult(
                source_path=str(source),
                output_path=output_name,
                files_copied=files_copied,
                total_size_bytes=size,
            ),
            message=f"Kernel copied to {output_name}",
        )
