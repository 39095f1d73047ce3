# services/huggingface.py
"""
Service for HuggingFace Hub kernel uploads.
"""

from pathlib import Path
from typing import Optional

from kernel_ci.core.constants import BUILD_OUTPUT_DIR
from kernel_ci.core.exceptions import PublishError, UploadError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.huggingface import PushResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)


class HuggingFaceService(BaseService):
    """
    Service for HuggingFace Hub operations.

    Provides high-level methods for:
    - Publishing a packaged kernel directory to a Hub repository
    - Uploading a kernel's build output directly, without packaging
    """

    def _repo_url(self, repo_id: str, repo_type: str) -> str:
        if repo_type == "model":
            return f"https://huggingface.co/{repo_id}"
        return f"https://huggingface.co/{repo_type}s/{repo_id}"

    def _upload_folder(
        self,
        folder: str,
        repo_id: str,
        token: Optional[str],
        path_in_repo: Optional[str] = None,
    ) -> PushResult:
        from huggingface_hub import HfApi

        repo_type = self.config.hub.get("repo_type", "model")
        api = HfApi(token=token or None)
        api.create_repo(repo_id=repo_id, repo_type=repo_type, exist_ok=True)
        api.upload_folder(
            folder_path=folder,
            repo_id=repo_id,
            repo_type=repo_type,
            path_in_repo=path_in_repo,
            commit_message=self.config.hub.get("commit_message", "Upload kernel"),
        )

        return PushResult(
            repo_id=repo_id,
            repo_type=repo_type,
            url=self._repo_url(repo_id, repo_type),
            files_uploaded=self._count_files(folder),
            total_size_bytes=self._get_folder_size(folder),
            path_in_repo=path_in_repo,
        )

    def publish(self, path: str, repo_id: str, token: str) -> ServiceResult[PushResult]:
        """
        Publish a packaged kernel folder to the HuggingFace Hub.

        Args:
            path: Local path to the packaged kernel folder
            repo_id: HuggingFace Hub repository ID
            token: Hub token with write access to repo_id

        Returns:
            Result with push information
        """
        if not Path(path).is_dir():
            return ServiceResult.from_error(
                PublishError(f"Path '{path}' does not exist or is not a directory")
            )

        logger.info(f"Publishing to Hugging Face: {repo_id}")

        try:
            result = self._upload_folder(path, repo_id, token)
        except Exception as e:
            return ServiceResult.from_error(PublishError(f"Publishing to {repo_id} failed: {e}"))

        return ServiceResult.ok(
            data=result,
            message=f"Successfully published to {repo_id}",
        )

    def upload_build(
        self,
        kernel_path: str,
        repo_id: str,
        token: str = "",
    ) -> ServiceResult[PushResult]:
        """
        Upload a kernel's build directory straight to the Hub.

        The copy-only build target leaves its variants in ``<kernel_path>/build``;
        they are uploaded into ``build/`` of the repository.

        Args:
            kernel_path: Kernel source directory
            repo_id: HuggingFace Hub repository ID
            token: Hub token; when empty the token cached by huggingface_hub is used

        Returns:
            Result with push information
        """
        build_dir = Path(kernel_path) / BUILD_OUTPUT_DIR
        if not build_dir.is_dir():
            return ServiceResult.from_error(UploadError(f"Build output not found at {build_dir}"))

        logger.info(f"Uploading {build_dir} to Hugging Face: {repo_id}")

        try:
            result = self._upload_folder(str(build_dir), repo_id, token, path_in_repo=BUILD_OUTPUT_DIR)
        except Exception as e:
            return ServiceResult.from_error(UploadError(f"Upload to {repo_id} failed: {e}"))

        return ServiceResult.ok(
            data=result,
            message=f"Successfully uploaded kernel to {repo_id}",
        )
