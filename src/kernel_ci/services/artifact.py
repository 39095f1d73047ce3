# services/artifact.py
"""
Service for uploading files to the GitHub Actions artifact store.

Uses the v4 artifact protocol of the Actions results service:

1. The files are zipped into a single archive
2. CreateArtifact returns a signed blob upload URL and the archive is PUT
   there as a single block blob
3. FinalizeArtifact records the uploaded size and sha256 digest

The runner provides the service URL (ACTIONS_RESULTS_URL) and a job-scoped
token (ACTIONS_RUNTIME_TOKEN). The workflow run and job ids the service
expects are read from the token's ``scp`` claim.
"""

import base64
import hashlib
import json
import os
import tempfile
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from kernel_ci.core.exceptions import UploadError
from kernel_ci.core.logger import get_logger
from kernel_ci.models.artifact import UploadResult

from .base import BaseService, ServiceResult

logger = get_logger(__name__)

TWIRP_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
ARTIFACT_VERSION = 4
RESULTS_SCOPE_PREFIX = "Actions.Results:"


def parse_backend_ids(runtime_token: str) -> Tuple[str, str]:
    """
    Extract the workflow run and job backend ids from the runtime token.

    Args:
        runtime_token: ACTIONS_RUNTIME_TOKEN (a JWT)

    Returns:
        (workflow_run_backend_id, workflow_job_run_backend_id)

    Raises:
        UploadError: If the token has no results scope
    """
    try:
        payload_segment = runtime_token.split(".")[1]
        padded = payload_segment + "=" * (-len(payload_segment) % 4)
        claims = json.loads(base64.urlsafe_b64decode(padded))
    except (IndexError, ValueError) as e:
        raise UploadError(f"Malformed ACTIONS_RUNTIME_TOKEN: {e}") from e

    for scope in str(claims.get("scp", "")).split():
        if scope.startswith(RESULTS_SCOPE_PREFIX):
            parts = scope.split(":")
            if len(parts) == 3:
                return parts[1], parts[2]

    raise UploadError("ACTIONS_RUNTIME_TOKEN does not grant access to the results service")


def zip_files(files: Sequence[Path], root_dir: Path, destination: Path) -> Tuple[int, str]:
    """
    Write files into a zip archive, named relative to root_dir.

    Files dated before 1980 are stored with the earliest zip timestamp.

    Returns:
        (archive size in bytes, sha256 hex digest)
    """
    with zipfile.ZipFile(
        destination, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
    ) as archive:
        for path in files:
            archive.write(path, arcname=path.relative_to(root_dir).as_posix())

    digest = hashlib.sha256()
    with open(destination, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)

    return destination.stat().st_size, digest.hexdigest()


def create_session(total_retries: int = 3) -> requests.Session:
    """HTTP session that retries transient server errors."""
    session = requests.Session()
    retry = Retry(
        total=total_retries,
        backoff_factor=1.0,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["POST", "PUT"],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


class ArtifactService(BaseService):
    """
    Service for uploading a directory as a named workflow artifact.

    Args:
        session: HTTP session (default: a retrying requests session)
        environ: Environment to read runner credentials from (default: os.environ)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._session = session
        self._environ = os.environ if environ is None else environ

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_session()
        return self._session

    def list_files(self, root_dir: str) -> List[Path]:
        """Every regular file below root_dir."""
        return self._iter_files(Path(root_dir))

    def _twirp(self, method: str, body: Dict[str, Any], token: str, base_url: str) -> Dict[str, Any]:
        url = f"{base_url.rstrip('/')}/{TWIRP_SERVICE}/{method}"
        response = self.session.post(
            url,
            json=body,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            timeout=self.config.artifact.get("timeout", 300),
        )
        if response.status_code != 200:
            raise UploadError(f"{method} failed with HTTP {response.status_code}: {response.text}")
        data = response.json()
        if not data.get("ok", False):
            raise UploadError(f"{method} was rejected by the artifact service")
        return data

    def upload_directory(self, root_dir: str, artifact_name: str) -> ServiceResult[UploadResult]:
        """
        Upload every file below root_dir as one artifact.

        Args:
            root_dir: Directory to upload; archive paths are relative to it
            artifact_name: Name of the artifact

        Returns:
            ServiceResult containing the UploadResult
        """
        logger.info(f"Uploading artifact: {artifact_name}")

        error = self._validate_input_path(root_dir)
        if error:
            return ServiceResult.from_error(UploadError(error))

        files = self.list_files(root_dir)
        if not files:
            return ServiceResult.from_error(UploadError(f"No files found to upload in {root_dir}"))

        try:
            result = self._upload(Path(root_dir), files, artifact_name)
        except UploadError as e:
            return ServiceResult.from_error(e)
        except (requests.RequestException, OSError, ValueError) as e:
            return ServiceResult.from_error(UploadError(f"Artifact upload failed: {e}"))

        return ServiceResult.ok(data=result, message="Artifact uploaded successfully")

    def _upload(self, root_dir: Path, files: List[Path], artifact_name: str) -> UploadResult:
        token = self._environ.get("ACTIONS_RUNTIME_TOKEN", "")
        base_url = self._environ.get("ACTIONS_RESULTS_URL", "")
        if not token or not base_url:
            raise UploadError(
                "Artifact upload requires ACTIONS_RUNTIME_TOKEN and ACTIONS_RESULTS_URL "
                "(only available inside a GitHub Actions job)"
            )

        run_id, job_id = parse_backend_ids(token)
        ids = {"workflow_run_backend_id": run_id, "workflow_job_run_backend_id": job_id}

        create_body: Dict[str, Any] = {**ids, "name": artifact_name, "version": ARTIFACT_VERSION}
        retention_days = self.config.artifact.get("retention_days", 0)
        if retention_days:
            create_body["expires_at"] = _expiry_timestamp(retention_days)

        with tempfile.TemporaryDirectory() as tmp:
            # No artifact is created until the archive is complete
            archive = Path(tmp) / f"{artifact_name}.zip"
            size, sha256 = zip_files(files, root_dir, archive)
            logger.debug(f"Zipped {len(files)} files ({size} bytes)")

            created = self._twirp("CreateArtifact", create_body, token, base_url)
            upload_url = created.get("signed_upload_url")
            if not upload_url:
                raise UploadError("CreateArtifact returned no upload URL")

            with open(archive, "rb") as f:
                response = self.session.put(
                    upload_url,
                    data=f,
                    headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
                    timeout=self.config.artifact.get("timeout", 300),
                )
            if response.status_code not in (200, 201):
                raise UploadError(f"Blob upload failed with HTTP {response.status_code}")

        finalized = self._twirp(
            "FinalizeArtifact",
            {**ids, "name": artifact_name, "size": str(size), "hash": f"sha256:{sha256}"},
            token,
            base_url,
        )

        return UploadResult(
            artifact_name=artifact_name,
            artifact_id=str(finalized.get("artifact_id", "")),
            files_uploaded=len(files),
            size_bytes=size,
            digest=f"sha256:{sha256}",
        )


def _expiry_timestamp(retention_days: int) -> str:
    expires = datetime.now(timezone.utc) + timedelta(days=int(retention_days))
    return expires.strftime("%Y-%m-%dT%H:%M:%SZ")
