"""Action input models."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from kernel_ci.models.base import ToDictMixin

REDACTED = "***"


@dataclass(frozen=True)
class ActionInputs(ToDictMixin):
    """
    Normalized action inputs, built once per run by resolve_inputs().

    Secret fields (cachix_auth_token, hf_token) may be empty, which disables
    the feature that needs them.
    """

    kernel_path: str
    build_target: str
    mode: str
    verbose: bool
    artifact_name: str
    upload_artifact: bool
    cachix_name: str
    cachix_auth_token: str
    nix_max_jobs: str
    nix_cores: str
    sandbox: str
    extra_conf: str
    hf_token: str
    hf_repo: str
    publish: bool

    @property
    def secrets(self) -> tuple:
        """Non-empty secret values, for masking."""
        return tuple(s for s in (self.cachix_auth_token, self.hf_token) if s)

    @property
    def can_publish(self) -> bool:
        """Publishing needs both a token and a target repository."""
        return bool(self.hf_token and self.hf_repo)

    def _to_dict_extra(self) -> Optional[Dict[str, Any]]:
        return {
            "cachix_auth_token": REDACTED if self.cachix_auth_token else "",
            "hf_token": REDACTED if self.hf_token else "",
        }


@dataclass(frozen=True)
class TargetSelection(ToDictMixin):
    """The build target actually passed to Nix, after override rules."""

    requested_target: str
    effective_target: str
    manual_upload_required: bool

    @property
    def overridden(self) -> bool:
        return self.requested_target != self.effective_target
