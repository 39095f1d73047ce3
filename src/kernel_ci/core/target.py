"""
Target Selection
================

Decides which flake output is passed to Nix.

The flake's upload target pushes to a repository hard-coded in the flake.
When the user names their own repository, the run builds the copy-only
target instead and uploads the copied build output to that repository itself.
"""

from kernel_ci.core.constants import COPY_TARGET, UPLOAD_TARGET
from kernel_ci.models.inputs import ActionInputs, TargetSelection


def requires_manual_upload(inputs: ActionInputs) -> bool:
    """True when the upload target is requested together with an explicit repository."""
    return bool(inputs.hf_repo) and inputs.build_target == UPLOAD_TARGET


def select_target(inputs: ActionInputs) -> TargetSelection:
    """
    Compute the effective build target.

    Args:
        inputs: Resolved action inputs

    Returns:
        TargetSelection with the requested and effective targets
    """
    manual_upload = requires_manual_upload(inputs)
    effective = COPY_TARGET if manual_upload else inputs.build_target

    return TargetSelection(
        requested_target=inputs.build_target,
        effective_target=effective,
        manual_upload_required=manual_upload,
    )
