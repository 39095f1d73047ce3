"""
Unit tests for kernel_ci.core.target.
"""

import pytest

from kernel_ci.core.inputs import resolve_inputs
from kernel_ci.core.target import requires_manual_upload, select_target


class TestSelectTarget:
    """Effective target selection."""

    def test_upload_target_with_repo_becomes_copy_target(self):
        selection = select_target(resolve_inputs({"build-target": "build-and-upload", "hf-repo": "org/model"}))

        assert selection.requested_target == "build-and-upload"
        assert selection.effective_target == "build-and-copy"
        assert selection.manual_upload_required is True
        assert selection.overridden is True

    def test_upload_target_without_repo_is_kept(self):
        selection = select_target(resolve_inputs({"build-target": "build-and-upload"}))

        assert selection.effective_target == "build-and-upload"
        assert selection.manual_upload_required is False
        assert selection.overridden is False

    @pytest.mark.parametrize("target", ["ci", "build-and-copy", "redistributable.torch29-cxx11-cu126-x86_64-linux"])
    def test_other_targets_are_kept_with_repo(self, target):
        selection = select_target(resolve_inputs({"build-target": target, "hf-repo": "org/model"}))

        assert selection.effective_target == target
        assert not selection.manual_upload_required

    def test_requires_manual_upload(self):
        assert requires_manual_upload(resolve_inputs({"build-target": "build-and-upload", "hf-repo": "o/m"}))
        assert not requires_manual_upload(resolve_inputs({"build-target": "ci", "hf-repo": "o/m"}))
