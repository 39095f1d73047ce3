"""
Integration tests for a full run with recorded collaborators.
"""

from pathlib import Path

import pytest

from kernel_ci.core.pipeline import run_pipeline
from kernel_ci.models.artifact import UploadResult
from kernel_ci.services.base import ServiceResult

pytestmark = pytest.mark.integration

NIX_BIN = "/nix/var/nix/profiles/default/bin"


@pytest.fixture
def artifact_upload(mocker, factory):
    """Stub the artifact store; returns the patched upload_directory."""
    return mocker.patch.object(
        factory.artifact,
        "upload_directory",
        return_value=ServiceResult.ok(
            data=UploadResult(
                artifact_name="kernel",
                artifact_id="1",
                files_uploaded=4,
                size_bytes=100,
                digest="sha256:00",
            )
        ),
    )


@pytest.fixture
def hf_api(mocker):
    return mocker.patch("huggingface_hub.HfApi").return_value


def _inputs(**overrides):
    raw = {"kernel-path": "kernel"}
    raw.update({k.replace("_", "-"): v for k, v in overrides.items()})
    return raw


class TestBuildScenario:
    """A plain build packages the result and publishes the outputs."""

    def test_build_and_package(self, workspace, factory, command_runner, workflow, successful_build, artifact_upload):
        outcome = run_pipeline(_inputs(build_target="ci", mode="build", artifact_name="kernel"), workflow, factory)

        assert outcome.success, outcome.message
        assert outcome.kernel_path == "kernel-output"
        assert outcome.artifact_name == "kernel"
        assert workflow.written_outputs() == {"kernel-path": "kernel-output", "artifact-name": "kernel"}
        assert (workspace / "kernel-output" / "README.md").exists()
        artifact_upload.assert_called_once_with("kernel-output", "kernel")

    def test_commands_in_order(self, workspace, factory, command_runner, workflow, successful_build, artifact_upload):
        run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert [c[:2] for c in command_runner.commands()] == [
            ["curl", "--proto"],
            ["sh", "/tmp/nix-installer.sh"],
            ["nix-env", "-iA"],
            ["cachix", "use"],
            ["nix", "build"],
        ]

    def test_search_path_reaches_later_commands(
        self, workspace, factory, command_runner, workflow, successful_build, artifact_upload
    ):
        run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert command_runner.calls_to("curl")[0].search_path == []
        assert command_runner.calls_to("nix", "build")[0].search_path == [NIX_BIN]
        assert workflow.path_file.read_text() == f"{NIX_BIN}\n"

    def test_log_groups(self, workspace, factory, workflow, successful_build, artifact_upload):
        run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert workflow.commands("group") == [
            "Install Nix",
            "Setup Cachix",
            "Build Kernel",
            "Copy Kernel",
            "Upload Artifact",
        ]
        assert len(workflow.commands("endgroup")) == 5

    def test_upload_artifact_disabled(self, workspace, factory, workflow, successful_build, artifact_upload):
        outcome = run_pipeline(_inputs(build_target="ci", upload_artifact="false"), workflow, factory)

        assert outcome.success
        artifact_upload.assert_not_called()

    def test_job_summary(self, workspace, factory, workflow, successful_build, artifact_upload):
        run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert "| Build Kernel | ✅ completed |" in workflow.summary
        assert "`kernel-output`" in workflow.summary


class TestManualUploadScenario:
    """The upload target with an explicit repository uploads directly."""

    @pytest.fixture
    def copy_build(self, command_runner):
        def write_build(call):
            build = Path(call.cwd, "build", "torch29")
            build.mkdir(parents=True)
            (build / "ops.so").write_bytes(b"so")

        command_runner.on(("nix", "build"), write_build)

    def test_manual_upload(self, workspace, factory, command_runner, workflow, copy_build, hf_api, artifact_upload):
        outcome = run_pipeline(
            _inputs(build_target="build-and-upload", hf_repo="org/model", hf_token="hf_tok"),
            workflow,
            factory,
        )

        assert outcome.success, outcome.message
        assert workflow.written_outputs() == {"kernel-path": "", "artifact-name": "kernel"}

        build = command_runner.calls_to("nix", "build")[0]
        assert build.args == ["nix", "build", "-L", ".#build-and-copy"]
        assert build.extra_env == {"HF_REPO": "org/model"}

        kwargs = hf_api.upload_folder.call_args.kwargs
        assert kwargs["repo_id"] == "org/model"
        assert kwargs["folder_path"] == str(Path("kernel") / "build")
        assert kwargs["path_in_repo"] == "build"

        assert not (workspace / "kernel-output").exists()
        artifact_upload.assert_not_called()
        assert "Upload Kernel to Hugging Face" in workflow.commands("group")

    def test_manual_upload_failure(self, workspace, factory, workflow, copy_build, hf_api):
        hf_api.upload_folder.side_effect = RuntimeError("403 Forbidden")

        outcome = run_pipeline(
            _inputs(build_target="build-and-upload", hf_repo="org/model"),
            workflow,
            factory,
        )

        assert not outcome.success
        assert outcome.error_type == "UploadError"
        assert workflow.written_outputs() == {}


class TestPublishScenario:
    def test_publish_without_token_warns(self, workspace, factory, workflow, successful_build, artifact_upload, hf_api):
        outcome = run_pipeline(_inputs(build_target="ci", publish="true"), workflow, factory)

        assert outcome.success
        assert outcome.warnings == ["Publish requested but hf-token or hf-repo not provided. Skipping publish."]
        assert workflow.commands("warning") == outcome.warnings
        hf_api.upload_folder.assert_not_called()

    def test_publish(self, workspace, factory, workflow, successful_build, artifact_upload, hf_api):
        outcome = run_pipeline(
            _inputs(build_target="ci", publish="true", hf_token="hf_tok", hf_repo="org/model"),
            workflow,
            factory,
        )

        assert outcome.success, outcome.message
        assert hf_api.upload_folder.call_args.kwargs["folder_path"] == "kernel-output"
        assert "hf_tok" in workflow.commands("add-mask")

    def test_publish_failure_fails_the_run(self, workspace, factory, workflow, successful_build, artifact_upload, hf_api):
        hf_api.upload_folder.side_effect = RuntimeError("boom")

        outcome = run_pipeline(
            _inputs(build_target="ci", publish="true", hf_token="t", hf_repo="org/model"),
            workflow,
            factory,
        )

        assert not outcome.success
        assert outcome.error_type == "PublishError"
        assert workflow.failed


class TestRunMode:
    def test_run_mode_without_result_succeeds(self, workspace, factory, command_runner, workflow, artifact_upload):
        outcome = run_pipeline(_inputs(build_target="ci", mode="run"), workflow, factory)

        assert outcome.success
        assert outcome.kernel_path == ""
        assert workflow.written_outputs() == {"kernel-path": "", "artifact-name": "kernel"}
        assert command_runner.calls_to("nix", "run")
        artifact_upload.assert_not_called()

    def test_run_mode_with_result_is_packaged(self, workspace, factory, command_runner, workflow, nix_store, artifact_upload):
        command_runner.on(("nix", "run"), lambda call: Path(call.cwd, "result").symlink_to(nix_store))

        outcome = run_pipeline(_inputs(build_target="ci", mode="run"), workflow, factory)

        assert outcome.kernel_path == "kernel-output"


class TestFailures:
    def test_invalid_mode_runs_nothing(self, workspace, factory, command_runner, workflow):
        outcome = run_pipeline(_inputs(mode="deploy"), workflow, factory)

        assert not outcome.success
        assert outcome.error_type == "ValidationError"
        assert command_runner.calls == []
        assert workflow.failed
        assert workflow.written_outputs() == {}

    def test_build_mode_without_result(self, workspace, factory, command_runner, workflow):
        outcome = run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert not outcome.success
        assert outcome.error_type == "BuildResultMissing"
        assert outcome.message == f"Build result not found at {workspace / 'kernel' / 'result'}"
        assert workflow.commands("error") == [outcome.message]
        assert workflow.written_outputs() == {}

    def test_install_failure_stops_the_run(self, workspace, factory, command_runner, workflow):
        command_runner.fail(("curl",))

        outcome = run_pipeline(_inputs(), workflow, factory)

        assert outcome.error_type == "InstallError"
        assert command_runner.commands()[-1][0] == "curl"
        assert len(command_runner.calls) == 1

    def test_cache_failure(self, workspace, factory, command_runner, workflow):
        command_runner.fail(("nix-env",))

        outcome = run_pipeline(_inputs(), workflow, factory)

        assert outcome.error_type == "CacheError"
        assert not command_runner.calls_to("nix", "build")

    def test_empty_cache_name_skips_cachix(self, workspace, factory, command_runner, workflow, successful_build, artifact_upload):
        outcome = run_pipeline(_inputs(build_target="ci", cachix_name="none"), workflow, factory)

        assert outcome.success
        assert not command_runner.calls_to("nix-env")
        assert not command_runner.calls_to("cachix")

    def test_unexpected_error_has_fallback_message(self, mocker, workspace, factory, workflow, successful_build):
        mocker.patch.object(factory.packaging, "copy_kernel", side_effect=RuntimeError())

        outcome = run_pipeline(_inputs(build_target="ci"), workflow, factory)

        assert not outcome.success
        assert workflow.failure_message == "An unexpected error occurred"
