# core/pipeline/stages.py
"""
Stage Handlers
==============

The stages of the action, in run order:

1. install-nix       Install Nix and put its profile on the search path
2. setup-cachix      Configure the binary cache (skipped without a cache name)
3. build-kernel      nix build / nix run of the effective target
4. manual-upload     Upload <kernel>/build to the user's repository, then stop
5. copy-kernel       Copy the build result to <artifact>-output
6. upload-artifact   Upload the copy as a workflow artifact
7. publish-hub       Publish the copy to the Hugging Face Hub

Each handler unwraps its service result into the error type of that
stage, so the engine records which collaborator failed.
"""

from typing import List, Optional

from kernel_ci.core.constants import MODE_RUN
from kernel_ci.core.exceptions import (
    BuildError,
    BuildResultMissing,
    CacheError,
    CopyError,
    InstallError,
    PublishError,
    UploadError,
)
from kernel_ci.core.logger import get_logger

from .context import PipelineContext
from .engine import PipelineEngine, PipelineStage, SkipStage

logger = get_logger(__name__)

PUBLISH_CREDENTIALS_MISSING = "Publish requested but hf-token or hf-repo not provided. Skipping publish."
CACHIX_SKIPPED = "Skipping Cachix setup (no cache name provided)"


def install_nix(ctx: PipelineContext) -> Optional[str]:
    inputs = ctx.inputs
    installed = ctx.services.nix.install(
        inputs.nix_max_jobs,
        inputs.nix_cores,
        inputs.sandbox,
        inputs.extra_conf,
        search_path=ctx.search_path,
    ).unwrap(InstallError)

    ctx.add_path(installed.profile_bin)
    return None


def setup_cachix(ctx: PipelineContext) -> Optional[str]:
    inputs = ctx.inputs
    ctx.services.cachix.setup(
        inputs.cachix_name,
        inputs.cachix_auth_token,
        search_path=ctx.search_path,
    ).unwrap(CacheError)
    return None


def build_kernel(ctx: PipelineContext) -> Optional[str]:
    """
    Build the effective target and apply the result policy.

    - build mode: the result link must exist
    - run mode: no result means the target published itself; stop successfully
    - manual upload: the result link is not used
    """
    inputs = ctx.inputs
    selection = ctx.selection

    service_result = ctx.services.build.build(
        inputs.kernel_path,
        selection.effective_target,
        mode=inputs.mode,
        verbose=inputs.verbose,
        hf_repo=inputs.hf_repo,
        hf_token=inputs.hf_token,
        search_path=ctx.search_path,
    )
    build = service_result.unwrap(BuildError)

    if selection.manual_upload_required:
        return None

    if build.has_result:
        ctx.result_path = build.result_path
        return build.result_path

    if inputs.mode == MODE_RUN:
        logger.info("No build result found; the target handled its own output")
        ctx.halt("run mode produced no build result")
        return None

    raise BuildResultMissing(service_result.metadata["expected_result_path"])


def manual_upload(ctx: PipelineContext) -> Optional[str]:
    inputs = ctx.inputs
    logger.info(f"Uploading kernel to Hugging Face: {inputs.hf_repo}")
    ctx.services.huggingface.upload_build(
        inputs.kernel_path,
        inputs.hf_repo,
        inputs.hf_token,
    ).unwrap(UploadError)

    ctx.kernel_path = ""
    ctx.halt("kernel uploaded to the Hub directly")
    return None


def copy_kernel(ctx: PipelineContext) -> Optional[str]:
    copied = ctx.services.packaging.copy_kernel(
        ctx.result_path,
        ctx.inputs.artifact_name,
    ).unwrap(CopyError)

    ctx.output_dir = copied.output_path
    ctx.kernel_path = copied.output_path
    return copied.output_path


def upload_artifact(ctx: PipelineContext) -> Optional[str]:
    ctx.services.artifact.upload_directory(
        ctx.output_dir,
        ctx.inputs.artifact_name,
    ).unwrap(UploadError)
    return None


def publish_hub(ctx: PipelineContext) -> Optional[str]:
    inputs = ctx.inputs
    if not inputs.can_publish:
        ctx.workflow.warning(PUBLISH_CREDENTIALS_MISSING)
        raise SkipStage(PUBLISH_CREDENTIALS_MISSING, warning=True)

    ctx.services.huggingface.publish(
        ctx.output_dir,
        inputs.hf_repo,
        inputs.hf_token,
    ).unwrap(PublishError)
    return None


def _packaging(ctx: PipelineContext) -> bool:
    return not ctx.selection.manual_upload_required


def default_stages() -> List[PipelineStage]:
    """The stages of the action, in run order."""
    return [
        PipelineStage("install-nix", "Install Nix", install_nix),
        PipelineStage(
            "setup-cachix",
            "Setup Cachix",
            setup_cachix,
            condition=lambda ctx: bool(ctx.inputs.cachix_name),
            skip_message=CACHIX_SKIPPED,
        ),
        PipelineStage("build-kernel", "Build Kernel", build_kernel),
        PipelineStage(
            "manual-upload",
            "Upload Kernel to Hugging Face",
            manual_upload,
            condition=lambda ctx: ctx.selection.manual_upload_required,
        ),
        PipelineStage("copy-kernel", "Copy Kernel", copy_kernel, condition=_packaging),
        PipelineStage(
            "upload-artifact",
            "Upload Artifact",
            upload_artifact,
            condition=lambda ctx: _packaging(ctx) and ctx.inputs.upload_artifact,
            skip_message="Skipping artifact upload (upload-artifact is false)",
        ),
        PipelineStage(
            "publish-hub",
            "Publish to Hugging Face",
            publish_hub,
            condition=lambda ctx: _packaging(ctx) and ctx.inputs.publish,
        ),
    ]


def build_pipeline() -> PipelineEngine:
    """Engine loaded with the default stages."""
    return PipelineEngine(default_stages())
