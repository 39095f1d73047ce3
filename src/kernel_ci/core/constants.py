"""
Constants
=========

Reserved literals shared by the action: input and output names, the reserved
build targets, and the fixed locations produced by the build tool.
"""

from typing import Dict, Tuple

# =============================================================================
# Build Targets
# =============================================================================

# Upload target of the kernel flake; it always pushes to its own hard-coded repository
UPLOAD_TARGET = "build-and-upload"

# Builds and copies the variants into <kernel-path>/build without uploading
COPY_TARGET = "build-and-copy"

DEFAULT_BUILD_TARGET = "redistributable.torch29-cxx11-cu126-x86_64-linux"

# =============================================================================
# Execution Modes
# =============================================================================

MODE_BUILD = "build"
MODE_RUN = "run"
EXECUTION_MODES: Tuple[str, ...] = (MODE_BUILD, MODE_RUN)

# =============================================================================
# Sandbox Policies
# =============================================================================

SANDBOX_DIRECTIVES: Dict[str, str] = {
    "relaxed": "sandbox = relaxed",
    "true": "sandbox = true",
    "false": "sandbox = false",
}
SANDBOX_FALLBACK_DIRECTIVE = "sandbox-fallback = false"

# =============================================================================
# Filesystem Layout
# =============================================================================

# Symlink created by `nix build` in the kernel directory
RESULT_LINK = "result"

# Directory the copy-only target writes build variants to
BUILD_OUTPUT_DIR = "build"

OUTPUT_DIR_SUFFIX = "-output"

# =============================================================================
# Environment
# =============================================================================

HUB_REPO_ENV = "HF_REPO"
HUB_TOKEN_ENV = "HF_TOKEN"

# =============================================================================
# Workflow Outputs
# =============================================================================

OUTPUT_KERNEL_PATH = "kernel-path"
OUTPUT_ARTIFACT_NAME = "artifact-name"
