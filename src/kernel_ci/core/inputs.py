"""
Action Inputs
=============

Turns the raw string inputs of the action into an ActionInputs record.

Inputs arrive from the workflow as ``INPUT_<NAME>`` environment variables,
all optional. Empty values take a literal default. Flags follow one of two
conventions:

- opt-out (``verbose``, ``upload-artifact``): true unless exactly "false"
- opt-in (``publish``): true only if exactly "true"

Usage:
    from kernel_ci.core.inputs import read_action_inputs, resolve_inputs

    inputs = resolve_inputs(read_action_inputs())
"""

import os
from typing import Dict, Mapping, Optional

from kernel_ci.core.constants import DEFAULT_BUILD_TARGET, EXECUTION_MODES, MODE_BUILD
from kernel_ci.core.exceptions import ValidationError
from kernel_ci.models.inputs import ActionInputs

# Input name -> default applied when the raw value is empty
INPUT_DEFAULTS: Dict[str, str] = {
    "kernel-path": ".",
    "build-target": DEFAULT_BUILD_TARGET,
    "mode": MODE_BUILD,
    "artifact-name": "kernel",
    "cachix-name": "huggingface",
    "cachix-auth-token": "",
    "nix-max-jobs": "4",
    "nix-cores": "12",
    "sandbox": "fallback",
    "extra-conf": "",
    "hf-token": "",
    "hf-repo": "",
}

OPT_OUT_FLAGS = ("verbose", "upload-artifact")
OPT_IN_FLAGS = ("publish",)

INPUT_NAMES = tuple(INPUT_DEFAULTS) + OPT_OUT_FLAGS + OPT_IN_FLAGS

# Explicit value that disables the binary cache, since an empty input takes the default
CACHE_DISABLED = "none"


def input_env_name(name: str) -> str:
    """Environment variable the runner uses for an action input."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


def read_action_inputs(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Collect the raw action inputs from the environment.

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        Mapping of input name to raw value, for inputs that are set
    """
    environ = os.environ if environ is None else environ
    raw = {}
    for name in INPUT_NAMES:
        value = environ.get(input_env_name(name))
        if value is not None:
            raw[name] = value
    return raw


def _get(raw: Mapping[str, str], name: str) -> str:
    value = raw.get(name)
    return value.strip() if value else ""


def _text(raw: Mapping[str, str], name: str) -> str:
    return _get(raw, name) or INPUT_DEFAULTS[name]


def _opt_out(raw: Mapping[str, str], name: str) -> bool:
    return _get(raw, name) != "false"


def _opt_in(raw: Mapping[str, str], name: str) -> bool:
    return _get(raw, name) == "true"


def resolve_inputs(raw: Mapping[str, str]) -> ActionInputs:
    """
    Build the normalized inputs for a run.

    Args:
        raw: Mapping of input name to raw string value. Absent keys are empty.

    Returns:
        ActionInputs with defaults applied

    Raises:
        ValidationError: If ``mode`` is not one of "build" or "run"
    """
    mode = _text(raw, "mode")
    if mode not in EXECUTION_MODES:
        raise ValidationError(
            f"Invalid mode '{mode}': expected one of {', '.join(repr(m) for m in EXECUTION_MODES)}"
        )

    cachix_name = _text(raw, "cachix-name")
    if cachix_name == CACHE_DISABLED:
        cachix_name = ""

    # extra-conf is multi-line nix.conf text; keep it verbatim apart from outer whitespace
    return ActionInputs(
        kernel_path=_text(raw, "kernel-path"),
        build_target=_text(raw, "build-target"),
        mode=mode,
        verbose=_opt_out(raw, "verbose"),
        artifact_name=_text(raw, "artifact-name"),
        upload_artifact=_opt_out(raw, "upload-artifact"),
        cachix_name=cachix_name,
        cachix_auth_token=_get(raw, "cachix-auth-token"),
        nix_max_jobs=_text(raw, "nix-max-jobs"),
        nix_cores=_text(raw, "nix-cores"),
        sandbox=_text(raw, "sandbox"),
        extra_conf=_get(raw, "extra-conf"),
        hf_token=_get(raw, "hf-token"),
        hf_repo=_get(raw, "hf-repo"),
        publish=_opt_in(raw, "publish"),
    )
