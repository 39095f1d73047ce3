"""Shared fixtures for service tests."""

import base64
import json

import pytest


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).decode().rstrip("=")


@pytest.fixture
def runtime_token() -> str:
    """A runtime token (JWT) scoped to workflow run ``run-1`` and job ``job-2``."""
    header = _b64({"alg": "none", "typ": "JWT"})
    payload = _b64({"scp": "Actions.GenericRead:abc Actions.Results:run-1:job-2"})
    return f"{header}.{payload}.signature"


@pytest.fixture
def runner_environ(runtime_token) -> dict:
    return {
        "ACTIONS_RUNTIME_TOKEN": runtime_token,
        "ACTIONS_RESULTS_URL": "https://results.example.test/",
    }


@pytest.fixture
def packaged_kernel(tmp_path):
    """A packaged kernel directory."""
    root = tmp_path / "kernel-output"
    (root / "torch29" / "kernel").mkdir(parents=True)
    (root / "torch29" / "kernel" / "__init__.py").write_text("x = 1\n")
    (root / "README.md").write_text("# kernel\n")
    return root
