# tests/conftest.py
"""
Global pytest fixtures for kernel-ci tests.
"""

import pytest

from kernel_ci.core.config import get_default_config, reset_config, set_config
from kernel_ci.services.factory import ServiceFactory
from tests.mocks.recording_runner import RecordingRunner
from tests.mocks.recording_workflow import RecordingWorkflow

INPUT_ENV_PREFIX = "INPUT_"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep runner variables and global config of the host out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith(INPUT_ENV_PREFIX) or name.startswith("GITHUB_") or name.startswith("ACTIONS_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("RUNNER_DEBUG", raising=False)

    set_config(get_default_config())
    yield
    reset_config()


@pytest.fixture
def config():
    """Default configuration."""
    return get_default_config()


@pytest.fixture
def command_runner() -> RecordingRunner:
    """Recording runner; no process is ever started."""
    return RecordingRunner()


@pytest.fixture
def factory(command_runner, config) -> ServiceFactory:
    """Service factory wired to the recording runner and an empty environment."""
    return ServiceFactory(runner=command_runner, config=config, environ={})


@pytest.fixture
def workflow(tmp_path) -> RecordingWorkflow:
    """Workflow writing to temporary GITHUB_* files."""
    return RecordingWorkflow(tmp_path / "_github")


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Working directory with an empty kernel source directory at ./kernel."""
    (tmp_path / "kernel").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def nix_store(tmp_path):
    """A fake store path holding a built kernel, with a symlink inside."""
    store = tmp_path / "_store" / "abc123-kernel"
    (store / "torch29-cxx11-cu126-x86_64-linux" / "kernel").mkdir(parents=True)
    variant = store / "torch29-cxx11-cu126-x86_64-linux" / "kernel"
    (variant / "__init__.py").write_text("from ._ops import ops\n")
    (variant / "_ops.so").write_bytes(b"\x7fELF fake")
    (store / "README.md").write_text("# kernel\n")
    (store / "LICENSE").symlink_to(store / "README.md")
    return store


@pytest.fixture
def successful_build(command_runner, nix_store):
    """Make ``nix build`` leave a result link in the kernel directory."""
    from pathlib import Path

    def link_result(call):
        Path(call.cwd, "result").symlink_to(nix_store, target_is_directory=True)

    command_runner.on(("nix", "build"), link_result)
    return nix_store
