"""
Unit tests for kernel_ci.core.workflow.
"""

import io

from kernel_ci.core.workflow import Workflow


class TestWorkflowCommands:
    """``::command::`` lines on stdout."""

    def test_group(self, workflow):
        with workflow.group("Build Kernel"):
            pass

        assert workflow.lines == ["::group::Build Kernel", "::endgroup::"]

    def test_group_closes_on_error(self, workflow):
        try:
            with workflow.group("Copy Kernel"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert workflow.lines[-1] == "::endgroup::"

    def test_messages_are_escaped(self, workflow):
        workflow.error("line one\nline two 100%", title="a:b,c")

        assert workflow.lines == ["::error title=a%3Ab%2Cc::line one%0Aline two 100%25"]

    def test_warning(self, workflow):
        workflow.warning("careful")

        assert workflow.commands("warning") == ["careful"]

    def test_echo_command_starts_the_line(self, workflow):
        workflow.echo_command("nix build -L .#ci")

        assert workflow.lines == ["[command]nix build -L .#ci"]

    def test_add_mask_ignores_empty(self, workflow):
        workflow.add_mask("")
        workflow.add_mask("s3cret")

        assert workflow.commands("add-mask") == ["s3cret"]

    def test_set_failed(self, workflow):
        workflow.set_failed("Build result not found at /src/result")

        assert workflow.failed is True
        assert workflow.failure_message == "Build result not found at /src/result"
        assert workflow.commands("error") == ["Build result not found at /src/result"]


class TestWorkflowFiles:
    """File-backed commands."""

    def test_set_output(self, workflow):
        workflow.set_output("kernel-path", "kernel-output")
        workflow.set_output("artifact-name", "kernel")

        assert workflow.outputs == {"kernel-path": "kernel-output", "artifact-name": "kernel"}
        assert workflow.written_outputs() == {"kernel-path": "kernel-output", "artifact-name": "kernel"}

    def test_set_output_empty_value(self, workflow):
        workflow.set_output("kernel-path", "")

        assert workflow.written_outputs() == {"kernel-path": ""}

    def test_add_path(self, workflow):
        workflow.add_path("/nix/var/nix/profiles/default/bin")

        assert workflow.path_file.read_text() == "/nix/var/nix/profiles/default/bin\n"
        assert workflow.paths == ["/nix/var/nix/profiles/default/bin"]

    def test_append_summary(self, workflow):
        workflow.append_summary("## Title")

        assert workflow.summary == "## Title\n"

    def test_without_runner_files(self):
        stream = io.StringIO()
        workflow = Workflow(environ={}, stream=stream)

        workflow.set_output("kernel-path", "x")
        workflow.add_path("/bin")
        workflow.append_summary("ignored")

        assert workflow.outputs == {"kernel-path": "x"}
        assert workflow.on_runner is False
        assert stream.getvalue() == ""
