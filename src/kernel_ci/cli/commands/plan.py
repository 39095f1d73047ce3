"""Show what a run would do without running it."""

import click

from .options import config_option, debug_option, input_option


@click.command("plan")
@config_option
@input_option
@debug_option
def plan(config_path, overrides, debug):
    """Resolve the inputs and show which stages would run.

    No external command is started. Secrets are redacted.
    """
    from kernel_ci.cli.progress import console, print_error, print_table, print_warning
    from kernel_ci.cli.service_helpers import collect_inputs, get_factory, load_settings
    from kernel_ci.core.exceptions import ValidationError
    from kernel_ci.core.inputs import resolve_inputs
    from kernel_ci.core.pipeline import PipelineContext, default_stages
    from kernel_ci.core.pipeline.stages import PUBLISH_CREDENTIALS_MISSING
    from kernel_ci.core.target import select_target
    from kernel_ci.core.workflow import Workflow
    from kernel_ci.services.build import build_command

    load_settings(config_path, debug)

    try:
        inputs = resolve_inputs(collect_inputs(overrides))
    except ValidationError as e:
        print_error(e.message)
        raise SystemExit(1) from e

    selection = select_target(inputs)

    print_table(
        "Action inputs",
        ["Input", "Value"],
        [[name.replace("_", "-"), value] for name, value in inputs.to_dict().items()],
    )

    if selection.overridden:
        console.print(
            f"Target [bold]{selection.requested_target}[/bold] is replaced by "
            f"[bold]{selection.effective_target}[/bold] to upload to {inputs.hf_repo}\n"
        )

    context = PipelineContext(
        inputs=inputs,
        selection=selection,
        workflow=Workflow(),
        services=get_factory(),
    )

    notes = {
        "build-kernel": " ".join(build_command(inputs.mode, selection.effective_target, inputs.verbose)),
        "manual-upload": f"{inputs.kernel_path}/build -> {inputs.hf_repo}",
        "copy-kernel": f"result -> {inputs.artifact_name}-output",
        "upload-artifact": inputs.artifact_name,
        "publish-hub": inputs.hf_repo,
    }

    rows = []
    for i, stage in enumerate(default_stages(), 1):
        runs = stage.should_run(context)
        note = notes.get(stage.name, "") if runs else (stage.skip_message or "")
        rows.append([i, stage.title, "run" if runs else "skip", note])

    print_table("Stages", ["#", "Stage", "Action", "Details"], rows)

    if inputs.publish and not inputs.can_publish:
        print_warning(PUBLISH_CREDENTIALS_MISSING)
