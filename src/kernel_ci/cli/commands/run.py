"""Action run command."""

import click

from .options import config_option, debug_option, input_option


@click.command("run")
@config_option
@input_option
@debug_option
def run(config_path, overrides, debug):
    """Run the action: install Nix, build the kernel and distribute it.

    Exits with status 1 when any stage fails.
    """
    from kernel_ci.cli.service_helpers import collect_inputs, get_factory, load_settings
    from kernel_ci.core.pipeline import run_pipeline
    from kernel_ci.core.workflow import Workflow

    load_settings(config_path, debug)
    raw_inputs = collect_inputs(overrides)

    outcome = run_pipeline(raw_inputs, Workflow(), get_factory())

    if not outcome.success:
        raise SystemExit(1)
