"""Options shared by the run and plan commands."""

import click

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Configuration file (highest priority in the config cascade)",
)

input_option = click.option(
    "--input",
    "-i",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override an action input, e.g. --input mode=run (repeatable)",
)

debug_option = click.option("--debug", is_flag=True, help="Enable debug logging")
