"""
kernel-ci CLI - build and publish Nix kernels from GitHub Actions
"""

import click

from kernel_ci import __version__

from .commands import config, plan, run


@click.group()
@click.version_option(version=__version__, prog_name="kernel-ci")
def cli() -> None:
    """kernel-ci - Nix kernel builds for GitHub Actions

    Action inputs are read from INPUT_* environment variables and can be
    overridden with --input KEY=VALUE.

    Use 'kernel-ci COMMAND --help' for more information on a command.
    """
    pass


# Register commands
cli.add_command(run)
cli.add_command(plan)
cli.add_command(config)


if __name__ == "__main__":
    cli()
