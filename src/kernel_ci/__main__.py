"""Allow ``python -m kernel_ci``."""

from kernel_ci.cli.cli import cli

if __name__ == "__main__":
    cli()
