"""Configuration management commands."""

import click


@click.group()
def config() -> None:
    """Configuration file commands."""
    pass


@config.command("show")
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="Configuration file")
def config_show(config_path) -> None:
    """Show the merged configuration."""
    from kernel_ci.cli.progress import console
    from kernel_ci.cli.service_helpers import load_settings

    config_obj = load_settings(config_path)

    console.print("\n[bold]Current Configuration[/bold]")
    if config_obj._source:
        console.print(f"[dim]Source: {config_obj._source}[/dim]\n")
    else:
        console.print("[dim]Source: defaults (no config file found)[/dim]\n")

    for section_name, section in config_obj.to_dict().items():
        if section:
            console.print(f"[bold blue]\\[{section_name}][/bold blue]")
            for key, value in section.items():
                console.print(f"  {key} = {value}")
            console.print()


@config.command("init")
@click.option("--output", "-o", default="kernel-ci.toml", help="Output file path")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing file")
def config_init(output: str, force: bool) -> None:
    """Create a default configuration file."""
    from pathlib import Path

    from kernel_ci.cli.progress import print_error, print_success
    from kernel_ci.core.config import create_default_config_file

    if Path(output).exists() and not force:
        print_error(f"Configuration file already exists: {output}")
        click.echo("Use --force to overwrite.")
        raise SystemExit(1)

    try:
        path = create_default_config_file(output)
    except OSError as e:
        print_error(f"Could not write {output}: {e}")
        raise SystemExit(1) from e

    print_success(f"Created configuration file: {path}")


@config.command("path")
def config_path() -> None:
    """Show configuration file search paths."""
    from kernel_ci.cli.progress import console
    from kernel_ci.core.config import find_config_file, get_config_locations

    console.print("\n[bold]Configuration File Search Paths[/bold]\n")
    console.print("Files are merged in order (first listed wins):\n")

    active_config = find_config_file()

    for i, location in enumerate(get_config_locations(), 1):
        status = (
            "[green]✓ ACTIVE[/green]"
            if location == active_config
            else ("[dim]exists[/dim]" if location.exists() else "[dim]not found[/dim]")
        )
        console.print(f"  {i}. {location} {status}")

    console.print()
