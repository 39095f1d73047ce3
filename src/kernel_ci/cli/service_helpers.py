"""
CLI Service Helpers
===================

CLI-specific utilities shared by the commands:

1. A singleton ServiceFactory, replaceable with set_factory() in tests
2. Loading configuration and applying the log level
3. Collecting action inputs from the environment and --input overrides

Usage:
    from kernel_ci.cli.service_helpers import collect_inputs, get_factory

    raw = collect_inputs(("mode=run",))
    outcome = run_pipeline(raw, Workflow(), get_factory())
"""

from typing import Dict, Iterable, Optional

import click

from kernel_ci.core.config import Config, load_config_cascade, set_config
from kernel_ci.core.inputs import INPUT_NAMES, read_action_inputs
from kernel_ci.core.logger import runner_debug_enabled, set_level
from kernel_ci.services.factory import ServiceFactory

# Module-level singleton factory for CLI commands
_factory: Optional[ServiceFactory] = None


def get_factory() -> ServiceFactory:
    """
    Get the singleton ServiceFactory instance for the CLI.

    Created on first access with the active configuration. Use
    set_factory() to inject a custom instance.
    """
    global _factory
    if _factory is None:
        _factory = ServiceFactory()
    return _factory


def set_factory(factory: ServiceFactory) -> None:
    """
    Set a custom ServiceFactory instance.

    Example:
        # In tests
        set_factory(ServiceFactory(runner=RecordingRunner()))
    """
    global _factory
    _factory = factory


def reset_factory() -> None:
    """Drop the singleton so the next access creates a fresh factory."""
    global _factory
    _factory = None


def exit_with_error(message: str, code: int = 1) -> None:
    """Print an error message and exit."""
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(code)


def load_settings(config_path: Optional[str] = None, debug: bool = False) -> Config:
    """
    Load the configuration cascade, make it global and apply its log level.

    --debug and RUNNER_DEBUG=1 take precedence over the configured level.
    """
    try:
        config = load_config_cascade(config_path)
    except FileNotFoundError as e:
        exit_with_error(str(e))

    set_config(config)

    if debug or runner_debug_enabled():
        set_level("DEBUG")
    else:
        set_level(config.logging.get("level", "INFO"))

    return config


def parse_overrides(overrides: Iterable[str]) -> Dict[str, str]:
    """
    Parse --input KEY=VALUE options.

    Raises:
        click.BadParameter: For a malformed option or an unknown input name
    """
    parsed = {}
    for item in overrides:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--input")
        if key not in INPUT_NAMES:
            raise click.BadParameter(
                f"unknown input '{key}' (known: {', '.join(INPUT_NAMES)})",
                param_hint="--input",
            )
        parsed[key] = value
    return parsed


def collect_inputs(overrides: Iterable[str] = ()) -> Dict[str, str]:
    """Raw action inputs from INPUT_* variables, with --input overrides applied."""
    raw = read_action_inputs()
    raw.update(parse_overrides(overrides))
    return raw
