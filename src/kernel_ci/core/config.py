"""
Configuration Management
========================

This module provides TOML-based configuration file support for kernel-ci.

Action inputs come from the workflow. This file only tunes the tools the
action drives: where installers are fetched from, how Nix is configured
beyond the inputs, Hub and artifact-store settings, and logging.

Configuration files are merged in the following order (highest to lowest priority):
1. Path specified via --config option
2. ./kernel-ci.toml (current directory)
3. ~/.config/kernel-ci/config.toml (user config)
4. Built-in defaults

Example configuration file (kernel-ci.toml):

    [nix]
    installer_url = "https://install.determinate.systems/nix"
    installer_path = "/tmp/nix-installer.sh"
    profile_bin = "/nix/var/nix/profiles/default/bin"
    experimental_features = "nix-command flakes"
    trusted_users = ["root", "runner"]

    [cachix]
    install_url = "https://cachix.org/api/v1/install"
    profile_bin = "~/.nix-profile/bin"

    [hub]
    repo_type = "model"
    commit_message = "Upload kernel"

    [artifact]
    timeout = 300
    retention_days = 0

    [logging]
    level = "INFO"
"""

import copy
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# Built-in settings; every file in the cascade is merged over these
DEFAULT_CONFIG: Dict[str, Any] = {
    "nix": {
        "installer_url": "https://install.determinate.systems/nix",
        "installer_path": "/tmp/nix-installer.sh",
        "profile_bin": "/nix/var/nix/profiles/default/bin",
        "experimental_features": "nix-command flakes",
        "trusted_users": [],  # empty = root plus the current user
    },
    "cachix": {
        "install_url": "https://cachix.org/api/v1/install",
        "profile_bin": "~/.nix-profile/bin",
    },
    "hub": {
        "repo_type": "model",
        "commit_message": "Upload kernel",
    },
    "artifact": {
        "timeout": 300,
        "retention_days": 0,  # 0 = repository default
    },
    "logging": {
        "level": "INFO",
    },
}

SECTIONS = tuple(DEFAULT_CONFIG)

CONFIG_FILENAME = "kernel-ci.toml"

# Highest priority first
CONFIG_LOCATIONS = [
    Path(CONFIG_FILENAME),
    Path("~/.config/kernel-ci/config.toml").expanduser(),
]


@dataclass
class Config:
    """
    Merged kernel-ci settings, one dict per TOML section.

    Attributes:
        nix: Installer location and nix.conf extras
        cachix: Cachix client installation
        hub: Hugging Face Hub repository settings
        artifact: Artifact store request settings
        logging: Log level
        _source: Highest-priority file that contributed, if any
    """

    nix: Dict[str, Any] = field(default_factory=dict)
    cachix: Dict[str, Any] = field(default_factory=dict)
    hub: Dict[str, Any] = field(default_factory=dict)
    artifact: Dict[str, Any] = field(default_factory=dict)
    logging: Dict[str, Any] = field(default_factory=dict)
    _source: Optional[str] = None

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Value of section.key, or default."""
        return (getattr(self, section, None) or {}).get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in SECTIONS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Config":
        """Build a Config from parsed TOML; unknown sections are ignored."""
        return cls(**{name: data.get(name, {}) for name in SECTIONS}, _source=source)


def load_toml(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a TOML file.

    Raises:
        FileNotFoundError: If the file is missing
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    with open(path, "rb") as f:
        return tomllib.load(f)


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_toml_value(v) for v in value) + "]"
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def save_toml(config: Dict[str, Any], filepath: Union[str, Path]) -> str:
    """
    Write a two-level dict (sections of scalar or list values) as TOML.

    Returns:
        Path of the written file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    blocks = []
    for section, values in config.items():
        if not isinstance(values, dict) or not values:
            continue
        body = [f"{key} = {_toml_value(value)}" for key, value in values.items() if value is not None]
        blocks.append("\n".join([f"[{section}]", *body]))

    path.write_text("\n\n".join(blocks) + "\n", encoding="utf-8")
    return str(path)


def get_config_locations() -> List[Path]:
    """Cascade file locations, highest priority first."""
    return list(CONFIG_LOCATIONS)


def find_config_file() -> Optional[Path]:
    """The highest-priority cascade file that exists, if any."""
    return next((p for p in get_config_locations() if p.exists()), None)


def get_default_config() -> Config:
    """A fresh Config holding the built-in defaults."""
    return Config.from_dict(copy.deepcopy(DEFAULT_CONFIG))


def create_default_config_file(filepath: Optional[str] = None) -> str:
    """Write the built-in defaults to filepath (default: ./kernel-ci.toml)."""
    return save_toml(DEFAULT_CONFIG, filepath or CONFIG_FILENAME)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config_cascade(explicit_path: Optional[str] = None) -> Config:
    """
    Merge the defaults, the cascade files and an explicit file.

    Cascade files that cannot be read are skipped with a warning. An
    explicit file was asked for by name, so problems with it propagate.

    Args:
        explicit_path: File merged last, with the highest priority

    Returns:
        Config with merged settings

    Raises:
        FileNotFoundError: If explicit_path does not exist
    """
    data = copy.deepcopy(DEFAULT_CONFIG)
    source = None

    for location in reversed(get_config_locations()):
        if not location.exists():
            continue
        try:
            data = _merge(data, load_toml(location))
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Ignoring {location}: {e}")
            continue
        source = str(location)
        logger.debug(f"Merged configuration from {location}")

    if explicit_path:
        data = _merge(data, load_toml(explicit_path))
        source = str(explicit_path)
        logger.debug(f"Merged configuration from {explicit_path}")

    return Config.from_dict(data, source=source)


_global_config: Optional[Config] = None


def get_config() -> Config:
    """The process-wide Config, loaded from the cascade on first use."""
    global _global_config
    if _global_config is None:
        _global_config = load_config_cascade()
    return _global_config


def set_config(config: Config) -> None:
    global _global_config
    _global_config = config


def reset_config() -> None:
    """Forget the process-wide Config; the next get_config() reloads it."""
    global _global_config
    _global_config = None
