"""
=======================
Configuration Utilities
=======================

Functions for building the layered configuration used by a
:class:`BootLoader <bootloader.loader.BootLoader>`.

Configuration values are resolved from three layers, lowest priority first:

1. ``base``: the defaults in :data:`DEFAULT_CONFIGURATION`.
2. ``user_configs``: ``~/bootloader.yaml``, if it exists.
3. ``override``: values supplied by the caller.

"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from layered_config_tree import ConfigurationError, LayeredConfigTree

DEFAULT_CONFIGURATION: dict[str, Any] = {
    "fetch": {
        "method": "GET",
        "timeout": 10.0,
        "headers": {"Accept": "application/json"},
    },
    "scripts": {
        "module_prefix": "bootloader.scripts",
    },
    "resources": {
        "detect_cycles": False,
    },
    "logging": {
        "verbosity": 0,
        "long_format": True,
        "output_directory": None,
    },
}
"""The default configuration for all loaders."""

CONFIGURATION_LAYERS = ["base", "user_configs", "override"]
USER_CONFIGURATION_PATH = Path("~/bootloader.yaml")

# Sections whose keys are free-form.
_OPEN_SECTIONS = {"fetch.headers"}


def build_configuration(
    configuration: Mapping[str, Any] | LayeredConfigTree | None = None,
) -> LayeredConfigTree:
    """Build a loader configuration.

    Parameters
    ----------
    configuration
        Values that override both the defaults and the user configuration file.

    Returns
    -------
        The layered configuration.

    Raises
    ------
    ConfigurationError
        If the user configuration file or ``configuration`` contains keys that
        are not part of the loader configuration.
    """
    config = LayeredConfigTree(layers=CONFIGURATION_LAYERS)
    config.update(DEFAULT_CONFIGURATION, layer="base", source="bootloader_defaults")

    user_config_path = USER_CONFIGURATION_PATH.expanduser()
    if user_config_path.exists():
        with user_config_path.open() as f:
            user_config = yaml.safe_load(f) or {}
        validate_configuration(user_config, source=str(user_config_path))
        config.update(user_config, layer="user_configs", source=str(user_config_path))

    if configuration is not None:
        if isinstance(configuration, LayeredConfigTree):
            configuration = configuration.to_dict()
        validate_configuration(configuration)
        config.update(dict(configuration), layer="override", source="user_supplied_args")

    return config


def validate_configuration(
    configuration: Mapping[str, Any], source: str = "user_supplied_args"
) -> None:
    """Ensures ``configuration`` only contains known configuration keys."""
    _validate_section(configuration, DEFAULT_CONFIGURATION, prefix="", source=source)


def _validate_section(
    section: Any, defaults: Mapping[str, Any], prefix: str, source: str
) -> None:
    if not isinstance(section, Mapping):
        raise ConfigurationError(
            f"Configuration section '{prefix or 'root'}' from {source} must be a mapping.",
            value_name=prefix or None,
        )
    for key, value in section.items():
        path = f"{prefix}.{key}" if prefix else key
        if key not in defaults:
            raise ConfigurationError(
                f"Unknown configuration key '{path}' from {source}.", value_name=path
            )
        if isinstance(defaults[key], dict) and path not in _OPEN_SECTIONS:
            _validate_section(value, defaults[key], path, source)
