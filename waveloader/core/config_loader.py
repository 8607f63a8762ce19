#!/usr/bin/env python3
"""Configuration loader for loader option files."""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from waveloader.core.config_schema import LoaderConfig, validate_config
from waveloader.core.logging_utils import setup_logger

logger = setup_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "loader.yaml"


def load_config(
    config_path: str | Path = DEFAULT_CONFIG_PATH,
    overrides: dict[str, Any] | None = None,
) -> LoaderConfig:
    """Load loader options from a YAML file.

    The file may either hold the options at the top level or under a
    ``loader`` key. Overrides are merged on top before validation.

    Args:
        config_path: Path to the YAML file
        overrides: Optional options that take precedence over the file

    Returns:
        Validated LoaderConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        pydantic.ValidationError: If the options are invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file) as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if "loader" in config and isinstance(config["loader"], dict):
        config = config["loader"]

    if overrides:
        _deep_merge(config, overrides)

    config = _expand_env_vars(config)

    validated = validate_config(config)
    logger.debug(f"Loaded loader config from {config_file}")
    return validated


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand ${VAR} environment variables in config.

    Args:
        obj: Config object (dict, list, str, or other)

    Returns:
        Object with environment variables expanded
    """
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):

        def replace_env(match):
            var_name = match.group(1) or match.group(2)
            return os.getenv(var_name, match.group(0))  # Keep original if not found

        return re.sub(r"\$\{([^}]+)\}|\$([A-Z_][A-Z0-9_]*)", replace_env, obj)
    else:
        return obj


def _deep_merge(base: dict, override: dict):
    """Deep merge override dict into base dict in-place.

    Args:
        base: Base configuration dictionary (modified in-place)
        override: Override configuration dictionary
    """
    for key, value in override.items():
        if isinstance(value, dict) and key in base and isinstance(base[key], dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
