"""
Configuration loader for YAML files.

Loads and validates configuration from YAML files into Pydantic models.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from tendersync.core.errors import ConfigurationError

from .models import AppConfig, SyncSettings


DEFAULT_APP_CONFIG_PATH = Path("configs/app.yaml")
CONFIG_PATH_ENV = "TENDERSYNC_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML contents

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}",
            path=path,
            details=str(e),
            cause=e,
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read {path}",
            path=path,
            details=str(e),
            cause=e,
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a mapping at the top of {path}", path=path)
    return data


def _expand_env_vars(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand environment variables in string values.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        data: Dictionary with potential env var references

    Returns:
        Dictionary with expanded values
    """
    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2) or ""
        return os.environ.get(var_name, default)

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        return value

    return expand_value(data)


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
) -> AppConfig:
    """Load application configuration from YAML file.

    Args:
        path: Path to app.yaml (default: $TENDERSYNC_CONFIG or configs/app.yaml)
        expand_env: Whether to expand environment variables

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_APP_CONFIG_PATH))
    else:
        path = Path(path)

    # If file doesn't exist, return defaults
    if not path.exists():
        return AppConfig()

    data = _load_yaml_file(path)

    if expand_env:
        data = _expand_env_vars(data)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid app configuration in {path}",
            path=path,
            details=str(e),
            cause=e,
        ) from e


def load_sync_settings(
    path: Path | str,
    expand_env: bool = True,
) -> SyncSettings:
    """Load a standalone sync settings file.

    Args:
        path: Path to a YAML file with pageSize/tenderCategory/... keys
        expand_env: Whether to expand environment variables

    Returns:
        Validated SyncSettings instance

    Raises:
        ConfigurationError: If the file is missing or invalid
    """
    path = Path(path)
    data = _load_yaml_file(path)

    if expand_env:
        data = _expand_env_vars(data)

    try:
        return SyncSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid sync settings in {path}",
            path=path,
            details=str(e),
            cause=e,
        ) from e
