"""
Configuration loader.

Reads an optional YAML file, overlays the environment variables the
deployment sets, and validates the result into Pydantic models.
"""

from __future__ import annotations

import os
import re
import shlex
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from animebatch.core.errors import ConfigError

from .models import AppConfig


DEFAULT_CONFIG_PATH = Path("configs/animebatch.yaml")

# Environment variable -> (section, key)
ENV_MAPPING: dict[str, tuple[str, str]] = {
    "OUTPUT_DIR": ("export", "output_dir"),
    "EXPORT_LIMIT": ("export", "default_limit"),
    "EXPORTER_COMMAND": ("export", "command"),
    "EXPORTER_CWD": ("export", "working_dir"),
    "FTP_HOST": ("transfer", "host"),
    "FTP_PORT": ("transfer", "port"),
    "FTP_USER": ("transfer", "user"),
    "FTP_PASS": ("transfer", "password"),
    "FTP_PATH": ("transfer", "remote_dir"),
    "SLACK_WEBHOOK": ("notify", "webhook_url"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_FILE": ("logging", "file"),
}

_ENV_REF = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}", details=str(e)) from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}", details=str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return data


def _expand_env_vars(data: Any, environ: Mapping[str, str]) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in string values."""
    if isinstance(data, str):
        return _ENV_REF.sub(
            lambda m: environ.get(m.group(1), m.group(2) or ""),
            data,
        )
    if isinstance(data, dict):
        return {k: _expand_env_vars(v, environ) for k, v in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item, environ) for item in data]
    return data


def _apply_environment(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay recognised environment variables onto the config data.

    Empty values count as unset.
    """
    for var, (section, key) in ENV_MAPPING.items():
        value = environ.get(var)
        if not value:
            continue

        if var == "EXPORTER_COMMAND":
            parsed: Any = shlex.split(value)
        else:
            parsed = value

        data.setdefault(section, {})[key] = parsed

    return data


def load_app_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load application configuration.

    Args:
        path: Optional YAML file (default: configs/animebatch.yaml if present)
        environ: Environment mapping (default: os.environ)

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    if environ is None:
        environ = os.environ

    data: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        data = _load_yaml_file(path)
    elif DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH
        data = _load_yaml_file(path)

    data = _expand_env_vars(data, environ)
    data = _apply_environment(data, environ)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("Invalid configuration", details=str(e)) from e
