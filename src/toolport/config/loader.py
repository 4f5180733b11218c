"""
Configuration loader for toolport.

Loads and merges configuration from multiple sources:
1. Default values
2. Global config (~/.toolport/config.yaml)
3. Explicit config file (--config / TOOLPORT_CONFIG) or project config (./.toolport.yaml)
4. Environment variables (TOOLPORT_*)
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from toolport.config.merger import document_for, merge_documents, merge_layers, resolve_key_path
from toolport.config.schema import Config
from toolport.storage.paths import find_project_config, get_global_config_path

ENV_PREFIX = "TOOLPORT_"

# Variables with their own meaning, never treated as config overrides
_RESERVED_ENV = {"TOOLPORT_HOME", "TOOLPORT_CONFIG"}


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed configuration dictionary (empty if the file does not exist).

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")
    return content


def env_overrides(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """
    Build the environment layer.

    Environment variables follow the pattern TOOLPORT_<SECTION>_<KEY>=<value>.
    Underscores are matched against the keys of ``config``, so
    TOOLPORT_FETCH_MAX_RESPONSE_CHARS sets ``fetch.max_response_chars``.
    Variables that match no key are ignored.

    Args:
        config: Configuration the names are resolved against.
        environ: Environment mapping (default: os.environ).

    Returns:
        Override document to layer on top of ``config``.
    """
    environ = dict(os.environ) if environ is None else environ
    overrides: dict[str, Any] = {}

    for key, value in sorted(environ.items()):
        if not key.startswith(ENV_PREFIX) or key in _RESERVED_ENV:
            continue

        key_path = resolve_key_path(config, key[len(ENV_PREFIX) :].lower().split("_"))
        if key_path is None:
            continue

        overrides = merge_documents(overrides, document_for(key_path, _parse_env_value(value)))

    return overrides


def apply_env_overrides(config: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Layer the TOOLPORT_* environment on top of ``config``."""
    return merge_documents(config, env_overrides(config, environ))


def _parse_env_value(value: str) -> Any:
    """
    Parse an environment variable value to the appropriate type.

    Args:
        value: String value from environment.

    Returns:
        Parsed value (bool, int, float, list or string).
    """
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    if re.match(r"^-?\d+$", value):
        return int(value)

    if re.match(r"^-?\d+\.\d+$", value):
        return float(value)

    # List (comma-separated)
    if "," in value:
        return [item.strip() for item in value.split(",") if item.strip()]

    return value


def load_config(
    config_path: Path | None = None,
    project_path: Path | None = None,
    skip_project: bool = False,
    skip_env: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Loading order (later overrides earlier):
    1. Default values from Config model
    2. Global config (~/.toolport/config.yaml)
    3. ``config_path`` (or TOOLPORT_CONFIG) if given, otherwise the nearest
       ./.toolport.yaml found from ``project_path`` upwards
    4. Environment variables (TOOLPORT_*)

    Args:
        config_path: Explicit configuration file.
        project_path: Starting path to search for project config. Defaults to cwd.
        skip_project: Skip loading project configuration.
        skip_env: Skip environment variable overrides.

    Returns:
        Merged and validated Config object.

    Raises:
        ConfigurationError: If configuration is invalid.
    """
    layers: list[dict[str, Any]] = [Config().model_dump()]

    global_path = get_global_config_path()
    if global_path.exists():
        layers.append(load_yaml_file(global_path))

    explicit = config_path or (Path(os.environ["TOOLPORT_CONFIG"]) if os.environ.get("TOOLPORT_CONFIG") else None)
    if explicit is not None:
        explicit = Path(explicit).expanduser()
        if not explicit.is_file():
            raise ConfigurationError(f"Config file not found: {explicit}")
        layers.append(load_yaml_file(explicit))
    elif not skip_project:
        project_config_path = find_project_config(project_path)
        if project_config_path is not None:
            layers.append(load_yaml_file(project_config_path))

    config_dict = merge_layers(layers)
    if not skip_env:
        # Resolved against the file layers so only known keys are overridden
        config_dict = apply_env_overrides(config_dict)

    try:
        return Config.model_validate(config_dict)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def get_config_sources(config_path: Path | None = None) -> dict[str, Path | None]:
    """
    Get paths to all configuration sources.

    Returns:
        Dictionary mapping source names to paths (None if not found).
    """
    global_path = get_global_config_path()
    return {
        "global": global_path if global_path.exists() else None,
        "explicit": config_path if config_path and config_path.exists() else None,
        "project": find_project_config(),
    }
