"""
Path utilities for toolport.

Provides consistent path resolution for configuration files.
"""

import os
from pathlib import Path

PROJECT_CONFIG_NAME = ".toolport.yaml"


def get_toolport_home() -> Path:
    """
    Get the toolport home directory.

    Resolution order:
    1. TOOLPORT_HOME environment variable
    2. Default: ~/.toolport

    Returns:
        Path to the toolport home directory.
    """
    env_home = os.environ.get("TOOLPORT_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".toolport"


def get_global_config_path() -> Path:
    """
    Get the path to the global configuration file.

    Returns:
        Path to ~/.toolport/config.yaml
    """
    return get_toolport_home() / "config.yaml"


def find_project_config(start_path: Path | None = None) -> Path | None:
    """
    Find the project configuration file by traversing up the directory tree.

    Looks for .toolport.yaml starting from the given path (or current
    directory) and moving up to the root.

    Args:
        start_path: Starting directory to search from. Defaults to cwd.

    Returns:
        Path to the project config if found, None otherwise.
    """
    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    for directory in (current, *current.parents):
        project_config = directory / PROJECT_CONFIG_NAME
        if project_config.is_file():
            return project_config

    return None


def expand_path(path: str | Path) -> Path:
    """
    Expand a path string, handling ~ and environment variables.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded and resolved Path.
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)
    return Path(path).resolve()
