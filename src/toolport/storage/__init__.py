"""Storage path helpers for toolport."""

from toolport.storage.paths import (
    PROJECT_CONFIG_NAME,
    expand_path,
    find_project_config,
    get_global_config_path,
    get_toolport_home,
)

__all__ = [
    "PROJECT_CONFIG_NAME",
    "expand_path",
    "find_project_config",
    "get_global_config_path",
    "get_toolport_home",
]
