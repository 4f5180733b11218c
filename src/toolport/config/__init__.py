"""
Configuration for toolport.

Configuration is loaded once at startup and passed explicitly to whatever
needs it; there is no process-wide cached instance.
"""

from toolport.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    env_overrides,
    get_config_sources,
    load_config,
    load_yaml_file,
)
from toolport.config.merger import merge_documents, merge_layers
from toolport.config.schema import (
    CommandConfig,
    Config,
    FetchConfig,
    LoggingConfig,
    RulesConfig,
    SecurityConfig,
    ServerConfig,
    ToolsConfig,
)

__all__ = [
    "CommandConfig",
    "Config",
    "ConfigurationError",
    "FetchConfig",
    "LoggingConfig",
    "RulesConfig",
    "SecurityConfig",
    "ServerConfig",
    "ToolsConfig",
    "apply_env_overrides",
    "env_overrides",
    "get_config_sources",
    "load_config",
    "load_yaml_file",
    "merge_documents",
    "merge_layers",
]
