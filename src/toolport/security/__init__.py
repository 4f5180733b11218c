"""
Security gates for toolport.

This package provides the three guards that sit in front of handlers
touching untrusted external resources: path containment, the outbound
URL blocklist and the command allow-list.
"""

from toolport.security.sandbox import (
    ExecutionResult,
    PathGuard,
    SandboxExecutor,
    is_path_allowed,
)
from toolport.security.urls import is_blocked_host, is_url_safe
from toolport.security.whitelist import (
    SAFE_COMMANDS,
    CommandCheck,
    CommandFilter,
    is_command_safe,
    is_sensitive_env_name,
    scrub_environment,
)

__all__ = [
    "SAFE_COMMANDS",
    "CommandCheck",
    "CommandFilter",
    "ExecutionResult",
    "PathGuard",
    "SandboxExecutor",
    "is_blocked_host",
    "is_command_safe",
    "is_path_allowed",
    "is_sensitive_env_name",
    "is_url_safe",
    "scrub_environment",
]
