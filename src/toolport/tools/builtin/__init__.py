"""Built-in tools for toolport.

Groups of tools exposed to the agent:
- filesystem: read, write, list, inspect and search files
- git: repository status, history, diffs, branches and blame
- fetch: HTTP GET/POST, URL checks and webpage text extraction
- memory: in-process key-value store
- system: host info, environment, allow-listed commands and utilities
- time: current time, timezone conversion and formatting
- rules: markdown development rules lookup
"""

from toolport.tools.builtin.registry_utils import (
    build_registry,
    builtin_tools,
    register_builtin_tools,
)

__all__ = [
    "build_registry",
    "builtin_tools",
    "register_builtin_tools",
]
