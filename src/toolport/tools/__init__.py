"""Tool invocation contract for toolport.

This module provides the core that every tool goes through:
- Parameter specs and tool definitions
- The registry of available tools
- Schema validation of untrusted arguments
- The dispatcher that normalizes every outcome into a ToolResult

Handlers that touch the filesystem, the network or the process table do so
through the gates in ``toolport.security``.
"""

from toolport.tools.base import Tool
from toolport.tools.dispatcher import ToolDispatcher
from toolport.tools.errors import (
    DuplicateToolError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationError,
)
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringListParam,
    StringMapParam,
    StringParam,
    TextContent,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolResult,
)
from toolport.tools.registry import ToolRegistry
from toolport.tools.validation import validate

__all__ = [
    "BooleanParam",
    "DuplicateToolError",
    "EnumParam",
    "NumberParam",
    "StringListParam",
    "StringMapParam",
    "StringParam",
    "TextContent",
    "Tool",
    "ToolCall",
    "ToolDefinition",
    "ToolDispatcher",
    "ToolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolParameter",
    "ToolRegistry",
    "ToolResult",
    "ValidationError",
    "validate",
]
