"""Transport layer: the tool registry as an MCP server on stdio."""

from toolport.server.stdio import ToolCallFailed, ToolServer

__all__ = ["ToolCallFailed", "ToolServer"]
