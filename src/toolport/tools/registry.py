"""Tool registry for managing available tools."""

import logging
from collections.abc import Iterator
from typing import Any, Optional

from toolport.tools.base import Tool
from toolport.tools.errors import DuplicateToolError, ToolNotFoundError
from toolport.tools.models import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Registry for managing available tools.

    The registry owns the tool definitions for the lifetime of the process.
    It is filled once at startup and only read afterwards. Registration
    order is preserved and is the order of every listing surface.
    """

    def __init__(self):
        """Initialize the tool registry."""
        self._tools: dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> None:
        """Register a tool definition.

        Args:
            definition: Tool definition to register

        Raises:
            DuplicateToolError: If tool name already registered
        """
        if definition.name in self._tools:
            raise DuplicateToolError(definition.name)

        self._tools[definition.name] = definition
        logger.debug(f"Registered tool: {definition.name}")

    def register_tool(self, tool: Tool) -> None:
        """Register a class-based tool."""
        self.register(tool.to_definition())

    def lookup(self, name: str) -> ToolDefinition:
        """Get a tool definition by name.

        Raises:
            ToolNotFoundError: If no tool has that name
        """
        try:
            return self._tools[name]
        except KeyError:
            raise ToolNotFoundError(name) from None

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Get a tool definition by name, or None if not found."""
        return self._tools.get(name)

    def list_all(self) -> Iterator[ToolDefinition]:
        """Iterate over definitions in registration order.

        Each call returns a fresh iterator, so the listing can be restarted.
        """
        return iter(list(self._tools.values()))

    def names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def manifest(self) -> list[dict[str, Any]]:
        """Capability manifest: name, description and input schema per tool."""
        return [definition.manifest_entry() for definition in self.list_all()]

    def __len__(self) -> int:
        """Get number of registered tools."""
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        """Check if tool is registered."""
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return self.list_all()

    def __str__(self) -> str:
        """String representation."""
        return f"ToolRegistry({len(self._tools)} tools)"

    def __repr__(self) -> str:
        """Representation."""
        tools = ", ".join(self._tools.keys())
        return f"<ToolRegistry tools=[{tools}]>"
