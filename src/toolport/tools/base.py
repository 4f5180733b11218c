"""Base classes for tool implementation."""

from abc import ABC, abstractmethod
from typing import Any

from toolport.tools.models import ToolDefinition, ToolParameter, ToolResult


class Tool(ABC):
    """Base class for class-based tools.

    A tool bundles a name, a description (for the agent to understand when
    to use it), a parameter schema, and an ``execute`` coroutine. Handlers
    receive arguments that have already been validated and completed with
    defaults by the dispatcher, so ``execute`` never re-checks types.

    Collaborators a tool needs (path guard, memory store, HTTP settings) are
    passed to ``__init__`` rather than looked up globally.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name (must be unique)."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of what the tool does (for AI)."""
        pass

    @property
    def parameters(self) -> list[ToolParameter]:
        """List of tool parameters."""
        return []

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with validated parameters.

        Returns:
            ToolResult with output or a business failure

        Raises:
            ToolError: Converted to a failure result by the dispatcher
        """
        pass

    def to_definition(self) -> ToolDefinition:
        """Freeze this tool into a registry definition."""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=tuple(self.parameters),
            handler=self.execute,
        )

    def __str__(self) -> str:
        """String representation."""
        return f"Tool({self.name})"

    def __repr__(self) -> str:
        """Representation."""
        return f"<Tool name={self.name}>"
