"""Key-value memory tools backed by an injected MemoryStore."""

import logging
from typing import Any

from toolport.memory.models import MemoryEntry
from toolport.memory.store import MemoryStore
from toolport.tools.base import Tool
from toolport.tools.models import (
    BooleanParam,
    NumberParam,
    StringListParam,
    StringParam,
    ToolParameter,
    ToolResult,
)

logger = logging.getLogger(__name__)

SEARCH_PREVIEW_CHARS = 100


class _MemoryTool(Tool):
    def __init__(self, store: MemoryStore):
        self.store = store


def _key_param(description: str) -> StringParam:
    return StringParam(name="key", description=description)


def _tags(entry: MemoryEntry) -> str:
    return ", ".join(entry.tags) or "(none)"


class MemorySetTool(_MemoryTool):
    """Store a value under a key, replacing any previous value."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_set"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Store a value in memory with a key"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _key_param("Unique key to store the value under"),
            StringParam(name="value", description="Value to store"),
            StringListParam(
                name="tags",
                description="Optional tags for categorization",
                required=False,
                default=[],
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        key: str = kwargs["key"]
        tags: list[str] = kwargs.get("tags") or []

        entry = self.store.set(key, kwargs["value"], tags)
        suffix = f" (tags: {', '.join(entry.tags)})" if entry.tags else ""
        return ToolResult.success(f"Stored value with key '{key}'{suffix}")


class MemoryGetTool(_MemoryTool):
    """Retrieve an entry with its metadata."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_get"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Retrieve a value from memory by key"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [_key_param("Key of the value to retrieve")]

    async def execute(self, **kwargs: Any) -> ToolResult:
        key: str = kwargs["key"]
        entry = self.store.get(key)
        if entry is None:
            return ToolResult.success(f"No entry found for key '{key}'")

        return ToolResult.success(
            f"Key: {key}\n"
            f"Value: {entry.value}\n"
            f"Tags: {_tags(entry)}\n"
            f"Created: {entry.created_at.isoformat()}\n"
            f"Updated: {entry.updated_at.isoformat()}"
        )


class MemoryDeleteTool(_MemoryTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_delete"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Delete a value from memory"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [_key_param("Key of the value to delete")]

    async def execute(self, **kwargs: Any) -> ToolResult:
        key: str = kwargs["key"]
        if self.store.delete(key):
            return ToolResult.success(f"Deleted entry with key '{key}'")
        return ToolResult.success(f"No entry found for key '{key}'")


class MemoryListTool(_MemoryTool):
    """List keys, optionally restricted to one tag."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_list"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List all keys in memory, optionally filtered by tag"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="tag", description="Filter by tag", required=False),
            NumberParam(
                name="limit",
                description="Maximum number of entries to return",
                integer=True,
                minimum=1,
                required=False,
                default=50,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        tag = kwargs.get("tag")
        entries = self.store.entries(tag=tag, limit=kwargs.get("limit") or 50)

        if not entries:
            return ToolResult.success(f"No entries found with tag '{tag}'" if tag else "Memory is empty")

        lines = [f"- {e.key}" + (f" [{', '.join(e.tags)}]" if e.tags else "") for e in entries]
        return ToolResult.success(f"Memory entries ({len(entries)}):\n" + "\n".join(lines))


class MemorySearchTool(_MemoryTool):
    """Substring search over keys, values and tags."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_search"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Search memory entries by key, value or tag"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="query", description="Search query"),
            NumberParam(
                name="limit",
                description="Maximum number of results",
                integer=True,
                minimum=1,
                required=False,
                default=10,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        query: str = kwargs["query"]
        results = self.store.search(query, limit=kwargs.get("limit") or 10)

        if not results:
            return ToolResult.success(f"No entries found matching '{query}'")

        blocks = []
        for entry in results:
            preview = entry.value
            if len(preview) > SEARCH_PREVIEW_CHARS:
                preview = preview[:SEARCH_PREVIEW_CHARS] + "..."
            blocks.append(f"Key: {entry.key}\nValue: {preview}\nTags: {_tags(entry)}\n")

        return ToolResult.success(f"Found {len(results)} matches:\n\n" + "\n---\n".join(blocks))


class MemoryClearTool(_MemoryTool):
    """Remove every entry. Requires explicit confirmation."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_clear"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Clear all entries from memory"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            BooleanParam(
                name="confirmClear",
                description="Must be true to confirm clearing all memory",
            )
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        if not kwargs.get("confirmClear"):
            return ToolResult.success(
                "Clear operation cancelled. Set confirmClear to true to clear all memory."
            )

        count = self.store.clear()
        logger.info(f"Memory cleared by tool call ({count} entries)")
        return ToolResult.success(f"Cleared {count} entries from memory")


class MemoryAppendTool(_MemoryTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_append"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Append content to an existing memory entry"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _key_param("Key of the entry to append to"),
            StringParam(name="value", description="Content to append"),
            StringParam(
                name="separator",
                description="Separator between existing and new content",
                required=False,
                default="\n",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        key: str = kwargs["key"]
        separator = kwargs.get("separator")
        entry = self.store.append(key, kwargs["value"], "\n" if separator is None else separator)
        if entry is None:
            return ToolResult.success(
                f"No entry found for key '{key}'. Use memory_set to create a new entry."
            )
        return ToolResult.success(f"Appended content to key '{key}'")


class MemoryStatsTool(_MemoryTool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "memory_stats"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get statistics about memory usage"

    async def execute(self, **kwargs: Any) -> ToolResult:
        stats = self.store.stats()
        return ToolResult.success(
            "Memory Statistics:\n"
            f"- Total Entries: {stats.total_entries}\n"
            f"- Total Size: {stats.total_size} characters\n"
            f"- Unique Tags: {len(stats.tags)}\n"
            f"- Tags: {', '.join(stats.tags) or '(none)'}"
        )
