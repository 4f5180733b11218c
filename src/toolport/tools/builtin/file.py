"""File system tools.

Every tool here resolves its path argument through a PathGuard before
touching the disk; anything that canonicalizes outside the allowed roots
is refused with the same fixed message.
"""

import asyncio
import base64
import fnmatch
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from toolport.security.sandbox import PathGuard
from toolport.tools.base import Tool
from toolport.tools.errors import AccessDeniedError
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringParam,
    ToolParameter,
    ToolResult,
)

logger = logging.getLogger(__name__)

_GLOB_CHARS = set("*?[")


class _FileSystemTool(Tool):
    """Shared plumbing for path-gated tools."""

    def __init__(self, guard: PathGuard):
        """Initialize tool.

        Args:
            guard: Path containment shared by all filesystem tools
        """
        self.guard = guard


class ReadFileTool(_FileSystemTool):
    """Read file contents.

    Safe read-only operation that returns text, or base64 for binary files.
    """

    @property
    def name(self) -> str:
        """Tool name."""
        return "read_file"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Read the contents of a file from the filesystem"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="path", description="Path to the file to read"),
            EnumParam(
                name="encoding",
                description="Encoding to use when reading the file",
                allowed=["utf-8", "base64"],
                required=False,
                default="utf-8",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        """Read file contents.

        Args:
            path: Path to file
            encoding: utf-8 or base64

        Returns:
            ToolResult with file contents
        """
        path: str = kwargs["path"]
        encoding: str = kwargs.get("encoding") or "utf-8"

        try:
            file_path = self.guard.check(path)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        logger.info(f"Reading file: {file_path}")

        try:
            if encoding == "base64":
                data = await asyncio.to_thread(file_path.read_bytes)
                return ToolResult.success(base64.b64encode(data).decode("ascii"))

            content = await asyncio.to_thread(file_path.read_text, encoding="utf-8")
            return ToolResult.success(content)

        except UnicodeDecodeError:
            return ToolResult.failure(
                "Failed to read file: content is not valid UTF-8. Use encoding 'base64'."
            )
        except OSError as e:
            logger.warning(f"File read error: {path}: {e}")
            return ToolResult.failure(f"Failed to read file: {e.strerror or e}")


class WriteFileTool(_FileSystemTool):
    """Write content to a file.

    Creates or overwrites files inside the allowed roots.
    """

    @property
    def name(self) -> str:
        """Tool name."""
        return "write_file"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Write content to a file on the filesystem"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="path", description="Path to the file to write"),
            StringParam(name="content", description="Content to write to the file"),
            BooleanParam(
                name="createDirectories",
                description="Create parent directories if they don't exist",
                required=False,
                default=False,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        """Write file contents."""
        path: str = kwargs["path"]
        content: str = kwargs["content"]
        create_dirs: bool = bool(kwargs.get("createDirectories"))

        try:
            file_path = self.guard.check(path)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        logger.info(f"Writing file: {file_path}")

        def _write() -> int:
            if create_dirs:
                file_path.parent.mkdir(parents=True, exist_ok=True)
            data = content.encode("utf-8")
            file_path.write_bytes(data)
            return len(data)

        try:
            size = await asyncio.to_thread(_write)
        except OSError as e:
            logger.warning(f"File write error: {path}: {e}")
            return ToolResult.failure(f"Failed to write file: {e.strerror or e}")

        return ToolResult.success(f"Successfully wrote {size} bytes to {file_path}")


class ListDirectoryTool(_FileSystemTool):
    """List directory contents."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "list_directory"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List contents of a directory"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="path", description="Path to the directory to list"),
            BooleanParam(
                name="recursive",
                description="Recursively list contents",
                required=False,
                default=False,
            ),
            NumberParam(
                name="maxDepth",
                description="Maximum depth for recursive listing",
                integer=True,
                minimum=0,
                required=False,
                default=3,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        """List directory contents."""
        path: str = kwargs["path"]
        recursive: bool = bool(kwargs.get("recursive"))
        max_depth: int = kwargs.get("maxDepth", 3)

        try:
            dir_path = self.guard.check(path)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        logger.info(f"Listing directory: {dir_path}")

        def _list(current: Path, depth: int) -> list[str]:
            lines = []
            with os.scandir(current) as it:
                entries = sorted(it, key=lambda e: e.name)
            for entry in entries:
                is_dir = entry.is_dir(follow_symlinks=False)
                rel = os.path.relpath(entry.path, dir_path)
                lines.append(f"{'[DIR] ' if is_dir else '[FILE]'} {rel}")
                if recursive and is_dir and depth < max_depth:
                    lines.extend(f"  {line}" for line in _list(Path(entry.path), depth + 1))
            return lines

        try:
            listing = await asyncio.to_thread(_list, dir_path, 0)
        except OSError as e:
            logger.warning(f"Directory list error: {path}: {e}")
            return ToolResult.failure(f"Failed to list directory: {e.strerror or e}")

        return ToolResult.success("\n".join(listing) if listing else "(empty directory)")


class FileInfoTool(_FileSystemTool):
    """Report metadata about a file or directory."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "file_info"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get information about a file or directory"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [StringParam(name="path", description="Path to the file or directory")]

    async def execute(self, **kwargs: Any) -> ToolResult:
        path: str = kwargs["path"]

        try:
            target = self.guard.check(path)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        try:
            stats = await asyncio.to_thread(target.stat)
        except OSError as e:
            return ToolResult.failure(f"Failed to get file info: {e.strerror or e}")

        created = getattr(stats, "st_birthtime", stats.st_ctime)
        info = {
            "path": str(target),
            "type": "directory" if target.is_dir() else "file",
            "size": stats.st_size,
            "created": _iso(created),
            "modified": _iso(stats.st_mtime),
            "accessed": _iso(stats.st_atime),
            "mode": oct(stats.st_mode & 0o7777)[2:],
        }
        return ToolResult.success(json.dumps(info, indent=2))


class SearchFilesTool(_FileSystemTool):
    """Search for files by name.

    Patterns containing ``*``, ``?`` or ``[`` are matched as globs against
    file names; anything else is a case-insensitive substring.
    """

    @property
    def name(self) -> str:
        """Tool name."""
        return "search_files"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Search for files matching a pattern"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="directory", description="Directory to search in"),
            StringParam(
                name="pattern",
                description="Glob pattern or substring to search for in file names",
            ),
            NumberParam(
                name="maxResults",
                description="Maximum number of results to return",
                integer=True,
                minimum=1,
                required=False,
                default=100,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        directory: str = kwargs["directory"]
        pattern: str = kwargs["pattern"]
        max_results: int = kwargs.get("maxResults", 100)

        try:
            root = self.guard.check(directory)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        is_glob = any(ch in _GLOB_CHARS for ch in pattern)
        needle = pattern.lower()

        def _matches(name: str) -> bool:
            if is_glob:
                return fnmatch.fnmatch(name.lower(), needle)
            return needle in name.lower()

        def _search() -> list[str]:
            results: list[str] = []
            # os.walk does not descend into symlinked directories by default
            for current, dirs, files in os.walk(root):
                dirs.sort()
                for name in sorted(dirs + files):
                    if _matches(name):
                        results.append(os.path.relpath(os.path.join(current, name), root))
                        if len(results) >= max_results:
                            return results
            return results

        try:
            results = await asyncio.to_thread(_search)
        except OSError as e:
            return ToolResult.failure(f"Failed to search files: {e.strerror or e}")

        if not results:
            return ToolResult.success("No files found matching the pattern")
        return ToolResult.success(f"Found {len(results)} matches:\n" + "\n".join(results))


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
