"""
Path containment and sandboxed command execution.

This module provides the filesystem gate used by every path-based tool
and the executor that runs allow-listed commands with a timeout.
"""

import asyncio
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from toolport.security.whitelist import CommandCheck, CommandFilter, scrub_environment
from toolport.tools.errors import AccessDeniedError

if TYPE_CHECKING:
    from toolport.config.schema import SecurityConfig

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 1024 * 1024


def _canonical(path: str | Path, base_dir: Path | None = None) -> Path:
    candidate = Path(path).expanduser()
    if not candidate.is_absolute():
        candidate = (base_dir or Path.cwd()) / candidate
    return candidate.resolve()


def is_path_allowed(
    candidate: str | Path,
    allowed_roots: list[str | Path] | tuple[str | Path, ...],
    base_dir: str | Path | None = None,
) -> bool:
    """
    Check that a path lies inside at least one allowed root.

    Both the candidate and the roots are canonicalized first, so ``..``
    segments and symlinks are resolved before comparison. Containment is
    checked per path component: ``/srv/app2`` is not inside ``/srv/app``.

    Args:
        candidate: Path to check, absolute or relative to ``base_dir``
        allowed_roots: Directories access is restricted to
        base_dir: Directory relative candidates are resolved against
            (default: current working directory)

    Returns:
        True if the canonical candidate equals or descends from a root
    """
    base = Path(base_dir).expanduser().resolve() if base_dir is not None else None
    try:
        resolved = _canonical(candidate, base)
    except (OSError, RuntimeError, ValueError):
        # Symlink loops, embedded NUL bytes and the like
        return False

    for root in allowed_roots:
        root_path = Path(root).expanduser().resolve()
        if resolved == root_path or resolved.is_relative_to(root_path):
            return True
    return False


class PathGuard:
    """
    Enforces path containment for filesystem tools.

    Relative paths are resolved against ``base_dir``, which defaults to the
    first allowed root.
    """

    def __init__(
        self,
        allowed_roots: list[str | Path] | None = None,
        base_dir: str | Path | None = None,
    ) -> None:
        """
        Initialize path guard.

        Args:
            allowed_roots: Directories tools may operate in
                (default: the working directory at construction time)
            base_dir: Directory relative paths are resolved against
        """
        roots = allowed_roots or [Path.cwd()]
        self.allowed_roots = [Path(r).expanduser().resolve() for r in roots]
        self.base_dir = (
            Path(base_dir).expanduser().resolve() if base_dir is not None else self.allowed_roots[0]
        )

    @classmethod
    def from_config(cls, config: "SecurityConfig") -> "PathGuard":
        return cls(allowed_roots=[Path(p) for p in config.allowed_roots] or None)

    def is_allowed(self, path: str | Path) -> bool:
        return is_path_allowed(path, self.allowed_roots, self.base_dir)

    def check(self, path: str | Path) -> Path:
        """
        Resolve a path, rejecting anything outside the allowed roots.

        Args:
            path: Path supplied by the caller

        Returns:
            Canonical absolute path

        Raises:
            AccessDeniedError: If the path escapes every allowed root
        """
        if not self.is_allowed(path):
            logger.warning(f"Denied access outside allowed roots: {path}")
            raise AccessDeniedError(str(path))
        return _canonical(path, self.base_dir)

    def relative(self, path: Path) -> str:
        """Display form of a resolved path, relative to the base directory when possible."""
        try:
            return str(path.relative_to(self.base_dir)) or "."
        except ValueError:
            return str(path)

    def extract_paths_from_command(self, command: str) -> list[str]:
        """
        Extract path-like arguments from a command string.

        This is a heuristic approach that looks for path-like strings.

        Args:
            command: Command line

        Returns:
            List of potential paths found in command
        """
        paths: list[str] = []
        try:
            tokens = shlex.split(command)
        except ValueError:
            return paths

        for token in tokens[1:]:
            # Skip flags
            if token.startswith("-"):
                continue

            if "/" in token or token.startswith("~") or token == "..":
                paths.append(token)

        return paths


@dataclass
class ExecutionResult:
    """Result of a sandboxed command execution."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: int | None = None
    blocked: bool = False
    blocked_reason: str | None = None
    timed_out: bool = False


class SandboxExecutor:
    """
    Executes allow-listed commands.

    Provides:
    - Command filtering (allow-list plus dangerous patterns)
    - Path containment for path-like arguments
    - Execution without a shell, with a hard timeout
    """

    def __init__(
        self,
        command_filter: CommandFilter | None = None,
        path_guard: PathGuard | None = None,
        restrict_paths: bool = True,
    ) -> None:
        """
        Initialize sandbox executor.

        Args:
            command_filter: Command filtering instance
            path_guard: Path containment for command arguments and cwd
            restrict_paths: Whether path-like arguments must stay inside the roots
        """
        self.command_filter = command_filter or CommandFilter()
        self.path_guard = path_guard or PathGuard()
        self.restrict_paths = restrict_paths

    @classmethod
    def from_config(cls, config: "SecurityConfig", path_guard: PathGuard | None = None) -> "SandboxExecutor":
        """
        Create sandbox executor from configuration.

        Args:
            config: Security configuration
            path_guard: Shared path guard (built from config when omitted)

        Returns:
            Configured SandboxExecutor instance
        """
        command_filter = CommandFilter(allowed_commands=config.commands.allowed)
        return cls(
            command_filter,
            path_guard or PathGuard.from_config(config),
            restrict_paths=config.commands.restrict_paths,
        )

    @property
    def allowed_commands(self) -> tuple[str, ...]:
        return self.command_filter.allowed_commands

    def check_command(self, command: str) -> CommandCheck:
        """
        Check if a command is allowed without executing it.

        Args:
            command: Command to check

        Returns:
            CommandCheck result
        """
        cmd_check = self.command_filter.check_command(command)
        if not cmd_check.allowed or not self.restrict_paths:
            return cmd_check

        for path in self.path_guard.extract_paths_from_command(command):
            if not self.path_guard.is_allowed(path):
                return CommandCheck(
                    allowed=False,
                    reason=f"Argument '{path}' is outside allowed directories",
                )

        return cmd_check

    async def execute(
        self,
        command: str,
        cwd: str | Path | None = None,
        timeout: float = 10.0,
    ) -> ExecutionResult:
        """
        Execute a command in the sandbox.

        Args:
            command: Command line to execute
            cwd: Working directory (default: the guard's base directory)
            timeout: Timeout in seconds; the process is killed when it elapses

        Returns:
            ExecutionResult with output and status
        """
        check = self.check_command(command)
        if not check.allowed:
            logger.warning(f"Blocked command: {command!r} ({check.reason})")
            return ExecutionResult(success=False, blocked=True, blocked_reason=check.reason)

        workdir = self.path_guard.check(cwd) if cwd is not None else self.path_guard.base_dir
        tokens = shlex.split(command)

        logger.info(f"Executing command: {command[:100]}")

        # Variables that look like secrets are not passed to the child
        process = await asyncio.create_subprocess_exec(
            *tokens,
            cwd=workdir,
            env=scrub_environment(dict(os.environ)),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning(f"Command timed out after {timeout}s: {command[:100]}")
            return ExecutionResult(success=False, timed_out=True)

        return ExecutionResult(
            success=process.returncode == 0,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_code=process.returncode,
        )


def _decode(data: bytes) -> str:
    text = data[:MAX_OUTPUT_BYTES].decode("utf-8", errors="replace")
    if len(data) > MAX_OUTPUT_BYTES:
        text += "\n... (truncated)"
    return text
