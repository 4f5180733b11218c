"""
Git tools for inspecting version control state.

Commands run through GitPython (``repo.git.<command>``), which executes the
git binary without a shell. The repository path is gated like any other
filesystem path.
"""

import asyncio
import logging
from typing import Any, Optional

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from toolport.security.sandbox import PathGuard
from toolport.tools.base import Tool
from toolport.tools.errors import AccessDeniedError, ToolExecutionError
from toolport.tools.models import (
    BooleanParam,
    EnumParam,
    NumberParam,
    StringParam,
    ToolParameter,
    ToolResult,
)

logger = logging.getLogger(__name__)


def _repo_path_param() -> StringParam:
    return StringParam(
        name="path",
        description="Path to the git repository (defaults to current directory)",
        required=False,
    )


class _GitTool(Tool):
    """Common repository handling for git tools."""

    # Text returned when git succeeds with empty output
    empty_output = "(no output)"

    def __init__(self, guard: PathGuard):
        self.guard = guard

    async def _git(self, repo_path: Optional[str], command: str, *args: str) -> ToolResult:
        """Run ``git <command> <args>`` in the gated repository.

        The parent search may land on a repository root above ``repo_path``,
        so the discovered working tree is gated as well.

        Raises:
            ToolExecutionError: git ran and reported a failure
        """
        try:
            workdir = self.guard.check(repo_path or ".")
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))

        def _run() -> str:
            repo = Repo(workdir, search_parent_directories=True)
            try:
                # Bare repositories have no working tree to gate
                self.guard.check(repo.working_tree_dir or repo.git_dir)
                return getattr(repo.git, command)(*args)
            finally:
                repo.close()

        logger.info(f"git {command} {' '.join(args)} in {workdir}")

        try:
            output = await asyncio.to_thread(_run)
        except AccessDeniedError as e:
            logger.info(f"Repository root outside allowed directories for {workdir}")
            return ToolResult.failure(str(e))
        except (InvalidGitRepositoryError, NoSuchPathError):
            return ToolResult.failure(f"Not a git repository: {repo_path or '.'}")
        except GitCommandError as e:
            stderr = (e.stderr or "").strip().removeprefix("stderr:").strip(" '\n")
            exit_code = e.status if isinstance(e.status, int) else None
            raise ToolExecutionError(f"Git command failed: {stderr or e}", exit_code=exit_code) from e

        output = output.strip()
        return ToolResult.success(output or self.empty_output)


def _reject_option(name: str, value: Optional[str]) -> Optional[ToolResult]:
    # Values are passed as argv entries, so only option injection needs refusing
    if value and value.startswith("-"):
        return ToolResult.failure(f"Invalid {name}: must not start with '-'")
    return None


class GitStatusTool(_GitTool):
    """Short porcelain status with branch line."""

    empty_output = "(No changes)"

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_status"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get the current git status of the repository"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [_repo_path_param()]

    async def execute(self, **kwargs: Any) -> ToolResult:
        return await self._git(kwargs.get("path"), "status", "--porcelain", "-b")


class GitLogTool(_GitTool):
    """Commit history."""

    empty_output = "(No commits)"

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_log"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get the git commit history"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            NumberParam(
                name="limit",
                description="Number of commits to show",
                integer=True,
                minimum=1,
                required=False,
                default=10,
            ),
            EnumParam(
                name="format",
                description="Output format for the log",
                allowed=["oneline", "short", "medium", "full"],
                required=False,
                default="oneline",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        limit: int = kwargs.get("limit") or 10
        fmt: str = kwargs.get("format") or "oneline"
        return await self._git(kwargs.get("path"), "log", f"--format={fmt}", "-n", str(limit))


class GitDiffTool(_GitTool):
    """Working tree or staged diff."""

    empty_output = "(No differences)"

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_diff"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Show changes between commits, commit and working tree, etc"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            BooleanParam(
                name="staged",
                description="Show staged changes",
                required=False,
                default=False,
            ),
            StringParam(name="file", description="Specific file to diff", required=False),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        args = []
        if kwargs.get("staged"):
            args.append("--staged")
        if kwargs.get("file"):
            args.extend(["--", kwargs["file"]])
        return await self._git(kwargs.get("path"), "diff", *args)


class GitBranchTool(_GitTool):
    """List, create or delete branches."""

    empty_output = "Operation completed successfully"

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_branch"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List, create, or delete branches"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            EnumParam(
                name="action",
                description="Action to perform",
                allowed=["list", "create", "delete"],
                required=False,
                default="list",
            ),
            StringParam(
                name="branchName",
                description="Branch name (required for create/delete)",
                required=False,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        action: str = kwargs.get("action") or "list"
        branch_name: Optional[str] = kwargs.get("branchName")

        if action == "list":
            return await self._git(kwargs.get("path"), "branch", "-a")

        if not branch_name:
            return ToolResult.failure(f"Branch name is required for {action} action")
        rejected = _reject_option("branchName", branch_name)
        if rejected:
            return rejected

        if action == "create":
            return await self._git(kwargs.get("path"), "branch", branch_name)
        return await self._git(kwargs.get("path"), "branch", "-d", branch_name)


class GitShowTool(_GitTool):
    """Show a commit, tag or other object."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_show"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Show various types of objects (commits, tags, etc)"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            StringParam(
                name="object",
                description="Object to show (commit hash, tag, etc)",
                required=False,
                default="HEAD",
            ),
            BooleanParam(
                name="stat",
                description="Show only stat information",
                required=False,
                default=False,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        obj: str = kwargs.get("object") or "HEAD"
        rejected = _reject_option("object", obj)
        if rejected:
            return rejected

        args = [obj]
        if kwargs.get("stat"):
            args.append("--stat")
        return await self._git(kwargs.get("path"), "show", *args)


class GitRemoteTool(_GitTool):
    """Configured remotes."""

    empty_output = "(No remotes configured)"

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_remote"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List remote repositories"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            BooleanParam(
                name="verbose",
                description="Show remote URLs",
                required=False,
                default=True,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        verbose = kwargs.get("verbose")
        args = ["-v"] if verbose is None or verbose else []
        return await self._git(kwargs.get("path"), "remote", *args)


class GitBlameTool(_GitTool):
    """Per-line authorship of a file."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "git_blame"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Show what revision and author last modified each line of a file"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            _repo_path_param(),
            StringParam(name="file", description="File to blame"),
            StringParam(
                name="lines",
                description="Line range in format 'start,end' (e.g., '1,10')",
                required=False,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        file: str = kwargs["file"]
        lines: Optional[str] = kwargs.get("lines")

        args = []
        if lines:
            rejected = _reject_option("lines", lines)
            if rejected:
                return rejected
            args.extend(["-L", lines])
        args.extend(["--", file])
        return await self._git(kwargs.get("path"), "blame", *args)
