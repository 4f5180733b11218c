"""
System tools: host information, environment, commands and small utilities.

``run_command`` goes through the SandboxExecutor. The allow-list there is
defense-in-depth, not a sandbox: commands still run with this process's
privileges, only without a shell.
"""

import base64
import binascii
import hashlib
import json
import logging
import os
import platform
import random
import secrets
import socket
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Any, Optional

from toolport.config.schema import CommandConfig
from toolport.security.sandbox import SandboxExecutor
from toolport.security.whitelist import is_sensitive_env_name
from toolport.tools.base import Tool
from toolport.tools.errors import AccessDeniedError, CommandNotAllowedError, ToolExecutionError
from toolport.tools.models import (
    EnumParam,
    NumberParam,
    StringParam,
    ToolParameter,
    ToolResult,
)

logger = logging.getLogger(__name__)

ENV_VALUE_PREVIEW_CHARS = 100


def _uptime_hours() -> Optional[int]:
    try:
        seconds = float(Path("/proc/uptime").read_text().split()[0])
    except (OSError, ValueError, IndexError):
        return None
    return int(seconds // 3600)


def _total_memory_gb() -> Optional[int]:
    try:
        pages = os.sysconf("SC_PHYS_PAGES")
        page_size = os.sysconf("SC_PAGE_SIZE")
    except (AttributeError, ValueError, OSError):
        return None
    return round(pages * page_size / 1024**3)


class SystemInfoTool(Tool):
    """Host and interpreter details as JSON."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "system_info"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get information about the system (OS, CPU, memory, etc.)"

    async def execute(self, **kwargs: Any) -> ToolResult:
        info: dict[str, Any] = {
            "platform": sys.platform,
            "arch": platform.machine(),
            "release": platform.release(),
            "hostname": socket.gethostname(),
            "cpus": os.cpu_count(),
            "homeDir": str(Path.home()),
            "tmpDir": tempfile.gettempdir(),
            "pythonVersion": platform.python_version(),
            "pid": os.getpid(),
            "cwd": os.getcwd(),
        }
        uptime = _uptime_hours()
        if uptime is not None:
            info["uptime"] = f"{uptime} hours"
        memory = _total_memory_gb()
        if memory is not None:
            info["totalMemory"] = f"{memory} GB"
        return ToolResult.success(json.dumps(info, indent=2))


class GetEnvTool(Tool):
    """Read one environment variable, refusing secret-looking names."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "get_env"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Get the value of an environment variable"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [StringParam(name="name", description="Name of the environment variable")]

    async def execute(self, **kwargs: Any) -> ToolResult:
        name: str = kwargs["name"]
        if is_sensitive_env_name(name):
            return ToolResult.failure(f"Cannot access sensitive environment variable '{name}'")

        value = os.environ.get(name)
        if value is None:
            return ToolResult.success(f"Environment variable '{name}' is not set")
        return ToolResult.success(f"{name}={value}")


class ListEnvTool(Tool):
    """List non-sensitive environment variables."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "list_env"

    @property
    def description(self) -> str:
        """Tool description."""
        return "List environment variables (sensitive values are filtered)"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(
                name="prefix",
                description="Filter variables by prefix (e.g., 'PYTHON', 'PATH')",
                required=False,
            )
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        prefix: str = kwargs.get("prefix") or ""
        lines = []
        for key in sorted(os.environ):
            if is_sensitive_env_name(key) or not key.startswith(prefix):
                continue
            value = os.environ[key]
            if len(value) > ENV_VALUE_PREVIEW_CHARS:
                value = value[:ENV_VALUE_PREVIEW_CHARS] + "..."
            lines.append(f"{key}={value}")
        return ToolResult.success("\n".join(lines) or "No matching environment variables found")


class RunCommandTool(Tool):
    """Execute an allow-listed command through the sandbox executor."""

    def __init__(self, executor: SandboxExecutor, config: Optional[CommandConfig] = None):
        """Initialize tool.

        Args:
            executor: Sandbox that filters and runs commands
            config: Timeout limits
        """
        self.executor = executor
        self.config = config or CommandConfig()

    @property
    def name(self) -> str:
        """Tool name."""
        return "run_command"

    @property
    def description(self) -> str:
        """Tool description."""
        allowed = ", ".join(self.executor.allowed_commands)
        return f"Run a safe shell command. Allowed commands: {allowed}"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="command", description="Command to execute"),
            NumberParam(
                name="timeout",
                description="Timeout in milliseconds",
                integer=True,
                minimum=1,
                required=False,
                default=self.config.default_timeout_ms,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        """Run the command.

        Args:
            command: Command line, split into argv without a shell
            timeout: Milliseconds before the process is killed

        Returns:
            ToolResult with trimmed stdout (or stderr when stdout is empty)

        Raises:
            ToolExecutionError: The command ran and exited non-zero
        """
        command: str = kwargs["command"]
        timeout_ms = min(kwargs.get("timeout") or self.config.default_timeout_ms, self.config.max_timeout_ms)

        try:
            result = await self.executor.execute(command, timeout=timeout_ms / 1000.0)
        except AccessDeniedError as e:
            return ToolResult.failure(str(e))
        except OSError as e:
            logger.warning(f"Command failed to start: {command[:100]}: {e}")
            return ToolResult.failure(f"Failed to execute command: {e.strerror or e}")

        if result.blocked:
            logger.info(f"run_command refused: {result.blocked_reason}")
            return ToolResult.failure(str(CommandNotAllowedError(command, list(self.executor.allowed_commands))))

        if result.timed_out:
            return ToolResult.failure(f"Command timed out after {timeout_ms} ms")

        output = result.stdout.strip() or result.stderr.strip()
        if not result.success:
            raise ToolExecutionError(
                f"Command exited with code {result.exit_code}: {output or '(no output)'}",
                exit_code=result.exit_code,
            )

        return ToolResult.success(output or "(no output)")


class CalculateHashTool(Tool):
    """Hex digest of a string."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "calculate_hash"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Calculate hash of a string"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="input", description="String to hash"),
            EnumParam(
                name="algorithm",
                description="Hash algorithm to use",
                allowed=["md5", "sha1", "sha256", "sha512"],
                required=False,
                default="sha256",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        algorithm: str = kwargs.get("algorithm") or "sha256"
        digest = hashlib.new(algorithm, kwargs["input"].encode("utf-8")).hexdigest()
        return ToolResult.success(f"{algorithm.upper()}: {digest}")


class RandomGenerateTool(Tool):
    """UUIDs, integers, hex strings or base64 bytes."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "random_generate"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Generate random values"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            EnumParam(
                name="type",
                description="Type of random value to generate",
                allowed=["uuid", "number", "string", "bytes"],
            ),
            NumberParam(
                name="length",
                description="Length for string/bytes generation",
                integer=True,
                minimum=1,
                maximum=4096,
                required=False,
                default=16,
            ),
            NumberParam(
                name="min",
                description="Minimum value for number generation",
                integer=True,
                required=False,
                default=0,
            ),
            NumberParam(
                name="max",
                description="Maximum value for number generation",
                integer=True,
                required=False,
                default=100,
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        kind: str = kwargs["type"]
        length: int = kwargs.get("length") or 16

        if kind == "uuid":
            return ToolResult.success(str(uuid.uuid4()))
        if kind == "number":
            low = kwargs.get("min")
            high = kwargs.get("max")
            low = 0 if low is None else low
            high = 100 if high is None else high
            if low > high:
                return ToolResult.failure(f"min ({low}) must not exceed max ({high})")
            return ToolResult.success(str(random.randint(low, high)))
        if kind == "string":
            return ToolResult.success(secrets.token_hex((length + 1) // 2)[:length])
        return ToolResult.success(base64.b64encode(secrets.token_bytes(length)).decode("ascii"))


class Base64Tool(Tool):
    @property
    def name(self) -> str:
        """Tool name."""
        return "base64"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Encode or decode base64 strings"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            EnumParam(
                name="action",
                description="Whether to encode or decode",
                allowed=["encode", "decode"],
            ),
            StringParam(name="input", description="String to encode or decode"),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        text: str = kwargs["input"]
        if kwargs["action"] == "encode":
            return ToolResult.success(base64.b64encode(text.encode("utf-8")).decode("ascii"))

        try:
            decoded = base64.b64decode(text, validate=True)
            return ToolResult.success(decoded.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError) as e:
            return ToolResult.failure(f"Invalid base64 input: {e}")


class JsonFormatTool(Tool):
    """Pretty-print, minify or validate JSON."""

    @property
    def name(self) -> str:
        """Tool name."""
        return "json_format"

    @property
    def description(self) -> str:
        """Tool description."""
        return "Format, minify or validate JSON"

    @property
    def parameters(self) -> list[ToolParameter]:
        """Tool parameters."""
        return [
            StringParam(name="input", description="JSON string to process"),
            EnumParam(
                name="action",
                description="Action to perform",
                allowed=["format", "minify", "validate"],
                required=False,
                default="format",
            ),
        ]

    async def execute(self, **kwargs: Any) -> ToolResult:
        action: str = kwargs.get("action") or "format"
        try:
            parsed = json.loads(kwargs["input"])
        except json.JSONDecodeError as e:
            if action == "validate":
                return ToolResult.success(f"Invalid JSON: {e}")
            return ToolResult.failure(f"Failed to parse JSON: {e}")

        if action == "minify":
            return ToolResult.success(json.dumps(parsed, separators=(",", ":"), ensure_ascii=False))
        if action == "validate":
            return ToolResult.success("Valid JSON")
        return ToolResult.success(json.dumps(parsed, indent=2, ensure_ascii=False))
