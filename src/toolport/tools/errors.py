"""
Tool exceptions for toolport.

Defines the error taxonomy shared by the registry, the schema validator,
the security gates and the tool handlers.
"""

from typing import Any


class ToolError(Exception):
    """Base exception for tool-related errors."""


class ToolNotFoundError(ToolError):
    """Requested tool is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class DuplicateToolError(ToolError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Tool '{name}' is already registered")
        self.name = name


# =============================================================================
# Validation errors
# =============================================================================


class ValidationError(ToolError):
    """Raw arguments do not satisfy a tool's parameter schema."""

    def __init__(self, message: str, parameter: str):
        super().__init__(message)
        self.parameter = parameter


class MissingRequiredParameterError(ValidationError):
    """A required parameter was not supplied."""

    def __init__(self, parameter: str):
        super().__init__(f"Missing required parameter '{parameter}'", parameter)


class TypeMismatchError(ValidationError):
    """A supplied value cannot be interpreted as the declared type."""

    def __init__(self, parameter: str, expected_type: str, got: Any):
        super().__init__(
            f"Parameter '{parameter}' expected {expected_type}, got {_describe(got)}",
            parameter,
        )
        self.expected_type = expected_type
        self.got = got


class InvalidEnumValueError(ValidationError):
    """A value is not one of the allowed choices."""

    def __init__(self, parameter: str, allowed: list[str], got: Any = None):
        super().__init__(
            f"Parameter '{parameter}' must be one of: {', '.join(allowed)}",
            parameter,
        )
        self.allowed = allowed
        self.got = got


class InvalidFormatError(ValidationError):
    """A value has the right type but violates a format constraint."""

    def __init__(self, parameter: str, detail: str = "invalid format"):
        super().__init__(f"Parameter '{parameter}': {detail}", parameter)
        self.detail = detail


# =============================================================================
# Security errors
# =============================================================================


class SecurityDeniedError(ToolError):
    """A security gate rejected access to an external resource."""


class AccessDeniedError(SecurityDeniedError):
    """Path lies outside every allowed root."""

    def __init__(self, path: str):
        super().__init__(
            f"Access denied. Path '{path}' is outside allowed directories."
        )
        self.path = path


class UrlNotAllowedError(SecurityDeniedError):
    """URL targets a blocked scheme or address."""

    def __init__(self, url: str):
        super().__init__("URL is not allowed for security reasons")
        self.url = url


class CommandNotAllowedError(SecurityDeniedError):
    """Command is not on the allow-list or matches a dangerous pattern."""

    def __init__(self, command: str, allowed: list[str]):
        super().__init__(f"Command not allowed. Allowed commands: {', '.join(allowed)}")
        self.command = command


# =============================================================================
# Execution errors
# =============================================================================


class ToolExecutionError(ToolError):
    """Raised when tool execution fails."""

    def __init__(self, message: str, exit_code: int | None = None):
        """Initialize error.

        Args:
            message: Error message
            exit_code: Optional exit code
        """
        super().__init__(message)
        self.exit_code = exit_code


def _describe(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return f"boolean ({str(value).lower()})"
    if isinstance(value, (int, float)):
        return f"number ({value})"
    if isinstance(value, str):
        shown = value if len(value) <= 40 else value[:40] + "..."
        return f"string ('{shown}')"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__
