"""
Command allow-list filtering for toolport.

A command is deemed safe only when all of these hold:
- its leading token carries no path component (no ``/``, ``\\`` or leading ``.``)
- no dangerous pattern matches anywhere in the command line
- its leading token is on the allow-list of read-only introspection commands

This is defense-in-depth, not a sandbox. Pattern matching cannot account
for every quoting or escaping trick a shell understands; ``run_command``
therefore also executes without a shell.
"""

import re
import shlex
from dataclasses import dataclass

SAFE_COMMANDS: tuple[str, ...] = (
    "echo",
    "date",
    "whoami",
    "hostname",
    "pwd",
    "ls",
    "cat",
    "head",
    "tail",
    "wc",
    "grep",
    "find",
    "which",
    "env",
    "printenv",
    "uname",
    "uptime",
    "df",
    "du",
    "free",
)

DANGEROUS_PATTERNS: tuple[str, ...] = (
    r"[;&|`$(){}]",
    r"\bsudo\b",
    r"\brm\b",
    r"\bmv\b",
    r"(?i)\bcp\b.*(-[rf]|--recursive|--force)",
    r"\bchmod\b",
    r"\bchown\b",
    r"\bkill\b",
    r"\bpkill\b",
    r"\bshutdown\b",
    r"\breboot\b",
    r"\bdd\b",
    r"\bmkfs\b",
    r">\s*/",
    r"\bfind\b.*\s-(delete|fprint0?|fprintf|fls|exec|execdir|ok|okdir)\b",
)

SENSITIVE_ENV_PATTERN = re.compile(r"token|secret|password|key|auth|credential|private", re.IGNORECASE)


def is_sensitive_env_name(name: str) -> bool:
    """Whether an environment variable name looks like it holds a secret."""
    return bool(SENSITIVE_ENV_PATTERN.search(name))


def scrub_environment(environ: dict[str, str]) -> dict[str, str]:
    """Copy of ``environ`` without variables that look like secrets."""
    return {key: value for key, value in environ.items() if not is_sensitive_env_name(key)}


@dataclass
class CommandCheck:
    """Result of a command validation check."""

    allowed: bool
    reason: str | None = None
    matched_rule: str | None = None


class CommandFilter:
    """
    Filters commands against an allow-list and a dangerous-pattern list.

    Checks are pure: no I/O and no mutable state is touched.
    """

    def __init__(
        self,
        allowed_commands: list[str] | tuple[str, ...] = SAFE_COMMANDS,
        dangerous_patterns: list[str] | tuple[str, ...] = DANGEROUS_PATTERNS,
    ) -> None:
        """
        Initialize command filter.

        Args:
            allowed_commands: Command names that may be executed
            dangerous_patterns: Regexes that reject a command line on match
        """
        self.allowed_commands = tuple(c.lower() for c in allowed_commands)
        self.dangerous_patterns = tuple(dangerous_patterns)

        # Compile patterns for efficiency
        self._dangerous = [re.compile(p) for p in self.dangerous_patterns]

    def check_command(self, command: str) -> CommandCheck:
        """
        Check if a command is allowed.

        Args:
            command: Command line to validate

        Returns:
            CommandCheck with validation result. ``reason`` is meant for logs,
            not for the caller.
        """
        try:
            tokens = shlex.split(command)
        except ValueError:
            # Shlex parsing failed (unclosed quotes, etc.)
            return CommandCheck(allowed=False, reason="Invalid command syntax")

        if not tokens:
            return CommandCheck(allowed=False, reason="Empty command")

        base_command = tokens[0].lower()

        # Reject executables addressed by path
        if "/" in base_command or "\\" in base_command or base_command.startswith("."):
            return CommandCheck(
                allowed=False,
                reason=f"Command '{base_command}' contains a path component",
            )

        for pattern, regex in zip(self.dangerous_patterns, self._dangerous, strict=True):
            if regex.search(command):
                return CommandCheck(
                    allowed=False,
                    reason=f"Command matches dangerous pattern: {pattern}",
                    matched_rule=pattern,
                )

        if base_command not in self.allowed_commands:
            return CommandCheck(
                allowed=False,
                reason=f"Command '{base_command}' not in allow-list",
            )

        return CommandCheck(allowed=True, matched_rule=base_command)

    def is_safe(self, command: str) -> bool:
        return self.check_command(command).allowed


_default_filter = CommandFilter()


def is_command_safe(command: str) -> bool:
    """Check a command line against the default allow-list."""
    return _default_filter.is_safe(command)
