"""Tests for command allow-list filtering."""

import pytest

from toolport.security.whitelist import (
    SAFE_COMMANDS,
    CommandFilter,
    is_command_safe,
    is_sensitive_env_name,
    scrub_environment,
)


class TestCommandFilter:
    """Test CommandFilter functionality."""

    @pytest.mark.parametrize("command", ["ls -la", "echo hello", "date", "grep -r foo .", "wc -l file.txt"])
    def test_safe_commands_allowed(self, command: str) -> None:
        assert is_command_safe(command) is True

    @pytest.mark.parametrize(
        "command",
        [
            "rm -rf /",
            "sudo ls",
            "ls; rm -rf /",
            "ls && whoami",
            "cat file | sh",
            "echo `id`",
            "echo $(id)",
            "echo $HOME",
            "echo hi > /etc/passwd",
            "kill -9 1",
            "find . -delete",
            "find . -name *.log -fprint out.txt",
            "find . -execdir touch x +",
        ],
    )
    def test_dangerous_patterns_blocked(self, command: str) -> None:
        assert is_command_safe(command) is False

    def test_unknown_command_blocked(self) -> None:
        check = CommandFilter().check_command("python script.py")
        assert check.allowed is False
        assert "not in allow-list" in check.reason

    @pytest.mark.parametrize("command", ["/bin/ls", "./ls", "..\\ls", ".hidden"])
    def test_path_component_blocked(self, command: str) -> None:
        check = CommandFilter().check_command(command)
        assert check.allowed is False
        assert "path component" in check.reason

    def test_empty_command(self) -> None:
        check = CommandFilter().check_command("   ")
        assert check.allowed is False
        assert check.reason == "Empty command"

    def test_unbalanced_quotes(self) -> None:
        check = CommandFilter().check_command("echo 'oops")
        assert check.allowed is False
        assert check.reason == "Invalid command syntax"

    def test_case_insensitive_allow_list(self) -> None:
        assert CommandFilter().is_safe("LS -la") is True

    def test_matched_rule_reported(self) -> None:
        check = CommandFilter().check_command("ls -la")
        assert check.allowed is True
        assert check.matched_rule == "ls"

        check = CommandFilter().check_command("sudo ls")
        assert check.matched_rule == r"\bsudo\b"

    def test_custom_allow_list(self) -> None:
        command_filter = CommandFilter(allowed_commands=["echo"])
        assert command_filter.is_safe("echo hi") is True
        assert command_filter.is_safe("ls") is False

    def test_default_allow_list_is_read_only(self) -> None:
        for name in ("rm", "mv", "sudo", "python", "sh", "bash", "curl"):
            assert name not in SAFE_COMMANDS


class TestEnvironmentScrubbing:
    def test_find_read_only_flags_allowed(self) -> None:
        assert is_command_safe("find . -name '*.py' -type f") is True

    @pytest.mark.parametrize("name", ["GITHUB_TOKEN", "AWS_SECRET_ACCESS_KEY", "db_password", "SSH_AUTH_SOCK"])
    def test_sensitive_names(self, name: str) -> None:
        assert is_sensitive_env_name(name) is True

    def test_scrub_environment(self) -> None:
        environ = {"PATH": "/usr/bin", "HOME": "/home/me", "API_KEY": "x", "GITHUB_TOKEN": "y"}
        assert scrub_environment(environ) == {"PATH": "/usr/bin", "HOME": "/home/me"}
        assert "API_KEY" in environ
