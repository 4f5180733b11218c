"""
Pytest configuration and fixtures for toolport tests.
"""

import os
import tempfile
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from toolport.config.schema import Config
from toolport.memory.store import MemoryStore
from toolport.security.sandbox import PathGuard
from toolport.tools.builtin import build_registry
from toolport.tools.dispatcher import ToolDispatcher


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests (resolved, so symlinked tmp dirs compare equal)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def workspace(temp_dir: Path) -> Path:
    """A sandbox root with a few files, next to a sibling directory outside it."""
    root = temp_dir / "workspace"
    root.mkdir()
    (root / "hello.txt").write_text("Hello, world!\n")
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('hi')\n")
    (root / "src" / "util.py").write_text("def util():\n    pass\n")

    outside = temp_dir / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("top secret\n")
    return root


@pytest.fixture
def guard(workspace: Path) -> PathGuard:
    """Path guard restricted to the workspace."""
    return PathGuard(allowed_roots=[workspace])


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point TOOLPORT_HOME at an empty directory and clear TOOLPORT_* overrides."""
    home = temp_dir / ".toolport"
    home.mkdir()
    for key in list(os.environ):
        if key.startswith("TOOLPORT_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("TOOLPORT_HOME", str(home))
    return home


@pytest.fixture
def config(workspace: Path) -> Config:
    """Configuration whose only allowed root is the workspace."""
    return Config.model_validate(
        {
            "security": {"allowed_roots": [str(workspace)]},
            "rules": {"rules_dir": str(workspace / "rules")},
        }
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def dispatcher(config: Config, memory_store: MemoryStore) -> ToolDispatcher:
    """Dispatcher over every built-in tool, confined to the workspace."""
    return ToolDispatcher(build_registry(config, memory_store=memory_store))


class FakeClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(seconds=1)
        return current


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
