"""Shared CLI state: global options and the objects built from them."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from toolport.cli.output import configure_logging, print_error
from toolport.config import Config, ConfigurationError, load_config
from toolport.memory.store import MemoryStore
from toolport.tools.builtin import build_registry
from toolport.tools.dispatcher import ToolDispatcher
from toolport.tools.registry import ToolRegistry


@dataclass
class CliState:
    """Values of the global options, stored on the Typer context."""

    config_path: Optional[Path] = None
    log_level: Optional[str] = None


def get_state(ctx: typer.Context) -> CliState:
    root = ctx.find_root()
    if not isinstance(root.obj, CliState):
        root.obj = CliState()
    return root.obj


def load_cli_config(ctx: typer.Context) -> Config:
    """Load configuration honouring ``--config`` and ``--log-level``.

    Prints the error and exits with status 1 when configuration is invalid.
    """
    state = get_state(ctx)
    try:
        config = load_config(config_path=state.config_path)
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    configure_logging(state.log_level or config.logging.level, rich=config.logging.rich)
    return config


def build_runtime(config: Config) -> tuple[ToolRegistry, ToolDispatcher]:
    """Registry and dispatcher for one CLI invocation."""
    registry = build_registry(config, memory_store=MemoryStore())
    return registry, ToolDispatcher(registry)
