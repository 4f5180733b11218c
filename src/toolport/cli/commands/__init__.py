"""CLI command modules."""

from toolport.cli.commands import config, serve, tools

__all__ = ["config", "serve", "tools"]
