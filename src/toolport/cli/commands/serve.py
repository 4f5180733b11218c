"""
toolport serve - Run the tool server on stdio.

Usage:
    toolport serve
    toolport --config ./toolport.yaml serve
"""

import asyncio
import logging

import typer

from toolport import __version__
from toolport.cli.state import build_runtime, load_cli_config
from toolport.server.stdio import ToolServer

logger = logging.getLogger(__name__)


def serve(ctx: typer.Context) -> None:
    """Serve tools over MCP on stdin/stdout until the client disconnects."""
    config = load_cli_config(ctx)
    registry, dispatcher = build_runtime(config)
    logger.info(f"Loaded {len(registry)} tools")

    server = ToolServer(dispatcher, name=config.server.name, version=__version__)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        pass  # Clean exit on Ctrl+C
