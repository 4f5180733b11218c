"""
Main Typer application for the toolport CLI.

This module defines the root CLI application and registers all command groups.
"""

from pathlib import Path
from typing import Annotated

import typer

from toolport import __version__
from toolport.cli.commands import config, serve, tools
from toolport.cli.output import print_info
from toolport.cli.state import get_state

app = typer.Typer(
    name="toolport",
    help="Schema-validated, security-gated tool server for AI agents.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"toolport version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (overrides ./.toolport.yaml).",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level: DEBUG, INFO, WARNING or ERROR.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Shortcut for --log-level DEBUG.",
        ),
    ] = False,
) -> None:
    """
    [bold blue]toolport[/bold blue] - tool server for AI agents

    Exposes filesystem, git, fetch, system, memory, time and rule tools over
    JSON-RPC on stdio. Logs are written to stderr.
    """
    state = get_state(ctx)
    state.config_path = config_path
    state.log_level = "DEBUG" if verbose else log_level


app.command("serve")(serve.serve)
app.add_typer(tools.app, name="tools")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
