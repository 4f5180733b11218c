"""
toolport config - Configuration inspection commands.

Usage:
    toolport config show
    toolport config show security
    toolport config show --json
    toolport config path
"""

import json
from typing import Annotated

import typer
import yaml
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from toolport.cli.output import console, print_error
from toolport.cli.state import get_state, load_cli_config
from toolport.config import get_config_sources
from toolport.config.merger import lookup

app = typer.Typer(
    name="config",
    help="Configuration inspection.",
)


@app.command()
def show(
    ctx: typer.Context,
    section: Annotated[
        str | None,
        typer.Argument(
            help="Config section to show (e.g., 'fetch', 'security.commands').",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show the effective (merged) configuration."""
    config_dict = load_cli_config(ctx).model_dump(mode="json")

    if section:
        try:
            config_dict = lookup(config_dict, section)
        except KeyError:
            print_error(f"Section '{section}' not found in configuration.")
            raise typer.Exit(1)

    if json_output:
        typer.echo(json.dumps(config_dict, indent=2))
        return

    output = yaml.dump(
        config_dict,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    if section:
        console.print(Panel(Syntax(output, "yaml", theme="monokai"), title=f"[cyan]{section}[/cyan]"))
    else:
        console.print(Syntax(output, "yaml", theme="monokai"))


@app.command()
def path(ctx: typer.Context) -> None:
    """Show which configuration files are loaded."""
    sources = get_config_sources(get_state(ctx).config_path)

    table = Table(title="Configuration Sources")
    table.add_column("Source", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("Status")

    for source_name, source_path in sources.items():
        if source_path:
            table.add_row(source_name, str(source_path), "[green]loaded[/green]")
        else:
            table.add_row(source_name, "-", "[dim]not found[/dim]")

    console.print(table)
