"""
toolport tools - Inspect and call tools.

Usage:
    toolport tools list
    toolport tools info <tool-name>
    toolport tools call <tool-name> --args '{"key": "value"}'
"""

import asyncio
import json
from typing import Annotated

import typer
from rich.table import Table

from toolport.cli.output import console, err_console, print_error
from toolport.cli.state import build_runtime, load_cli_config

app = typer.Typer(
    name="tools",
    help="Inspect and call tools.",
)


@app.command("list")
def list_tools(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the capability manifest as JSON.",
        ),
    ] = False,
) -> None:
    """List all available tools."""
    registry, _ = build_runtime(load_cli_config(ctx))

    if json_output:
        typer.echo(json.dumps(registry.manifest(), indent=2))
        return

    if not len(registry):
        console.print("[yellow]No tools registered.[/yellow]")
        return

    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Parameters", style="magenta")
    table.add_column("Description")

    for definition in registry.list_all():
        params = ", ".join(f"{p.name}{'*' if p.required else ''}" for p in definition.parameters)
        desc = definition.description
        if len(desc) > 80:
            desc = desc[:80] + "..."
        table.add_row(definition.name, params or "-", desc)

    console.print(table)
    console.print(f"\n[dim]Total: {len(registry)} tool(s)[/dim]")


@app.command("info")
def tool_info(
    ctx: typer.Context,
    tool_name: Annotated[
        str,
        typer.Argument(help="Tool name to get info about"),
    ],
) -> None:
    """Show detailed information about a tool."""
    registry, _ = build_runtime(load_cli_config(ctx))

    definition = registry.get(tool_name)
    if definition is None:
        print_error(f"Unknown tool: {tool_name}")
        err_console.print(f"\n[dim]Available tools: {', '.join(registry.names())}[/dim]")
        raise typer.Exit(1)

    console.print(f"\n[bold cyan]{definition.name}[/bold cyan]")
    console.print(f"\n[bold]Description:[/bold]\n{definition.description}")

    if definition.parameters:
        console.print("\n[bold]Parameters:[/bold]")
        for param in definition.parameters:
            required = "[red]*[/red]" if param.required else ""
            default = f" (default: {param.default!r})" if param.default is not None else ""
            console.print(f"  • {param.name}{required}: {param.kind}{default}")
            if param.description:
                console.print(f"    {param.description}")

    console.print("\n[bold]Input Schema:[/bold]")
    console.print_json(json.dumps(definition.input_schema()))


@app.command("call")
def call_tool(
    ctx: typer.Context,
    tool_name: Annotated[
        str,
        typer.Argument(help="Tool name to call"),
    ],
    args: Annotated[
        str | None,
        typer.Option(
            "--args",
            "-a",
            help="Tool arguments as a JSON object",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the raw result envelope.",
        ),
    ] = False,
) -> None:
    """Call a tool once and print its result."""
    arguments = {}
    if args:
        try:
            arguments = json.loads(args)
        except json.JSONDecodeError as e:
            print_error(f"Invalid JSON: {e}")
            raise typer.Exit(1)
        if not isinstance(arguments, dict):
            print_error("Arguments must be a JSON object")
            raise typer.Exit(1)

    _, dispatcher = build_runtime(load_cli_config(ctx))
    result = asyncio.run(dispatcher.invoke(tool_name, arguments))

    if json_output:
        typer.echo(json.dumps(result.to_envelope(), indent=2))
    else:
        # Verbatim: tool output may contain rich markup characters
        typer.echo(result.text)

    if result.is_error:
        raise typer.Exit(1)
