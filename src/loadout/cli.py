"""
CLI entry point for Loadout.

This module provides the Typer-based command-line interface for Loadout.

Commands:
    tools       Show the toolset an agent role would receive
    faults      List fault markers recorded by the process supervisor

Architecture Note:
    The CLI is thin: it parses arguments, builds a capability descriptor
    from the config and delegates to loadout.assembly. main() runs the whole
    app inside the process Supervisor, so any unexpected exception is
    recorded in the fault database before the process exits non-zero.
"""

import asyncio
import json
import os
import sys
import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from loadout import __version__
from loadout.assembly import assemble_toolset
from loadout.capabilities import AgentRole, CapabilityDescriptor, LspEndpoint
from loadout.errors import LoadoutError
from loadout.log import configure_logging
from loadout.schema import FaultMarker, LoadoutConfig, load_config
from loadout.store import FaultLog, FaultStore
from loadout.supervisor import Supervisor
from loadout.tools import BuiltinTool, Toolset

FAULT_DB_ENV = "LOADOUT_FAULT_DB"
DEFAULT_FAULT_DB = "loadout.db"

app = typer.Typer(
    name="loadout",
    help="Assemble capability-scoped toolsets for coding agents.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def default_fault_db() -> Path:
    """Fault database used by the entrypoint; LOADOUT_FAULT_DB overrides it."""
    return Path(os.environ.get(FAULT_DB_ENV) or DEFAULT_FAULT_DB)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]loadout[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    Loadout - capability-scoped toolsets for coding agents.

    Builds the ordered list of tools an agent role may call from the services
    available at runtime, and records any fatal fault before exiting.
    """


def _lsp_clients(config: LoadoutConfig, languages: list[str]) -> dict[str, LspEndpoint]:
    clients = {
        language: LspEndpoint(language=language, command=server.command, args=tuple(server.args))
        for language, server in config.enabled_lsp().items()
    }
    for language in languages:
        clients.setdefault(language, LspEndpoint(language=language, command=language))
    return clients


@app.command()
def tools(
    role: Annotated[
        AgentRole,
        typer.Option("--role", "-r", help="Agent role to build the toolset for."),
    ] = AgentRole.CODER,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a loadout YAML config (MCP servers, language servers).",
            exists=True,
            readable=True,
            resolve_path=True,
        ),
    ] = None,
    lsp: Annotated[
        Optional[list[str]],
        typer.Option("--lsp", help="Treat a language server as available. Can be repeated."),
    ] = None,
    no_external: Annotated[
        bool,
        typer.Option("--no-external", help="Skip MCP tool discovery."),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the toolset in JSON format."),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show tracebacks for errors."),
    ] = False,
) -> None:
    """
    Show the toolset an agent role would receive.

    Example:
        $ loadout tools --role task --lsp go
        $ loadout tools --config loadout.yaml --json
    """
    configure_logging(verbose)

    try:
        config = load_config(config_path) if config_path else LoadoutConfig()
    except LoadoutError as e:
        if json_output:
            _output_json_error(e, debug)
        else:
            console.print(f"[red]Error loading config: {escape(str(e))}[/red]")
            if debug:
                console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)

    caps = CapabilityDescriptor(lsp_clients=_lsp_clients(config, lsp or []))

    provider = None
    if config.mcp_servers and not no_external:
        from loadout.tools.mcp import McpToolProvider

        provider = McpToolProvider(config.mcp_servers)

    toolset = asyncio.run(
        assemble_toolset(
            role,
            caps,
            provider=provider,
            timeout_seconds=config.discovery_timeout_seconds,
        )
    )

    if json_output:
        _output_json_toolset(role, toolset)
    else:
        _display_toolset(role, toolset)


def _tool_source(tool: object) -> str:
    return "built-in" if isinstance(tool, BuiltinTool) else "external"


def _display_toolset(role: AgentRole, toolset: Toolset) -> None:
    """Display a toolset as a table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("Tool", style="cyan")
    table.add_column("Source", width=9)
    table.add_column("Description")

    for index, tool in enumerate(toolset, start=1):
        source = _tool_source(tool)
        style = "green" if source == "built-in" else "magenta"
        description = tool.description
        if len(description) > 60:
            description = description[:57] + "..."
        table.add_row(str(index), escape(tool.name), f"[{style}]{source}[/{style}]", escape(description))

    console.print(f"[bold]{role.value}[/bold] toolset: {len(toolset)} tools")
    console.print(table)


def _output_json_toolset(role: AgentRole, toolset: Toolset) -> None:
    """Output a toolset in JSON format."""
    output = {
        "role": role.value,
        "count": len(toolset),
        "tools": [
            {**tool.info().model_dump(), "source": _tool_source(tool)}
            for tool in toolset
        ],
    }
    print(json.dumps(output, indent=2))


def _output_json_error(error: LoadoutError, debug: bool) -> None:
    """Output an error in JSON format."""
    output = error.to_dict()
    if debug:
        output["traceback"] = traceback.format_exc()
    print(json.dumps(output, indent=2))


@app.command()
def faults(
    db: Annotated[
        Optional[Path],
        typer.Option(
            "--db",
            help=f"Fault database. Defaults to ${FAULT_DB_ENV} or {DEFAULT_FAULT_DB}.",
            resolve_path=True,
        ),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", help="Maximum number of faults to show.", min=1),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output faults in JSON format."),
    ] = False,
    show_traceback: Annotated[
        bool,
        typer.Option("--traceback", help="Print the traceback of each fault."),
    ] = False,
) -> None:
    """
    List fault markers recorded by the process supervisor, newest first.

    Example:
        $ loadout faults --limit 5
    """
    db_path = db or default_fault_db()
    markers: list[FaultMarker] = []
    if db_path.exists():
        try:
            with FaultStore(db_path) as store:
                markers = store.list_faults(limit=limit)
        except LoadoutError as e:
            console.print(f"[red]Error reading faults: {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

    if json_output:
        print(json.dumps([marker.model_dump(mode="json") for marker in markers], indent=2))
        return

    if not markers:
        console.print("[dim]No faults recorded.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Occurred", style="dim")
    table.add_column("Source")
    table.add_column("Error", style="red")
    table.add_column("Message")

    for marker in markers:
        table.add_row(
            marker.fault_id or "",
            marker.occurred_at.strftime("%Y-%m-%d %H:%M:%S"),
            marker.source,
            marker.error_type,
            escape(marker.message),
        )
    console.print(table)

    if show_traceback:
        for marker in markers:
            console.print(f"\n[bold]{marker.fault_id}[/bold]")
            console.print(f"[dim]{escape(marker.traceback)}[/dim]")


def main() -> None:
    """Console script entry point: run the CLI under the process supervisor."""
    supervisor = Supervisor(FaultLog(default_fault_db()), source="main")
    sys.exit(supervisor.run(app))


if __name__ == "__main__":
    main()
