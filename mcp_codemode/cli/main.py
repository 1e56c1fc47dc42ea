"""Main CLI interface for the codemode proxy."""

import asyncio
import json
import logging
from typing import Optional

import typer
from rich import print as rich_print
from rich.console import Console
from rich.table import Table

from ..config.manager import CONFIG_PATH_ENV, ConfigManager
from ..core.manager import CodemodeProxy
from ..errors import CodemodeError

app = typer.Typer(help="Codemode - aggregate tools from many MCP servers behind one")
console = Console()

CONFIG_HELP = f"Backend configuration file (defaults to ${CONFIG_PATH_ENV})"


@app.command()
def start(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Start the proxy on stdio."""
    try:
        asyncio.run(CodemodeProxy(config).start())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        # stdout belongs to the MCP channel
        Console(stderr=True).print(f"[red]Error starting codemode proxy: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def tools(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Aggregate all backends and list the exposed tools."""
    setup_logging(verbose)
    try:
        asyncio.run(show_tools(config))
    except Exception as e:
        rich_print(f"[red]Error listing tools: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def interfaces(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Print the generated type signatures of all tools."""
    setup_logging(verbose)
    try:
        proxy = CodemodeProxy(config)
        registry = asyncio.run(proxy.initialize())
        typer.echo(registry.interfaces)
    except Exception as e:
        rich_print(f"[red]Error generating interfaces: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def call(
    name: str = typer.Argument(..., help="Qualified tool name, e.g. github.search_issues"),
    arguments: str = typer.Option("{}", "--args", "-a", help="Tool arguments as JSON"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """Call one aggregated tool and print its result."""
    setup_logging(verbose)
    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as e:
        rich_print(f"[red]Invalid JSON arguments: {e}[/red]")
        raise typer.Exit(1)

    try:
        result = asyncio.run(call_tool(config, name, parsed))
    except CodemodeError as e:
        rich_print(f"[red]{type(e).__name__}: {e}[/red]")
        raise typer.Exit(1)

    console.print_json(data=result)


# Configuration management commands
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")


@config_app.command("validate")
def validate_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Validate configuration file."""
    issues = ConfigManager(config).validate_config()

    if not issues:
        rich_print("[green]Configuration is valid![/green]")
    else:
        rich_print("[red]Configuration validation failed:[/red]")
        for issue in issues:
            rich_print(f"  [red]•[/red] {issue}")
        raise typer.Exit(1)


@config_app.command("show")
def show_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
):
    """Show configured backends."""
    try:
        config_obj = ConfigManager(config).load_config()
    except CodemodeError as e:
        rich_print(f"[red]Error showing configuration: {e}[/red]")
        raise typer.Exit(1)

    rich_print(f"[bold]Proxy:[/bold] {config_obj.proxy.name} v{config_obj.proxy.version}")

    if not config_obj.servers:
        rich_print("[yellow]No servers configured[/yellow]")
        return

    table = Table(title="Configured Backends")
    table.add_column("Server ID", style="cyan")
    table.add_column("Transport", style="yellow")
    table.add_column("Target", style="magenta")
    table.add_column("Filter", style="green")

    for backend_id, backend in config_obj.servers.items():
        target = backend.url or " ".join([backend.command, *backend.args])
        if backend.allow is not None:
            tool_filter = f"allow: {', '.join(backend.allow) or '-'}"
        elif backend.deny:
            tool_filter = f"deny: {', '.join(backend.deny)}"
        else:
            tool_filter = "all"
        table.add_row(backend_id, backend.transport, target, tool_filter)

    console.print(table)


# Implementation functions
async def show_tools(config_path: Optional[str]):
    """Aggregate and display every exposed tool."""
    proxy = CodemodeProxy(config_path)
    registry = await proxy.initialize()

    if not registry.tools:
        rich_print("[yellow]No tools available[/yellow]")
    else:
        table = Table(title="Aggregated Tools")
        table.add_column("Tool", style="cyan")
        table.add_column("Server ID", style="magenta")
        table.add_column("Backend Name", style="yellow")
        table.add_column("Description")

        for tool in registry.tools:
            table.add_row(tool.name, tool.backend_id, tool.raw_name, tool.description or "")

        console.print(table)

    for backend_id, error in registry.failures.items():
        rich_print(f"[red]Server {backend_id} unavailable:[/red] {error}")


async def call_tool(config_path: Optional[str], name: str, arguments: dict):
    """Aggregate backends and invoke one tool, returning JSON-ready data."""
    proxy = CodemodeProxy(config_path)
    await proxy.initialize()
    result = await proxy.router.invoke(name, arguments)

    if isinstance(result, dict):
        return result
    return [block.model_dump(mode="json", exclude_none=True) for block in result]


def setup_logging(verbose: bool):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def main():
    """Main entry point for CLI."""
    app()
