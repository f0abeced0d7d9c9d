"""CLI commands for surreal_rpc.

Registers the top-level commands: query (run statements and print their
results) and config (show the effective connection settings).
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from surreal_rpc import __version__
from surreal_rpc.cli.logging_utils import configure_cli_logging
from surreal_rpc.client import SurrealClient
from surreal_rpc.config.loader import get_config_path, load_config
from surreal_rpc.config.schema import ClientConfig
from surreal_rpc.response import failed_statements
from surreal_rpc.rpc.errors import SurrealRpcError
from surreal_rpc.rpc.protocol import ResponseEnvelope

app = typer.Typer(
    name="surreal-rpc",
    help="surreal-rpc - query a database over its WebSocket RPC endpoint",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"surreal-rpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """surreal-rpc - WebSocket RPC client."""
    pass


def _load_cli_config(config_path: Path | None, url: str | None) -> ClientConfig:
    try:
        cfg = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    if url:
        cfg = cfg.model_copy(update={"url": url})
    return cfg


def _parse_params(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        params = json.loads(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]--params is not valid JSON: {e}[/red]")
        raise typer.Exit(2) from e
    if not isinstance(params, dict):
        console.print("[red]--params must be a JSON object[/red]")
        raise typer.Exit(2)
    return params


async def run_query(cfg: ClientConfig, statement: str, params: dict[str, Any]) -> ResponseEnvelope:
    async with await SurrealClient.from_config(cfg) as client:
        return await client.query(statement, params)


def _print_response(response: ResponseEnvelope, statement_index: int | None) -> None:
    statements = response.statements
    if not statements:
        console.print_json(json.dumps(response.result, default=str))
        return
    indexes = range(len(statements)) if statement_index is None else [statement_index]
    for index in indexes:
        statement = response.statement(index)
        if statement is None:
            console.print(f"[yellow]No statement #{index} in response ({len(statements)} returned)[/yellow]")
            continue
        colour = "green" if statement.ok else "red"
        console.print(f"[bold]#{index}[/bold] [{colour}]{statement.status}[/{colour}] [dim]{statement.time}[/dim]")
        console.print_json(json.dumps(statement.results(), default=str))


@app.command()
def query(
    statement: str = typer.Argument(..., help="Statement text; separate several with ';'"),
    params: str = typer.Option(None, "--params", "-p", help="Query parameters as a JSON object"),
    statement_index: int = typer.Option(None, "--statement", "-n", help="Only print the Nth statement's rows"),
    url: str = typer.Option(None, "--url", help="Override the RPC endpoint URL"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.surreal_rpc/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", help="Print client logs to stderr"),
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Write client logs to ~/.surreal_rpc/logs"),
):
    """Run a query and print each statement's results."""
    cfg = _load_cli_config(config_path, url)
    configure_cli_logging(verbose=verbose, logs=logs, level=cfg.log_level)
    query_params = _parse_params(params)
    try:
        response = asyncio.run(run_query(cfg, statement, query_params))
    except SurrealRpcError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    _print_response(response, statement_index)
    if failed_statements(response):
        raise typer.Exit(1)


@app.command("config")
def show_config(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default ~/.surreal_rpc/config.json)"),
):
    """Show the effective connection settings."""
    path = config_path or get_config_path()
    cfg = _load_cli_config(config_path, None)
    table = Table(title=f"Config: {path} {'[green]✓[/green]' if path.exists() else '[dim](defaults)[/dim]'}")
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in cfg.model_dump().items():
        if name == "password" and value:
            value = "********"
        table.add_row(name, "[dim]not set[/dim]" if value is None else str(value))
    console.print(table)


if __name__ == "__main__":
    app()
