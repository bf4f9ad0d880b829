"""CLI commands for kbaserpc.

Thin entry points over the comm layer: raw calls in either dialect, module
lookup through the discovery service, and the legacy search API.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Coroutine

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kbaserpc import __version__
from kbaserpc.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from kbaserpc.comm.cache import CacheSettings, ResolutionCache
from kbaserpc.comm.client import JSONRPCClient
from kbaserpc.comm.dynamic_service_client import DynamicServiceClient
from kbaserpc.comm.transport import HttpInvoker
from kbaserpc.config.access import get_config
from kbaserpc.services.search2_legacy import Search2LegacyClient
from kbaserpc.utils.exceptions import KBaseRpcError, format_error

app = typer.Typer(
    name="kbaserpc",
    help="kbaserpc - JSON-RPC 1.1/2.0 client for KBase services",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kbaserpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", callback=_version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and cache activity"),
    log_file: bool = typer.Option(False, "--log-file", help="Also log to ~/.kbaserpc/logs/cli.log"),
) -> None:
    """kbaserpc - JSON-RPC 1.1/2.0 client for KBase services."""
    configure_console_logging(verbose)
    if log_file:
        ensure_rotating_log_file("cli", level="DEBUG" if verbose else "INFO")


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    try:
        return asyncio.run(coro)
    except KBaseRpcError as exc:
        console.print(f"[red]{escape(format_error(exc))}[/red]")
        raise typer.Exit(1) from exc


def _print_json(value: Any) -> None:
    console.print_json(json.dumps(value))


def _parse_json_option(raw: str | None, option: str) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        console.print(f"[red]{option} is not valid JSON: {exc}[/red]")
        raise typer.Exit(2) from exc


def _load_params_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Cannot read params from {path}: {exc}[/red]")
        raise typer.Exit(2) from exc
    if not isinstance(data, dict):
        console.print(f"[red]{path} must contain a JSON object[/red]")
        raise typer.Exit(2)
    return data


@app.command("call")
def call_command(
    url: str = typer.Argument(..., help="JSON-RPC endpoint URL"),
    method: str = typer.Argument(..., help="Method name, e.g. Module.func"),
    params: str = typer.Option(None, "--params", "-p", help="Params as JSON"),
    dialect: str = typer.Option(None, "--dialect", "-d", help="1.1 or 2.0 (default from config)"),
    token: str = typer.Option(None, "--token", help="Authorization token (default from config)"),
    timeout: float = typer.Option(None, "--timeout", help="Seconds to wait for the response"),
) -> None:
    """Call one JSON-RPC method and print its result."""
    config = get_config()
    try:
        client = JSONRPCClient(
            url,
            dialect=dialect or config.rpc.dialect,
            timeout=timeout if timeout is not None else config.rpc.timeout,
            authorization=token or config.authorization,
            invoker=HttpInvoker(),
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc
    result = _run(client.call(method, _parse_json_option(params, "--params")))
    _print_json(result)


@app.command("lookup")
def lookup_command(
    module: str = typer.Argument(..., help="Dynamic service module name"),
    version: str = typer.Option(None, "--version", help="Release version or tag (default: auto)"),
    url: str = typer.Option(None, "--url", help="Discovery service URL (default from config)"),
    token: str = typer.Option(None, "--token", help="Authorization token (default from config)"),
) -> None:
    """Resolve a dynamic service module to its current URL."""
    config = get_config()
    client = DynamicServiceClient(
        url or config.service_discovery.url,
        config.rpc.timeout,
        token or config.authorization,
        version=version,
        module=module,
        cache=ResolutionCache(CacheSettings.from_config(config.cache)),
        invoker=HttpInvoker(),
    )
    client.service_discovery_module = config.service_discovery.module

    async def _lookup():
        try:
            return await client.lookup_module()
        finally:
            await client.cache.close()

    status = _run(_lookup())
    table = Table(title=client.module_id())
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("module_name", status.module_name)
    table.add_row("url", status.url)
    table.add_row("version", status.version or "")
    console.print(table)


def _search(method: str, params_file: Path, url: str | None, token: str | None, ignore: list[str]) -> None:
    config = get_config()
    params = _load_params_file(params_file)
    client = Search2LegacyClient(
        url or config.search.url,
        config.rpc.timeout,
        token or config.authorization,
        invoker=HttpInvoker(),
    )
    result = _run(getattr(client, method)(params))
    if isinstance(result, dict):
        result = {k: v for k, v in result.items() if k not in set(ignore)}
    _print_json(result)


@app.command("search-types")
def search_types_command(
    params_file: Path = typer.Argument(..., help="JSON file with search_types params"),
    url: str = typer.Option(None, "--url", help="Search API URL (default from config)"),
    token: str = typer.Option(None, "--token", help="Authorization token (default from config)"),
    ignore: list[str] = typer.Option([], "--ignore", help="Result keys to drop, e.g. search_time"),
) -> None:
    """Count search hits per object type."""
    _search("search_types", params_file, url, token, ignore)


@app.command("search-objects")
def search_objects_command(
    params_file: Path = typer.Argument(..., help="JSON file with search_objects params"),
    url: str = typer.Option(None, "--url", help="Search API URL (default from config)"),
    token: str = typer.Option(None, "--token", help="Authorization token (default from config)"),
    ignore: list[str] = typer.Option([], "--ignore", help="Result keys to drop, e.g. search_time"),
) -> None:
    """Search objects and print the matching page."""
    _search("search_objects", params_file, url, token, ignore)


if __name__ == "__main__":
    app()
