"""CLI commands for apicontract.

`describe` inspects a catalog or implemented router, `init` writes a config
file, and `serve` runs a FastAPI app built on top of one with uvicorn.
"""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from apicontract import __version__
from apicontract.catalog import OperationCatalog
from apicontract.router import ApiRouter, ImplementedRouter

app = typer.Typer(
    name="apicontract",
    help="apicontract - typed request/response contracts",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"apicontract v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """apicontract - typed request/response contracts."""
    pass


def load_object(target: str) -> Any:
    """Import ``package.module:attribute`` (attribute may be dotted)."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"Expected MODULE:ATTRIBUTE, got {target!r}")
    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise typer.BadParameter(f"{module_name} has no attribute {attr_path!r}") from None
    return obj


def _as_catalog(obj: Any) -> OperationCatalog:
    if isinstance(obj, OperationCatalog):
        return obj
    if isinstance(obj, (ApiRouter, ImplementedRouter)):
        return obj.definitions
    raise typer.BadParameter(f"Expected a catalog or router, got {type(obj).__name__}")


def _shape_label(schema: dict[str, Any] | None) -> str:
    if schema is None:
        return "-"
    return str(schema.get("title") or schema.get("type") or "object")


@app.command()
def describe(
    target: str = typer.Argument(..., help="Catalog or router to inspect, e.g. myapp.api:catalog"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON (with full JSON Schemas) instead of a table"),
):
    """List the operations of a catalog."""
    catalog = _as_catalog(load_object(target))
    summary = catalog.describe()
    if as_json:
        typer.echo(json.dumps(summary, indent=2, ensure_ascii=False))
        return

    table = Table(title=f"Operations ({len(summary)})")
    table.add_column("Operation", style="cyan")
    table.add_column("Request")
    table.add_column("Response")
    table.add_column("Metadata", style="dim")
    for entry in summary:
        table.add_row(
            entry["name"],
            _shape_label(entry["request"]),
            _shape_label(entry["response"]),
            json.dumps(entry["metadata"], ensure_ascii=False),
        )
    console.print(table)


@app.command()
def serve(
    target: str = typer.Argument(..., help="FastAPI app or zero-argument app factory, e.g. myapp.server:create_app"),
    host: str | None = typer.Option(None, "--host", help="Bind host (default: server.host from config)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default: server.port from config)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Serve a FastAPI application with uvicorn."""
    import uvicorn
    from fastapi import FastAPI

    from apicontract.config.access import get_config
    from apicontract.utils.logging_utils import configure_logging

    config = get_config(config_path=config_path)
    configure_logging(config.logging)

    obj = load_object(target)
    application = obj if isinstance(obj, FastAPI) else obj()
    if not isinstance(application, FastAPI):
        console.print(f"[red]{target} did not produce a FastAPI app[/red]")
        raise typer.Exit(1)

    bind_host = host or config.server.host
    bind_port = port if port is not None else config.server.port
    console.print(f"[green]✓[/green] Serving {target} on http://{bind_host}:{bind_port}")
    uvicorn.run(application, host=bind_host, port=bind_port)


@app.command()
def init(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file with defaults"),
):
    """Write a config file with camelCase keys."""
    from apicontract.config.access import get_config
    from apicontract.config.loader import get_config_path, save_config
    from apicontract.config.schema import ApiContractConfig

    path = config_path or get_config_path()
    if path.exists() and not force:
        save_config(get_config(config_path=path, force_reload=True), path)
        console.print(f"[green]✓[/green] Config refreshed at {path} (existing values preserved)")
    else:
        save_config(ApiContractConfig(), path)
        console.print(f"[green]✓[/green] Created config at {path}")
