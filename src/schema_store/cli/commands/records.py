"""Commands that read and clear records."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

import typer
import yaml
from loguru import logger
from rich.console import Console
from rich.table import Table

from schema_store.cli.app import CliState, app
from schema_store.errors import StoreError
from schema_store.store import ObjectStore
from schema_store.utils import load_schema_file

console = Console()


@asynccontextmanager
async def open_store(state: CliState) -> AsyncGenerator[ObjectStore, None]:
    """Open the store described by the CLI options and close it afterwards."""
    if state.schemas_file is None:
        console.print("[red]Error:[/red] --schemas is required")
        raise typer.Exit(1)

    schemas = load_schema_file(state.schemas_file)
    store = await ObjectStore.open(schemas, state.schema_version, config=state.config)
    try:
        yield store
    finally:
        await store.close()


def run(coro) -> Any:
    """Run a command coroutine, turning store errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except (StoreError, ValueError) as e:
        logger.debug(f"Command failed: {e!r}")
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def parse_where(conditions: Optional[List[str]]) -> Dict[str, Any]:
    """Parse ``field=value`` pairs, typing values the way YAML would."""
    result: Dict[str, Any] = {}
    for condition in conditions or []:
        field, sep, raw = condition.partition("=")
        if not sep or not field.strip():
            raise typer.BadParameter(f"Expected field=value, got {condition!r}")
        result[field.strip()] = yaml.safe_load(raw) if raw.strip() else ""
    return result


def build_filter(expression: Optional[str], where: Optional[List[str]]):
    if expression and where:
        raise typer.BadParameter("Use either --filter or --where, not both")
    return expression or parse_where(where) or None


@app.command()
def keys(ctx: typer.Context):
    """List the registered schema names."""

    async def _keys():
        async with open_store(ctx.obj) as store:
            return await store.get_all_keys()

    for name in run(_keys()):
        console.print(name)


@app.command("list")
def list_records(
    ctx: typer.Context,
    type_name: str = typer.Argument(..., help="Schema name"),
    filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Raw SQL predicate"),
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Equality condition field=value, repeatable"
    ),
):
    """Show the records of a schema."""
    query = build_filter(filter, where)

    async def _list():
        async with open_store(ctx.obj) as store:
            records = await store.get_items(type_name, query) or []
            properties = list(store.registry.models[type_name].__schema__.properties)
            return properties, [record.to_dict() for record in records]

    properties, rows = run(_list())

    table = Table(title=f"{type_name} ({len(rows)})")
    for name in properties:
        table.add_column(name)
    for row in rows:
        table.add_row(*("" if row[name] is None else str(row[name]) for name in properties))
    console.print(table)


@app.command()
def count(
    ctx: typer.Context,
    type_name: str = typer.Argument(..., help="Schema name"),
    filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Raw SQL predicate"),
    where: Optional[List[str]] = typer.Option(
        None, "--where", "-w", help="Equality condition field=value, repeatable"
    ),
):
    """Count the records of a schema."""
    query = build_filter(filter, where)

    async def _count():
        async with open_store(ctx.obj) as store:
            return await store.count_items(type_name, query)

    console.print(run(_count()))


@app.command()
def clear(
    ctx: typer.Context,
    type_name: Optional[str] = typer.Argument(None, help="Schema name, omit to clear all"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete every record of a schema, or of all schemas."""
    target = type_name or "all schemas"
    if not yes and not typer.confirm(f"Delete every record of {target}?"):
        console.print("Aborted.")
        raise typer.Exit(0)

    async def _clear():
        async with open_store(ctx.obj) as store:
            await store.remove_all(type_name)

    run(_clear())
    console.print(f"[green]Cleared {target}[/green]")
