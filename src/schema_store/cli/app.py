from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from schema_store.config import StoreConfig
from schema_store.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import schema_store

        typer.echo(f"schema-store version: {schema_store.__version__}")
        raise typer.Exit()


@dataclass
class CliState:
    """Options shared by every command."""

    config: StoreConfig
    schemas_file: Optional[Path]
    schema_version: Optional[int]


app = typer.Typer(name="schema-store", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    db_path: Optional[Path] = typer.Option(
        None,
        "--db",
        help="SQLite database file. Omit for an in-memory database.",
        envvar="SCHEMA_STORE_DATABASE_PATH",
    ),
    schemas_file: Optional[Path] = typer.Option(
        None,
        "--schemas",
        "-s",
        help="YAML or JSON file with the schema definitions",
        envvar="SCHEMA_STORE_SCHEMAS",
        exists=True,
        dir_okay=False,
    ),
    schema_version: Optional[int] = typer.Option(
        None, "--schema-version", min=1, help="Schema version to open the store with"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level, defaults to SCHEMA_STORE_LOG_LEVEL or WARNING"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """schema-store - inspect and maintain an object store from the command line."""
    config = StoreConfig(database_path=db_path)
    setup_logging(log_level=(log_level or config.log_level).upper())
    ctx.obj = CliState(config=config, schemas_file=schemas_file, schema_version=schema_version)
