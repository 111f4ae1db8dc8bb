"""Main CLI entry point for schema-store."""

from schema_store.cli.app import app

# Register commands
from schema_store.cli.commands import records  # noqa: F401

if __name__ == "__main__":  # pragma: no cover
    app()
