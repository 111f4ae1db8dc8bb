"""CLI commands for schema-store."""

from . import records

__all__ = ["records"]
