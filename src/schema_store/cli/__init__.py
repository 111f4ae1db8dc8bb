"""Command line interface for schema-store."""
