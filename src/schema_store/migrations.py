"""Schema version tracking and user-supplied migrations.

The schema version lives in a one-row ``_schema_version`` table. When a
store is opened with a higher version than the one recorded, the migration
callable runs in the same transaction that records the new version, so a
failed migration leaves the old version in place.
"""

import inspect
from typing import Callable, Optional

from loguru import logger
from sqlalchemy import Column, Connection, Integer, MetaData, Table, select, update
from sqlalchemy.ext.asyncio import AsyncEngine

from schema_store.errors import SchemaVersionError

# Migration(connection, old_version, new_version)
Migration = Callable[[Connection, int, int], None]

VERSION_METADATA = MetaData()

schema_version_table = Table(
    "_schema_version",
    VERSION_METADATA,
    Column("id", Integer, primary_key=True),
    Column("version", Integer, nullable=False),
)


def default_migration(connection: Connection, old_version: int, new_version: int) -> None:
    """Empty migration."""


async def get_schema_version(engine: AsyncEngine) -> Optional[int]:
    """Return the recorded schema version, or None for a fresh database."""
    async with engine.begin() as conn:
        await conn.run_sync(VERSION_METADATA.create_all)
        result = await conn.execute(select(schema_version_table.c.version))
        return result.scalar_one_or_none()


async def ensure_schema_version(
    engine: AsyncEngine, version: int, migration: Optional[Migration] = None
) -> int:
    """Bring the recorded schema version up to ``version``.

    Returns the version that was recorded before this call (``version`` itself
    for a fresh database). Migrations run through ``run_sync`` and so must be
    plain functions.
    """
    migration = migration or default_migration
    if inspect.iscoroutinefunction(migration):
        raise TypeError(
            "Migrations run on a sync connection and must be plain functions, not async"
        )

    async with engine.begin() as conn:
        await conn.run_sync(VERSION_METADATA.create_all)
        result = await conn.execute(select(schema_version_table.c.version))
        stored = result.scalar_one_or_none()

        if stored is None:
            logger.info(f"Recording initial schema version {version}")
            await conn.execute(schema_version_table.insert().values(id=1, version=version))
            return version

        if stored > version:
            raise SchemaVersionError(stored=stored, requested=version)

        if stored < version:
            logger.info(f"Migrating schema from version {stored} to {version}")
            await conn.run_sync(migration, stored, version)
            await conn.execute(
                update(schema_version_table)
                .where(schema_version_table.c.id == 1)
                .values(version=version)
            )
            logger.info(f"Schema migrated to version {version}")
        return stored
