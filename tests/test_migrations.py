"""Tests for schema versions and migrations."""

import pytest
from sqlalchemy import text

from schema_store.errors import EngineWriteError, ErrorKind, SchemaVersionError
from schema_store.migrations import get_schema_version
from schema_store.store import ObjectStore


@pytest.mark.asyncio
async def test_version_defaults_to_one(schemas, file_config):
    async with await ObjectStore.open(schemas, config=file_config) as store:
        assert await get_schema_version(store.get_model().engine) == 1


@pytest.mark.asyncio
async def test_version_from_config(schemas, file_config):
    file_config.schema_version = 3
    async with await ObjectStore.open(schemas, config=file_config) as store:
        assert await get_schema_version(store.get_model().engine) == 3


@pytest.mark.asyncio
async def test_migration_runs_on_version_bump(schemas, file_config):
    calls = []

    def migration(connection, old_version, new_version):
        calls.append((old_version, new_version))
        connection.execute(text("UPDATE User SET name = upper(name)"))

    async with await ObjectStore.open(schemas, 1, migration, config=file_config) as store:
        await store.create_item("User", {"id": 1, "name": "ann"})
    assert calls == []

    async with await ObjectStore.open(schemas, 2, migration, config=file_config) as store:
        users = await store.get_items("User")
        assert [u.name for u in users] == ["ANN"]
        assert await get_schema_version(store.get_model().engine) == 2
    assert calls == [(1, 2)]

    # same version again does not migrate
    async with await ObjectStore.open(schemas, 2, migration, config=file_config):
        pass
    assert calls == [(1, 2)]


@pytest.mark.asyncio
async def test_migration_can_add_columns(schemas, file_config):
    async with await ObjectStore.open(schemas, 1, config=file_config) as store:
        await store.create_item("User", {"id": 1, "name": "Ann"})

    def add_nickname(connection, old_version, new_version):
        connection.execute(text("ALTER TABLE User ADD COLUMN nickname TEXT"))
        connection.execute(text("UPDATE User SET nickname = 'A' WHERE id = 1"))

    schemas[0] = {
        **schemas[0],
        "properties": {**schemas[0]["properties"], "nickname": "string?"},
    }
    async with await ObjectStore.open(schemas, 2, add_nickname, config=file_config) as store:
        users = await store.get_items("User", {"nickname": "A"})
        assert [u.name for u in users] == ["Ann"]


@pytest.mark.asyncio
async def test_failed_migration_keeps_old_version(schemas, file_config, errors):
    async with await ObjectStore.open(schemas, 1, config=file_config):
        pass

    def broken(connection, old_version, new_version):
        raise RuntimeError("migration failed")

    store = ObjectStore(file_config)
    with pytest.raises(EngineWriteError, match="migration failed"):
        await store.setup(schemas, 2, broken, errors.append)
    assert store.is_setup is False
    assert isinstance(errors[0], RuntimeError)

    async with await ObjectStore.open(schemas, 1, config=file_config) as store:
        assert await get_schema_version(store.get_model().engine) == 1


@pytest.mark.asyncio
async def test_older_version_is_rejected(schemas, file_config, errors):
    async with await ObjectStore.open(schemas, 2, config=file_config):
        pass

    store = ObjectStore(file_config)
    with pytest.raises(SchemaVersionError) as exc_info:
        await store.setup(schemas, 1, error_callback=errors.append)

    assert exc_info.value.kind is ErrorKind.SCHEMA_VERSION
    assert exc_info.value.stored == 2
    assert exc_info.value.requested == 1
    assert errors == [exc_info.value]


@pytest.mark.asyncio
async def test_async_migration_is_rejected(schemas, file_config):
    async with await ObjectStore.open(schemas, 1, config=file_config):
        pass

    async def migration(connection, old_version, new_version):
        pass

    store = ObjectStore(file_config)
    with pytest.raises(EngineWriteError, match="must be plain functions") as exc_info:
        await store.setup(schemas, 2, migration)
    assert isinstance(exc_info.value.cause, TypeError)
    assert store.is_setup is False

    async with await ObjectStore.open(schemas, 1, config=file_config) as store:
        assert await get_schema_version(store.get_model().engine) == 1
