"""Common test fixtures."""

from typing import AsyncGenerator, List

import pytest
import pytest_asyncio

from schema_store.config import StoreConfig
from schema_store.store import ObjectStore

SCHEMAS = [
    {
        "name": "User",
        "primary_key": "id",
        "properties": {
            "id": "int",
            "name": "string",
            "email": "string?",
            "age": "int?",
            "active": {"type": "bool", "default": True},
        },
    },
    {
        "name": "Task",
        "primary_key": "key",
        "properties": {
            "key": "string",
            "title": "string",
            "done": {"type": "bool", "default": False},
            "priority": "double?",
        },
    },
    {
        "name": "LogEntry",
        "properties": {"message": "string", "level": "string?"},
    },
]


@pytest.fixture
def schemas() -> List[dict]:
    return [dict(schema) for schema in SCHEMAS]


@pytest.fixture
def config() -> StoreConfig:
    """In-memory database config."""
    return StoreConfig(database_path=None, database_url=None, schema_version=1)


@pytest.fixture
def file_config(tmp_path) -> StoreConfig:
    """File-backed database config."""
    return StoreConfig(database_path=tmp_path / "store.db", database_url=None, schema_version=1)


@pytest.fixture
def errors() -> List[BaseException]:
    """Collects everything passed to the store's error callback."""
    return []


@pytest_asyncio.fixture
async def store(schemas, config, errors) -> AsyncGenerator[ObjectStore, None]:
    store = await ObjectStore.open(schemas, 1, error_callback=errors.append, config=config)
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sample_users(store: ObjectStore):
    return [
        await store.create_item("User", {"id": 1, "name": "Ann", "age": 31}),
        await store.create_item("User", {"id": 2, "name": "Bob", "email": "bob@example.com"}),
        await store.create_item("User", {"id": 3, "name": "O'Neil", "age": 31, "active": False}),
    ]
