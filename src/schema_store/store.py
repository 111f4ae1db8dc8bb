"""ObjectStore: schema-checked CRUD over one embedded SQLite database.

Typical use:

    store = await ObjectStore.open(
        [{"name": "User", "primary_key": "id", "properties": {"id": "int", "name": "string"}}],
        version=1,
    )
    user = await store.create_item("User", {"id": 1, "name": "Ann"})
    users = await store.get_items("User", {"id": 1})
    await store.delete_item(user)
    await store.close()

Every operation validates the type name against the schemas given to
setup(), runs its engine work in its own transaction, and on failure
notifies the error callback before raising a StoreError subclass.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Type, Union

from loguru import logger

from schema_store import db, migrations
from schema_store.config import StoreConfig
from schema_store.error_sink import ErrorCallback, ErrorSink
from schema_store.errors import (
    EngineQueryError,
    EngineWriteError,
    SchemaNotFoundError,
    StoreError,
)
from schema_store.migrations import Migration
from schema_store.registry import Record, SchemaRegistry
from schema_store.repository import Filter, RecordReader, TransactionalWriter, convert_filter
from schema_store.schemas import SchemaDefinition

SchemaInput = Union[SchemaDefinition, Dict[str, Any]]


class ObjectStore:
    """Facade over a single embedded database handle.

    Each instance owns its own engine, so several stores can live side by
    side in one process (useful for tests).
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or StoreConfig()
        self.error_sink = ErrorSink()
        self.registry: Optional[SchemaRegistry] = None
        self.handle: Optional[db.EngineHandle] = None
        self.writer: Optional[TransactionalWriter] = None
        self.reader: Optional[RecordReader] = None

    @classmethod
    async def open(
        cls,
        schemas: Iterable[SchemaInput],
        version: Optional[int] = None,
        migration: Optional[Migration] = None,
        error_callback: Optional[ErrorCallback] = None,
        *,
        config: Optional[StoreConfig] = None,
    ) -> "ObjectStore":
        """Create a store and run setup() on it."""
        store = cls(config)
        await store.setup(schemas, version, migration, error_callback)
        return store

    async def setup(
        self,
        schemas: Iterable[SchemaInput],
        version: Optional[int] = None,
        migration: Optional[Migration] = None,
        error_callback: Optional[ErrorCallback] = None,
    ) -> None:
        """Register schemas and open the database.

        Args:
            schemas: Schema definitions, as models or mappings
            version: Schema version, defaults to config.schema_version (1)
            migration: Called as migration(connection, old_version, new_version)
                when the stored version is lower than ``version``. Defaults to
                a no-op.
            error_callback: Called with every error an operation raises. When
                omitted, errors are logged.
        """
        if self.handle is not None:
            raise RuntimeError("ObjectStore is already set up")

        self.error_sink = ErrorSink(error_callback)
        registry = SchemaRegistry(schemas)
        version = version or self.config.schema_version

        logger.info(
            f"Opening object store with schemas {registry.schema_names} (version {version})"
        )
        handle: Optional[db.EngineHandle] = None
        try:
            with self._errors(EngineWriteError):
                handle = await db.open_engine_handle(self.config, registry.metadata)
                await migrations.ensure_schema_version(handle.engine, version, migration)
        except StoreError:
            if handle is not None:
                await handle.dispose()
            raise

        handle.models = dict(registry.models)
        self.registry = registry
        self.handle = handle
        self.writer = TransactionalWriter(handle.session_maker, registry, handle.lock)
        self.reader = RecordReader(handle.session_maker, registry, handle.lock)

    async def close(self) -> None:
        """Wait for pending error callbacks and dispose the engine."""
        await self.error_sink.drain()
        if self.handle is not None:
            await self.handle.dispose()
            self.handle = None
            logger.info("Object store closed")

    async def __aenter__(self) -> "ObjectStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_setup(self) -> bool:
        return self.handle is not None

    def _require_setup(self) -> None:
        if self.handle is None:
            raise RuntimeError("ObjectStore is not set up, call setup() first")

    @contextmanager
    def _errors(self, error_class: Type[StoreError]) -> Iterator[None]:
        """Route failures through the error sink, then raise them as StoreErrors."""
        try:
            yield
        except StoreError as e:
            self._notify(e)
            raise
        except Exception as e:
            self._notify(e)
            raise error_class.wrap(e) from e

    def _notify(self, error: BaseException) -> None:
        if isinstance(error, SchemaNotFoundError) and not self.config.notify_schema_errors:
            return
        self.error_sink.on_uncaught(error)

    async def create_item(self, type_name: str, value: Union[Mapping[str, Any], Any]) -> Record:
        """Create a new record of a registered schema."""
        self._require_setup()
        with self._errors(EngineWriteError):
            return await self.writer.create_item(type_name, value)

    async def update_item(self, type_name: str, value: Union[Mapping[str, Any], Any]) -> Record:
        """Create a record or merge ``value`` into the record with the same primary key."""
        self._require_setup()
        with self._errors(EngineWriteError):
            return await self.writer.update_item(type_name, value)

    async def delete_item(self, record: Union[Record, Iterable[Record]]) -> None:
        """Delete a record (or a list of records) previously returned by the store."""
        self._require_setup()
        with self._errors(EngineWriteError):
            await self.writer.delete_item(record)

    async def get_items(
        self, type_name: str, filter: Optional[Filter] = None
    ) -> Optional[List[Record]]:
        """Get records of a schema, narrowed by a predicate string or field mapping."""
        self._require_setup()
        with self._errors(EngineQueryError):
            return await self.reader.get_items(type_name, filter)

    async def count_items(self, type_name: str, filter: Optional[Filter] = None) -> int:
        self._require_setup()
        with self._errors(EngineQueryError):
            return await self.reader.count_items(type_name, filter)

    async def remove_all(self, type_name: Optional[str] = None) -> None:
        """Delete all records of one schema, or of every schema when none is given."""
        self._require_setup()
        with self._errors(EngineWriteError):
            await self.writer.remove_all(type_name)

    @staticmethod
    def convert_filter(filter: Filter) -> str:
        return convert_filter(filter)

    def check_schema(self, type_name: str) -> None:
        """Raise SchemaNotFoundError unless ``type_name`` was registered."""
        self._require_setup()
        self.registry.check_schema(type_name)

    async def get_all_keys(self) -> List[str]:
        """Registered schema names, in registration order."""
        self._require_setup()
        return self.registry.get_all_keys()

    def get_model(self) -> db.EngineHandle:
        """Return the underlying engine handle.

        Intended for queries the facade does not cover, such as joins or
        aggregates. Anything done through the handle skips schema checks and
        error reporting.
        """
        self._require_setup()
        return self.handle
