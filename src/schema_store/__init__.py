"""schema-store - schema-validated, transactional CRUD over an embedded SQLite database"""

from schema_store.config import StoreConfig
from schema_store.db import EngineHandle
from schema_store.errors import (
    EngineQueryError,
    EngineWriteError,
    ErrorKind,
    SchemaNotFoundError,
    SchemaVersionError,
    StoreError,
)
from schema_store.registry import Record, SchemaRegistry
from schema_store.repository import convert_filter
from schema_store.schemas import PropertySpec, SchemaDefinition
from schema_store.store import ObjectStore

__version__ = "0.1.0"

__all__ = [
    "EngineHandle",
    "EngineQueryError",
    "EngineWriteError",
    "ErrorKind",
    "ObjectStore",
    "PropertySpec",
    "Record",
    "SchemaDefinition",
    "SchemaNotFoundError",
    "SchemaRegistry",
    "SchemaVersionError",
    "StoreConfig",
    "StoreError",
    "convert_filter",
]
