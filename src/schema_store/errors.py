"""Typed errors raised by the object store.

Every public ObjectStore operation raises a StoreError subclass. The
original exception is kept on ``cause`` (and chained as ``__cause__``) so
callers can branch on the error type or ``kind`` instead of matching
message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a store failure."""

    SCHEMA_NOT_FOUND = "schema_not_found"
    ENGINE_WRITE = "engine_write"
    ENGINE_QUERY = "engine_query"
    SCHEMA_VERSION = "schema_version"


class StoreError(Exception):
    """Base exception for all object store errors."""

    kind: ErrorKind = ErrorKind.ENGINE_WRITE

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    @classmethod
    def wrap(cls, error: BaseException) -> "StoreError":
        """Build an error of this class that keeps the message of ``error``."""
        if isinstance(error, StoreError):
            return error
        return cls(str(error) or error.__class__.__name__, cause=error)


class SchemaNotFoundError(StoreError):
    """Raised when a type name was not registered at setup."""

    kind = ErrorKind.SCHEMA_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Schema for {name} is not defined.")


class EngineWriteError(StoreError):
    """Raised when the engine rejects a create, update or delete."""

    kind = ErrorKind.ENGINE_WRITE


class EngineQueryError(StoreError):
    """Raised when filter translation or a lookup fails."""

    kind = ErrorKind.ENGINE_QUERY


class SchemaVersionError(StoreError):
    """Raised when the database holds a newer schema version than requested."""

    kind = ErrorKind.SCHEMA_VERSION

    def __init__(self, stored: int, requested: int):
        self.stored = stored
        self.requested = requested
        super().__init__(
            f"Database schema version {stored} is newer than requested version {requested}"
        )
