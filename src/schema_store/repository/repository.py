"""Base repository shared by the writer and reader."""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Mapping, Optional, Type

from sqlalchemy import Executable, Result, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from schema_store import db
from schema_store.registry import Record, SchemaRegistry


class Repository:
    """Access to the records of every registered schema through one session maker.

    Repositories sharing a lock never interleave their transactions, even
    though the driver suspends while a transaction is open.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        registry: SchemaRegistry,
        lock: Optional[asyncio.Lock] = None,
    ):
        self.session_maker = session_maker
        self.registry = registry
        self.lock = lock or asyncio.Lock()

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """One write scope: commits on exit, rolls back if the block raises."""
        async with self.lock:
            async with db.scoped_session(self.session_maker) as session:
                yield session

    def model(self, type_name: str) -> Type[Record]:
        """Resolve the mapped class for a schema name, validating it is registered."""
        return self.registry.model(type_name)

    def select(self, type_name: str):
        """Select records of a schema in insertion order."""
        return select(self.model(type_name)).order_by(literal_column("rowid"))

    def count(self, type_name: str):
        return select(func.count()).select_from(self.model(type_name))

    async def execute_query(self, query: Executable) -> Result[Any]:
        """Execute a query in its own transaction."""
        async with self.transaction() as session:
            return await session.execute(query)

    @staticmethod
    def as_dict(value: Any) -> Dict[str, Any]:
        """Accept a mapping or a pydantic model as record data."""
        if isinstance(value, Mapping):
            return dict(value)
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump()
        raise TypeError(f"Record value must be a mapping, got {type(value).__name__}")
