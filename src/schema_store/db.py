import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncGenerator, Dict, Type

from loguru import logger
from sqlalchemy import MetaData, event, text
from sqlalchemy.engine.interfaces import DBAPIConnection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_scoped_session,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import ConnectionPoolEntry, StaticPool

from schema_store.config import StoreConfig


@dataclass
class EngineHandle:
    """The open database owned by one ObjectStore.

    Exposed through ObjectStore.get_model() for queries the facade does not
    cover (joins, aggregates). Writes made through it bypass schema checks.
    """

    engine: AsyncEngine
    session_maker: async_sessionmaker[AsyncSession]
    metadata: MetaData
    models: Dict[str, Type] = field(default_factory=dict)
    # serializes the facade's transactions on this handle
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.debug(f"Disposed engine for: {self.engine.url}")


def get_scoped_session_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> async_scoped_session:
    """Create a scoped session factory scoped to current task."""
    return async_scoped_session(session_maker, scopefunc=asyncio.current_task)


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a scoped session that forms one write scope.

    Everything done on the session commits together when the block exits,
    and rolls back if the block raises.

    Args:
        session_maker: Session maker to create scoped sessions from
    """
    factory = get_scoped_session_factory(session_maker)
    session = factory()
    try:
        await session.execute(text("PRAGMA foreign_keys=ON"))
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await factory.remove()


def _sqlite_pragmas(config: StoreConfig):
    """Build a connect listener applying SQLite pragmas to new connections."""

    def on_connect(dbapi_connection: DBAPIConnection, connection_record: ConnectionPoolEntry):
        cursor = dbapi_connection.cursor()
        try:
            if config.wal_mode and not config.is_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(config.busy_timeout_ms)}")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA cache_size=-64000")
            cursor.execute("PRAGMA temp_store=MEMORY")
        finally:
            cursor.close()

    return on_connect


def create_engine(config: StoreConfig) -> AsyncEngine:
    """Create the async engine for the configured database."""
    db_url = config.db_url
    logger.debug(f"Creating engine for db_url: {db_url}")

    kwargs: Dict = {"echo": config.echo, "connect_args": {"check_same_thread": False}}
    if config.is_memory:
        # all sessions must share the single in-memory connection
        logger.info("Using in-memory SQLite database")
        kwargs["poolclass"] = StaticPool
    elif config.database_path is not None:
        config.database_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(db_url, **kwargs)
    event.listen(engine.sync_engine, "connect", _sqlite_pragmas(config))
    return engine


async def open_engine_handle(config: StoreConfig, metadata: MetaData) -> EngineHandle:
    """Open the database and create any tables missing from it."""
    engine = create_engine(config)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    except Exception as e:
        logger.error(f"Error creating tables for {config.db_url}: {e}")
        await engine.dispose()
        raise
    logger.info(f"Database tables created for: {config.db_url}")

    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return EngineHandle(engine=engine, session_maker=session_maker, metadata=metadata)


@asynccontextmanager
async def engine_session_factory(
    config: StoreConfig,
    metadata: MetaData,
) -> AsyncGenerator[EngineHandle, None]:
    """Open an engine handle and dispose it when the block exits.

    Note: This is primarily used for testing where we want a fresh database
    for each test.
    """
    handle = await open_engine_handle(config, metadata)
    try:
        yield handle
    finally:
        await handle.dispose()
