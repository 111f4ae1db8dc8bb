"""Transactional create, update and delete of records."""

from typing import Any, Iterable, List, Mapping, Optional, Type, Union

from loguru import logger
from sqlalchemy import delete, inspect
from sqlalchemy.ext.asyncio import AsyncSession

from schema_store.registry import Record
from schema_store.repository.repository import Repository


class TransactionalWriter(Repository):
    """Runs every mutation inside a single write scope.

    A scope commits when the operation succeeds and rolls back entirely when
    the engine raises part way through.
    """

    async def create_item(self, type_name: str, value: Union[Mapping[str, Any], Any]) -> Record:
        """Create a new record of ``type_name`` from ``value``.

        A duplicate primary key is left to the engine, which rejects it with
        an integrity error.
        """
        model = self.model(type_name)
        data = self.as_dict(value)

        async with self.transaction() as session:
            item = model(**data)
            session.add(item)
            await session.flush()
            await session.refresh(item)
            logger.debug(f"Created {type_name}: {item!r}")
            return item

    async def update_item(self, type_name: str, value: Union[Mapping[str, Any], Any]) -> Record:
        """Create a record, or merge ``value`` into the one with the same primary key.

        Only fields present in ``value`` are written; the others keep their
        stored values.
        """
        model = self.model(type_name)
        primary_key = self.registry.primary_key(type_name)
        if primary_key is None:
            raise ValueError(f"{type_name} does not have a primary key and cannot be updated")
        data = self.as_dict(value)

        async with self.transaction() as session:
            existing = None
            if data.get(primary_key) is not None:
                existing = await session.get(model, data[primary_key])

            if existing is None:
                item = model(**data)
                session.add(item)
            else:
                self._merge(existing, data)
                item = existing

            await session.flush()
            await session.refresh(item)
            logger.debug(f"Updated {type_name}: {item!r}")
            return item

    async def delete_item(self, record: Union[Record, Iterable[Record]]) -> None:
        """Delete a record, or every record of a list, in one transaction."""
        records: List[Record] = (
            list(record) if isinstance(record, (list, tuple, set)) else [record]
        )

        async with self.transaction() as session:
            for item in records:
                await self._delete_record(session, item)
        logger.debug(f"Deleted {len(records)} record(s)")

    async def remove_all(self, type_name: Optional[str] = None) -> None:
        """Delete every record of ``type_name``, or of every registered schema.

        Without a type name each schema is cleared in its own transaction, in
        registration order. An empty name also means every schema. A failure
        stops the loop but does not roll back schemas that were already cleared.
        """
        if type_name:
            model = self.model(type_name)
            async with self.transaction() as session:
                await self._delete_all(session, model)
            return

        for name in self.registry.get_all_keys():
            model = self.model(name)
            async with self.transaction() as session:
                result = await session.execute(self.count(name))
                if result.scalar_one():
                    await self._delete_all(session, model)

    @staticmethod
    def _merge(existing: Record, data: Mapping[str, Any]) -> None:
        properties = existing.__schema__.properties
        for key, value in data.items():
            if key not in properties:
                raise TypeError(
                    f"{key!r} is an invalid keyword argument for {type(existing).__name__}"
                )
            setattr(existing, key, value)

    async def _delete_record(self, session: AsyncSession, item: Record) -> None:
        self.registry.name_for(item)
        identity = inspect(item).identity
        if identity is None:
            raise ValueError(f"Cannot delete {type(item).__name__} record that was never saved")

        persistent = await session.get(type(item), identity)
        if persistent is None:
            raise ValueError(f"{type(item).__name__} record {identity} no longer exists")
        await session.delete(persistent)

    async def _delete_all(self, session: AsyncSession, model: Type[Record]) -> None:
        result = await session.execute(delete(model))
        logger.debug(f"Removed {result.rowcount} {model.__name__} record(s)")
