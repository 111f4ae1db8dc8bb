"""Queries over the records of a schema."""

from typing import List, Optional

from loguru import logger
from sqlalchemy import TextClause, text

from schema_store.registry import Record
from schema_store.repository.filters import Filter, convert_filter
from schema_store.repository.repository import Repository


class RecordReader(Repository):
    """Read-only access to records, optionally narrowed by a filter."""

    def predicate(self, filter: Optional[Filter]) -> str:
        """Translate a filter; an empty result means no filtering."""
        if not filter:
            return ""
        return convert_filter(filter)

    @staticmethod
    def where_clause(predicate: str) -> TextClause:
        # colons are literal text here, not bind parameters
        return text(predicate.replace(":", r"\:"))

    async def get_items(
        self, type_name: str, filter: Optional[Filter] = None
    ) -> Optional[List[Record]]:
        """Get the records of a schema, all of them when no filter is given."""
        query = self.select(type_name)
        predicate = self.predicate(filter)
        if predicate:
            query = query.where(self.where_clause(predicate))
        logger.debug(f"Querying {type_name} where: {predicate or '<all>'}")

        result = await self.execute_query(query)
        records = result.scalars().all()
        if records is None:  # pragma: no cover
            return None
        return list(records)

    async def count_items(self, type_name: str, filter: Optional[Filter] = None) -> int:
        """Count the records of a schema matching an optional filter."""
        query = self.count(type_name)
        predicate = self.predicate(filter)
        if predicate:
            query = query.where(self.where_clause(predicate))

        result = await self.execute_query(query)
        return result.scalar_one()
