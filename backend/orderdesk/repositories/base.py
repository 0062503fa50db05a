"""
Base repository with common record-store operations.
Implements the Repository pattern over an Airtable table.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from orderdesk.core.errors import NotFoundError
from orderdesk.services.airtable_client import AirtableClient

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository providing common table operations.

    Subclasses set ``model`` (with a ``from_record`` constructor),
    ``entity`` (used in not-found messages) and resolve ``table``.
    """

    model: type[ModelType]
    entity: str = "Record"
    table: str

    def __init__(self, client: AirtableClient) -> None:
        self.client = client

    def _parse(self, record: dict[str, Any]) -> ModelType:
        return self.model.from_record(record)  # type: ignore[attr-defined]

    async def find(self, record_id: str) -> Optional[ModelType]:
        """Get a single record by its record id, or None."""
        record = await self.client.get_record(self.table, record_id)
        return self._parse(record) if record else None

    async def get(self, record_id: str) -> ModelType:
        """Get a single record by its record id or raise NotFoundError."""
        obj = await self.find(record_id)
        if obj is None:
            raise NotFoundError(self.entity, record_id)
        return obj

    async def select(
        self,
        formula: Optional[str] = None,
        *,
        max_records: Optional[int] = None,
    ) -> list[ModelType]:
        """Get every record matching an Airtable formula."""
        records = await self.client.list_records(
            self.table,
            filter_formula=formula,
            max_records=max_records,
        )
        return [self._parse(record) for record in records]

    async def update_fields(self, record_id: str, fields: dict[str, Any]) -> ModelType:
        """Write fields and return the entity re-read from the store."""
        await self.client.update_record(self.table, record_id, fields)
        return await self.get(record_id)
