"""Document repository for database operations."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import PersistenceError
from models import Document
from repositories.base import CrudRepository
from repositories.utils import repository_operation


def build_document_filters(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = []

    if (category := filters.get("category")) is not None:
        predicates.append(Document.category == category)
    if (property_id := filters.get("property_id")) is not None:
        predicates.append(Document.property_id == property_id)
    if (client_id := filters.get("client_id")) is not None:
        predicates.append(Document.client_id == client_id)
    if (uploaded_by := filters.get("uploaded_by")) is not None:
        predicates.append(Document.uploaded_by == uploaded_by)
    if (is_public := filters.get("is_public")) is not None:
        predicates.append(Document.is_public.is_(is_public))

    return predicates


class DocumentRepository(CrudRepository[Document]):
    """Repository for Document database operations."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], **kwargs: Any):
        super().__init__(
            session_maker, Document, build_filters=build_document_filters, **kwargs
        )

    async def find_by_access_token(self, token: str) -> Document | None:
        return await self.find_one(Document.access_token == token)

    @repository_operation("increment_download_count")
    async def increment_download_count(self, id: int) -> Document:
        """Atomic ``download_count + 1``; does not touch ``updated_at``."""
        stmt = (
            update(Document)
            .where(Document.id == id)
            .values(download_count=Document.download_count + 1)
            .returning(Document)
        )
        async with self.session_maker() as session, session.begin():
            result = await session.execute(stmt)
            document = result.scalar_one_or_none()

        if document is None:
            raise PersistenceError("increment_download_count", self.name)
        return document
