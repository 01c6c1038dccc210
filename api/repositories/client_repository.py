"""Client repository for database operations."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import Client
from repositories.base import CrudRepository


def build_client_filters(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    predicates: list[ColumnElement[bool]] = []

    if (full_name := filters.get("full_name")) is not None:
        predicates.append(Client.full_name.icontains(full_name, autoescape=True))
    if (email := filters.get("email")) is not None:
        predicates.append(Client.email.icontains(email, autoescape=True))
    if (agent_id := filters.get("agent_id")) is not None:
        predicates.append(Client.agent_id == agent_id)
    if (status := filters.get("status")) is not None:
        predicates.append(Client.status == status)

    return predicates


class ClientRepository(CrudRepository[Client]):
    """Repository for Client database operations."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], **kwargs: Any):
        super().__init__(
            session_maker, Client, build_filters=build_client_filters, **kwargs
        )

    async def find_by_email(self, email: str) -> Client | None:
        """Case-insensitive exact match among visible clients."""
        return await self.find_one(func.lower(Client.email) == email.lower())
