"""User repository for database operations."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, func, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import User
from repositories.base import CrudRepository


def build_user_filters(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    """``search`` matches either the name or the email."""
    predicates: list[ColumnElement[bool]] = []

    if (search := filters.get("search")) is not None:
        predicates.append(
            or_(
                User.full_name.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
            )
        )
    if (email := filters.get("email")) is not None:
        predicates.append(User.email.icontains(email, autoescape=True))
    if (role := filters.get("role")) is not None:
        predicates.append(User.role == role)
    if (full_name := filters.get("full_name")) is not None:
        predicates.append(User.full_name.icontains(full_name, autoescape=True))

    return predicates


class UserRepository(CrudRepository[User]):
    """Repository for User database operations."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], **kwargs: Any):
        super().__init__(session_maker, User, build_filters=build_user_filters, **kwargs)

    async def find_by_email(
        self, email: str, *, include_deleted: bool = False
    ) -> User | None:
        """Case-insensitive lookup.

        The unique constraint on email also covers soft-deleted rows, so
        uniqueness checks pass ``include_deleted=True``.
        """
        return await self.find_one(
            func.lower(User.email) == email.lower(), include_deleted=include_deleted
        )
