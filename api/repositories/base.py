"""Generic CRUD repository over an async SQLAlchemy session factory.

Each operation opens its own short-lived session, so independent reads
(list + count) can run concurrently and every write commits on its own.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sqlalchemy import ColumnElement, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import Base
from core.errors import PersistenceError
from core.logger import get_logger
from models import utcnow
from repositories.utils import SLOW_QUERY_THRESHOLD_MS, repository_operation

type FilterBuilder = Callable[[Mapping[str, Any]], Iterable[ColumnElement[bool]]]


def no_filters(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    """Predicate builder for resources without list filters."""
    return []


class CrudRepository[ModelT: Base]:
    """Repository for one mapped model.

    ``build_filters`` turns a filter mapping into predicates; keys it does
    not recognise must be skipped. With ``soft_delete`` enabled every read
    hides rows whose ``deleted_at`` is set and ``delete`` only stamps it.
    Rows are returned in ascending ``id`` order.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        model: type[ModelT],
        *,
        build_filters: FilterBuilder = no_filters,
        soft_delete: bool = True,
        logger: Any = None,
        name: str | None = None,
        slow_query_threshold_ms: int = SLOW_QUERY_THRESHOLD_MS,
    ):
        self.session_maker = session_maker
        self.model = model
        self.build_filters = build_filters
        self.soft_delete = soft_delete
        self.logger = logger or get_logger(__name__)
        self.name = name or f"{model.__name__}Repository"
        self.slow_query_threshold_ms = slow_query_threshold_ms

    def _visible(self) -> list[ColumnElement[bool]]:
        if self.soft_delete:
            return [self.model.deleted_at.is_(None)]
        return []

    def _predicates(
        self, filters: Mapping[str, Any] | None
    ) -> list[ColumnElement[bool]]:
        return [*self.build_filters(filters or {}), *self._visible()]

    @repository_operation("find_many")
    async def find_many(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[ModelT]:
        """Visible rows matching ``filters``, windowed by limit/offset."""
        stmt = (
            select(self.model)
            .where(*self._predicates(filters))
            .order_by(self.model.id)
            .limit(limit)
            .offset(offset)
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    @repository_operation("find_by_id")
    async def find_by_id(self, id: int) -> ModelT | None:
        """Returns None for missing and soft-deleted rows."""
        stmt = select(self.model).where(self.model.id == id, *self._visible())
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    @repository_operation("find_one")
    async def find_one(
        self, *predicates: ColumnElement[bool], include_deleted: bool = False
    ) -> ModelT | None:
        """First row matching all ``predicates``, visible rows only by default."""
        visibility = [] if include_deleted else self._visible()
        stmt = (
            select(self.model)
            .where(*predicates, *visibility)
            .order_by(self.model.id)
            .limit(1)
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    @repository_operation("create")
    async def create(self, data: Mapping[str, Any]) -> ModelT:
        entity = self.model(**data)
        async with self.session_maker() as session, session.begin():
            session.add(entity)
        return entity

    @repository_operation("update")
    async def update(self, id: int, data: Mapping[str, Any]) -> ModelT:
        """Merge ``data`` into the row and refresh ``updated_at``.

        Existence is the caller's job. A row that vanished in between
        raises PersistenceError.
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**data, updated_at=utcnow())
            .returning(self.model)
        )
        async with self.session_maker() as session, session.begin():
            result = await session.execute(stmt)
            entity = result.scalar_one_or_none()

        if entity is None:
            self.logger.error(
                "repository.update.row_missing", repository=self.name, id=id
            )
            raise PersistenceError("update", self.name)
        return entity

    @repository_operation("delete")
    async def delete(self, id: int) -> None:
        if self.soft_delete:
            stmt = (
                update(self.model)
                .where(self.model.id == id)
                .values(deleted_at=utcnow())
            )
        else:
            stmt = delete(self.model).where(self.model.id == id)

        async with self.session_maker() as session, session.begin():
            await session.execute(stmt)

    @repository_operation("count")
    async def count(self, filters: Mapping[str, Any] | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(*self._predicates(filters))
        )
        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def exists(self, id: int) -> bool:
        return await self.find_by_id(id) is not None
