"""Generic CRUD service.

Owns pagination math and the existence check that precedes every
mutation. Resource-specific rules are plugged in through ``ServiceHooks``
rather than subclass overrides.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from core.database import Base
from core.errors import NotFoundError
from core.logger import get_logger
from repositories.base import CrudRepository
from schemas import MAX_PAGE_LIMIT, PaginationMeta, PaginationParams

type FiltersHook = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]
type CreateHook = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]
type UpdateHook[E] = Callable[[dict[str, Any], E], Awaitable[dict[str, Any]]]


async def _same_filters(filters: dict[str, Any]) -> dict[str, Any]:
    return filters


async def _same_input(data: dict[str, Any]) -> dict[str, Any]:
    return data


async def _same_update(data: dict[str, Any], existing: Any) -> dict[str, Any]:
    return data


@dataclass(frozen=True)
class ServiceHooks[E]:
    """Per-resource injection points. Each defaults to identity.

    Hooks receive already-validated input and may add or transform fields.
    ``process_update_input`` also gets the pre-update entity so it can
    reject invalid transitions.
    """

    process_filters: FiltersHook = _same_filters
    process_create_input: CreateHook = _same_input
    process_update_input: UpdateHook[E] = _same_update


@dataclass(frozen=True)
class PaginatedResult[E]:
    data: list[E]
    pagination: PaginationMeta


def build_pagination(page: int, limit: int, total: int) -> PaginationMeta:
    """pages = ceil(total / limit); hasNext = page < pages; hasPrev = page > 1."""
    pages = (total + limit - 1) // limit
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


class CrudService[E: Base]:
    """Service for one resource, wrapping a ``CrudRepository``."""

    def __init__(
        self,
        repository: CrudRepository[E],
        *,
        resource_name: str,
        hooks: ServiceHooks[E] | None = None,
        logger: Any = None,
        max_limit: int = MAX_PAGE_LIMIT,
    ):
        self.repository = repository
        self.resource_name = resource_name
        self.hooks = hooks or ServiceHooks()
        self.logger = logger or get_logger(__name__)
        self.max_limit = max_limit

    async def find_all(
        self,
        filters: Mapping[str, Any] | None = None,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResult[E]:
        pagination = pagination or PaginationParams()
        page = pagination.page
        limit = min(pagination.limit, self.max_limit)
        offset = (page - 1) * limit

        processed = await self.hooks.process_filters(dict(filters or {}))

        # Both are reads of the same state; each uses its own session.
        data, total = await asyncio.gather(
            self.repository.find_many(processed, limit=limit, offset=offset),
            self.repository.count(processed),
        )

        return PaginatedResult(
            data=data, pagination=build_pagination(page, limit, total)
        )

    async def find_by_id(self, id: int) -> E | None:
        return await self.repository.find_by_id(id)

    async def find_by_id_or_fail(self, id: int) -> E:
        """Every mutation path goes through here first."""
        entity = await self.repository.find_by_id(id)
        if entity is None:
            raise NotFoundError(self.resource_name, id)
        return entity

    async def create(self, data: Mapping[str, Any]) -> E:
        processed = await self.hooks.process_create_input(dict(data))
        entity = await self.repository.create(processed)
        self.logger.info(
            "resource.created", resource=self.resource_name, id=entity.id
        )
        return entity

    async def update(self, id: int, data: Mapping[str, Any]) -> E:
        existing = await self.find_by_id_or_fail(id)
        processed = await self.hooks.process_update_input(dict(data), existing)
        entity = await self.repository.update(id, processed)
        self.logger.info(
            "resource.updated",
            resource=self.resource_name,
            id=id,
            fields=sorted(processed),
        )
        return entity

    async def delete(self, id: int) -> None:
        await self.find_by_id_or_fail(id)
        await self.repository.delete(id)
        self.logger.info("resource.deleted", resource=self.resource_name, id=id)

    async def exists(self, id: int) -> bool:
        return await self.repository.exists(id)
