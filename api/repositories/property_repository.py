"""Property repository for database operations."""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import Property
from repositories.base import CrudRepository


def build_property_filters(filters: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    """Translate property list filters into predicates.

    ``city`` is a case-insensitive substring match; min/max keys are
    inclusive bounds. Unknown keys are ignored.
    """
    predicates: list[ColumnElement[bool]] = []

    if (city := filters.get("city")) is not None:
        predicates.append(Property.city.icontains(city, autoescape=True))
    if (property_type := filters.get("property_type")) is not None:
        predicates.append(Property.property_type == property_type)
    if (status := filters.get("status")) is not None:
        predicates.append(Property.status == status)
    if (min_price := filters.get("min_price")) is not None:
        predicates.append(Property.price >= min_price)
    if (max_price := filters.get("max_price")) is not None:
        predicates.append(Property.price <= max_price)
    if (min_bedrooms := filters.get("min_bedrooms")) is not None:
        predicates.append(Property.bedrooms >= min_bedrooms)
    if (max_bedrooms := filters.get("max_bedrooms")) is not None:
        predicates.append(Property.bedrooms <= max_bedrooms)
    if (min_surface := filters.get("min_surface")) is not None:
        predicates.append(Property.surface_area >= min_surface)
    if (owner_id := filters.get("owner_id")) is not None:
        predicates.append(Property.owner_id == owner_id)
    if (agent_id := filters.get("agent_id")) is not None:
        predicates.append(Property.agent_id == agent_id)

    return predicates


class PropertyRepository(CrudRepository[Property]):
    """Repository for Property database operations."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], **kwargs: Any):
        super().__init__(
            session_maker,
            Property,
            build_filters=build_property_filters,
            **kwargs,
        )
