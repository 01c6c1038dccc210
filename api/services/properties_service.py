"""Property business rules plugged into the generic CRUD service."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.errors import ValidationError
from models import MAX_ID, Property, PropertyStatus
from repositories.property_repository import PropertyRepository
from services.base import CrudService, ServiceHooks

_CENT = Decimal("0.01")

_DECIMAL_FILTERS = ("min_price", "max_price")
_INT_FILTERS = ("min_bedrooms", "max_bedrooms", "min_surface", "owner_id", "agent_id")


def normalize_price(value: Any) -> Decimal:
    """Two-decimal price, rounding half up (``"1999.995"`` -> ``2000.00``)."""
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


async def process_property_filters(filters: dict[str, Any]) -> dict[str, Any]:
    """Coerce numeric filters one by one.

    A value that does not parse or that no column could hold is dropped
    on its own; the remaining filters still apply.
    """
    processed = dict(filters)

    for key in _DECIMAL_FILTERS:
        if key in processed:
            try:
                value = Decimal(str(processed[key]))
            except InvalidOperation:
                value = None
            if value is None or not value.is_finite():
                del processed[key]
            else:
                processed[key] = value

    for key in _INT_FILTERS:
        if key in processed:
            try:
                value = int(processed[key])
            except (TypeError, ValueError):
                value = None
            if value is None or abs(value) > MAX_ID:
                del processed[key]
            else:
                processed[key] = value

    return processed


async def process_property_create(data: dict[str, Any]) -> dict[str, Any]:
    if data.get("price") is not None:
        data["price"] = normalize_price(data["price"])
    return data


async def process_property_update(
    data: dict[str, Any], existing: Property
) -> dict[str, Any]:
    if (
        existing.status == PropertyStatus.SOLD
        and data.get("status") == PropertyStatus.AVAILABLE
    ):
        raise ValidationError(
            "status", "a sold property cannot be marked available again"
        )

    if data.get("price") is not None:
        data["price"] = normalize_price(data["price"])
    return data


PROPERTY_HOOKS: ServiceHooks[Property] = ServiceHooks(
    process_filters=process_property_filters,
    process_create_input=process_property_create,
    process_update_input=process_property_update,
)


def create_properties_service(
    repository: PropertyRepository, **kwargs: Any
) -> CrudService[Property]:
    return CrudService(
        repository, resource_name="Property", hooks=PROPERTY_HOOKS, **kwargs
    )
