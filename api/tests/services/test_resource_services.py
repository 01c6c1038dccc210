"""Unit tests for the resource-specific service hooks.

Covers:
- Property price normalisation, numeric filter coercion, sold -> available
- Client email uniqueness on create and update
- User password hashing and email uniqueness (including soft-deleted users)
- Document token generation, download and token rotation
"""

from datetime import timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from core.security import verify_password
from models import PropertyStatus, utcnow
from services.clients_service import create_clients_service
from services.documents_service import DocumentsService
from services.properties_service import (
    create_properties_service,
    normalize_price,
    process_property_filters,
)
from services.users_service import create_users_service

pytestmark = pytest.mark.unit


@pytest.fixture
def repository() -> AsyncMock:
    return AsyncMock()


# =============================================================================
# Properties
# =============================================================================


class TestNormalizePrice:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (250000, Decimal("250000.00")),
            ("1999.995", Decimal("2000.00")),
            (0.1, Decimal("0.10")),
            (Decimal("10.004"), Decimal("10.00")),
        ],
    )
    def test_two_decimals_half_up(self, value, expected):
        assert normalize_price(value) == expected
        assert normalize_price(value).as_tuple().exponent == -2


class TestPropertyFilters:
    async def test_numeric_values_coerced(self):
        processed = await process_property_filters(
            {"min_price": "1000.5", "min_bedrooms": "2", "city": "Madrid"}
        )

        assert processed == {
            "min_price": Decimal("1000.5"),
            "min_bedrooms": 2,
            "city": "Madrid",
        }

    async def test_unparseable_values_dropped(self):
        processed = await process_property_filters(
            {"max_price": "cheap", "agent_id": "bob"}
        )

        assert processed == {}

    async def test_bad_value_dropped_without_the_others(self):
        processed = await process_property_filters(
            {
                "min_price": "NaN",
                "max_price": "500000",
                "owner_id": "9" * 20,
                "min_bedrooms": "3",
                "city": "Madrid",
            }
        )

        assert processed == {
            "max_price": Decimal("500000"),
            "min_bedrooms": 3,
            "city": "Madrid",
        }

    @pytest.mark.parametrize("value", ["Infinity", "-inf", "sNaN"])
    async def test_non_finite_prices_dropped(self, value):
        assert await process_property_filters({"min_price": value}) == {}


class TestPropertiesService:
    async def test_create_normalizes_price(self, repository):
        repository.create.return_value = SimpleNamespace(id=1)
        service = create_properties_service(repository, logger=MagicMock())

        await service.create({"title": "Casa", "price": Decimal("99.999")})

        repository.create.assert_awaited_once_with(
            {"title": "Casa", "price": Decimal("100.00")}
        )

    async def test_sold_property_cannot_become_available(self, repository):
        repository.find_by_id.return_value = SimpleNamespace(
            id=4, status=PropertyStatus.SOLD
        )
        service = create_properties_service(repository, logger=MagicMock())

        with pytest.raises(ValidationError) as exc_info:
            await service.update(4, {"status": PropertyStatus.AVAILABLE})

        assert exc_info.value.field == "status"
        repository.update.assert_not_awaited()

    async def test_sold_property_can_change_other_fields(self, repository):
        repository.find_by_id.return_value = SimpleNamespace(
            id=4, status=PropertyStatus.SOLD
        )
        repository.update.return_value = SimpleNamespace(id=4)
        service = create_properties_service(repository, logger=MagicMock())

        await service.update(4, {"price": 10})

        repository.update.assert_awaited_once_with(4, {"price": Decimal("10.00")})


# =============================================================================
# Clients
# =============================================================================


class TestClientsService:
    async def test_duplicate_email_conflicts(self, repository):
        repository.find_by_email.return_value = SimpleNamespace(id=1)
        service = create_clients_service(repository, logger=MagicMock())

        with pytest.raises(ConflictError):
            await service.create({"full_name": "Ana", "email": "ana@example.com"})

        repository.create.assert_not_awaited()

    async def test_client_without_email_skips_check(self, repository):
        repository.create.return_value = SimpleNamespace(id=2)
        service = create_clients_service(repository, logger=MagicMock())

        await service.create({"full_name": "Ana", "email": None})

        repository.find_by_email.assert_not_awaited()

    async def test_unchanged_email_skips_check(self, repository):
        repository.find_by_id.return_value = SimpleNamespace(
            id=3, email="ana@example.com"
        )
        repository.update.return_value = SimpleNamespace(id=3)
        service = create_clients_service(repository, logger=MagicMock())

        await service.update(3, {"email": "ANA@example.com"})

        repository.find_by_email.assert_not_awaited()

    async def test_changed_email_taken_by_other(self, repository):
        repository.find_by_id.return_value = SimpleNamespace(
            id=3, email="ana@example.com"
        )
        repository.find_by_email.return_value = SimpleNamespace(id=8)
        service = create_clients_service(repository, logger=MagicMock())

        with pytest.raises(ConflictError):
            await service.update(3, {"email": "luis@example.com"})

        repository.update.assert_not_awaited()


# =============================================================================
# Users
# =============================================================================


class TestUsersService:
    async def test_password_replaced_by_hash(self, repository):
        repository.find_by_email.return_value = None
        repository.create.return_value = SimpleNamespace(id=1)
        service = create_users_service(
            repository, hash_iterations=1_000, logger=MagicMock()
        )

        await service.create(
            {"email": "eva@example.com", "password": "s3cret-pass", "full_name": "Eva"}
        )

        (data,), _ = repository.create.await_args
        assert "password" not in data
        assert verify_password("s3cret-pass", data["password_hash"])

    async def test_email_check_includes_deleted_users(self, repository):
        repository.find_by_email.return_value = SimpleNamespace(id=5)
        service = create_users_service(
            repository, hash_iterations=1_000, logger=MagicMock()
        )

        with pytest.raises(ConflictError):
            await service.create(
                {"email": "eva@example.com", "password": "x" * 8, "full_name": "Eva"}
            )

        repository.find_by_email.assert_awaited_once_with(
            "eva@example.com", include_deleted=True
        )

    async def test_update_without_password_keeps_hash(self, repository):
        repository.find_by_id.return_value = SimpleNamespace(
            id=2, email="eva@example.com"
        )
        repository.update.return_value = SimpleNamespace(id=2)
        service = create_users_service(
            repository, hash_iterations=1_000, logger=MagicMock()
        )

        await service.update(2, {"full_name": "Eva Maria"})

        repository.update.assert_awaited_once_with(2, {"full_name": "Eva Maria"})


# =============================================================================
# Documents
# =============================================================================


@pytest.fixture
def documents_service(repository) -> DocumentsService:
    return DocumentsService(repository, token_bytes=16, logger=MagicMock())


class TestDocumentsService:
    async def test_create_generates_token(self, documents_service, repository):
        repository.create.return_value = SimpleNamespace(id=1)

        await documents_service.create({"filename": "a.pdf", "access_token": None})

        (data,), _ = repository.create.await_args
        assert data["access_token"]

    async def test_create_keeps_supplied_token(self, documents_service, repository):
        repository.create.return_value = SimpleNamespace(id=1)

        await documents_service.create({"filename": "a.pdf", "access_token": "mine"})

        (data,), _ = repository.create.await_args
        assert data["access_token"] == "mine"

    async def test_download_unknown_token(self, documents_service, repository):
        repository.find_by_access_token.return_value = None

        with pytest.raises(NotFoundError):
            await documents_service.download_document("nope")

    async def test_download_expired_link(self, documents_service, repository):
        repository.find_by_access_token.return_value = SimpleNamespace(
            id=1, expires_at=utcnow() - timedelta(minutes=1)
        )

        with pytest.raises(ForbiddenError):
            await documents_service.download_document("old")

        repository.increment_download_count.assert_not_awaited()

    async def test_download_counts(self, documents_service, repository):
        repository.find_by_access_token.return_value = SimpleNamespace(
            id=1, expires_at=utcnow() + timedelta(days=1)
        )
        repository.increment_download_count.return_value = SimpleNamespace(
            id=1, download_count=1
        )

        document = await documents_service.download_document("live")

        repository.increment_download_count.assert_awaited_once_with(1)
        assert document.download_count == 1

    async def test_regenerate_missing_document(self, documents_service, repository):
        repository.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await documents_service.regenerate_access_token(3)

        repository.update.assert_not_awaited()

    async def test_regenerate_writes_new_token(self, documents_service, repository):
        repository.find_by_id.return_value = SimpleNamespace(id=3, access_token="old")
        repository.update.return_value = SimpleNamespace(id=3)

        await documents_service.regenerate_access_token(3)

        id, data = repository.update.await_args.args
        assert id == 3
        assert data["access_token"] != "old"
