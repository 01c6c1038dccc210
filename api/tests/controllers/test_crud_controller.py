"""Unit tests for controllers.base.CrudController.

The service is an AsyncMock; the controller is exercised through
RequestContext objects, with no HTTP server involved.
"""

from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from controllers.base import CrudController, RequestContext, parse_id
from core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from schemas import (
    PaginationMeta,
    PropertyCreate,
    PropertyFilters,
    PropertyResponse,
    PropertyUpdate,
)
from services.base import PaginatedResult

pytestmark = pytest.mark.unit

NOW = datetime(2026, 1, 1, tzinfo=UTC)


def _property(id: int = 1, **overrides) -> SimpleNamespace:
    attrs = {
        "id": id,
        "title": "Piso centrico",
        "description": None,
        "address": "Calle Mayor 1",
        "city": "Madrid",
        "postal_code": None,
        "country": "España",
        "property_type": "apartment",
        "status": "available",
        "price": Decimal("250000.00"),
        "surface_area": 80,
        "bedrooms": 2,
        "bathrooms": 1,
        "garage": False,
        "garden": False,
        "owner_id": None,
        "agent_id": None,
        "created_at": NOW,
        "updated_at": NOW,
        "deleted_at": None,
    }
    attrs.update(overrides)
    return SimpleNamespace(**attrs)


VALID_BODY = {
    "title": "Piso centrico",
    "address": "Calle Mayor 1",
    "city": "Madrid",
    "propertyType": "apartment",
    "price": 250000,
}


@pytest.fixture
def service() -> AsyncMock:
    svc = AsyncMock()
    svc.resource_name = "Property"
    return svc


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def controller(service, logger) -> CrudController:
    return CrudController(
        service,
        create_schema=PropertyCreate,
        update_schema=PropertyUpdate,
        filters_schema=PropertyFilters,
        response_schema=PropertyResponse,
        logger=logger,
    )


class TestParseId:
    @pytest.mark.parametrize("value", ["1", "42", "007", "2147483647"])
    def test_positive_integers(self, value):
        assert parse_id(value) == int(value)

    @pytest.mark.parametrize(
        "value",
        [None, "", "0", "-1", "abc", "1.5", " 1", "1e3", "2147483648", "9" * 20],
    )
    def test_rejected(self, value):
        assert parse_id(value) is None


class TestInvalidId:
    @pytest.mark.parametrize("operation", ["find_by_id", "update", "delete"])
    async def test_service_not_called(self, controller, service, operation):
        ctx = RequestContext(path_params={"id": "abc"}, body={"title": "x"})

        response = await getattr(controller, operation)(ctx)

        assert response.status == 400
        assert response.body == {
            "success": False,
            "error": {
                "message": "Invalid ID parameter: must be a positive integer",
                "code": 1001,
            },
        }
        assert service.method_calls == []


class TestFindAll:
    async def test_envelope_with_pagination_and_request_id(self, controller, service):
        service.find_all.return_value = PaginatedResult(
            data=[_property(1), _property(2)],
            pagination=PaginationMeta(
                page=1, limit=10, total=2, pages=1, has_next=False, has_prev=False
            ),
        )

        response = await controller.find_all(RequestContext(request_id="req-9"))

        assert response.status == 200
        assert response.body["success"] is True
        assert [item["id"] for item in response.body["data"]] == [1, 2]
        assert response.body["meta"] == {
            "pagination": {
                "page": 1,
                "limit": 10,
                "total": 2,
                "pages": 1,
                "hasNext": False,
                "hasPrev": False,
            },
            "requestId": "req-9",
        }

    async def test_invalid_pagination_falls_back_to_defaults(
        self, controller, service
    ):
        service.find_all.return_value = PaginatedResult(
            data=[], pagination=PaginationMeta(
                page=1, limit=10, total=0, pages=0, has_next=False, has_prev=False
            )
        )

        await controller.find_all(
            RequestContext(query_params={"page": "3", "limit": "500"})
        )

        _, pagination = service.find_all.await_args.args
        assert (pagination.page, pagination.limit) == (1, 10)

    @pytest.mark.parametrize("page", ["2147483648", "99999999999999999999"])
    async def test_page_past_key_range_falls_back_to_defaults(
        self, controller, service, page
    ):
        service.find_all.return_value = PaginatedResult(
            data=[], pagination=PaginationMeta(
                page=1, limit=10, total=0, pages=0, has_next=False, has_prev=False
            )
        )

        await controller.find_all(
            RequestContext(query_params={"page": page, "limit": "100"})
        )

        _, pagination = service.find_all.await_args.args
        assert (pagination.page, pagination.limit) == (1, 10)

    async def test_filters_parsed_from_query(self, controller, service):
        service.find_all.return_value = PaginatedResult(
            data=[], pagination=PaginationMeta(
                page=2, limit=5, total=0, pages=0, has_next=False, has_prev=True
            )
        )

        await controller.find_all(
            RequestContext(
                query_params={
                    "page": "2",
                    "limit": "5",
                    "city": "Madrid",
                    "minPrice": "100000",
                    "colour": "blue",
                }
            )
        )

        filters, pagination = service.find_all.await_args.args
        assert filters == {"city": "Madrid", "min_price": "100000"}
        assert (pagination.page, pagination.limit) == (2, 5)

    async def test_invalid_filter_value_drops_all_filters(self, controller, service):
        service.find_all.return_value = PaginatedResult(
            data=[], pagination=PaginationMeta(
                page=1, limit=10, total=0, pages=0, has_next=False, has_prev=False
            )
        )

        await controller.find_all(
            RequestContext(query_params={"city": "Madrid", "status": "bogus"})
        )

        filters, _ = service.find_all.await_args.args
        assert filters == {}

    async def test_numeric_filters_passed_raw_to_service(self, controller, service):
        service.find_all.return_value = PaginatedResult(
            data=[], pagination=PaginationMeta(
                page=1, limit=10, total=0, pages=0, has_next=False, has_prev=False
            )
        )

        await controller.find_all(
            RequestContext(query_params={"city": "Madrid", "minBedrooms": "many"})
        )

        filters, _ = service.find_all.await_args.args
        assert filters == {"city": "Madrid", "min_bedrooms": "many"}

    async def test_persistence_failure_hides_message(self, controller, service):
        service.find_all.side_effect = PersistenceError("count", "PropertyRepository")

        response = await controller.find_all(RequestContext())

        assert response.status == 500
        assert response.body["error"] == {
            "message": "Failed to fetch propertys",
            "code": 1300,
        }


class TestFindById:
    async def test_found(self, controller, service):
        service.find_by_id.return_value = _property(5)

        response = await controller.find_by_id(
            RequestContext(path_params={"id": "5"}, request_id="r1")
        )

        assert response.status == 200
        data = response.body["data"]
        assert data["id"] == 5
        assert data["propertyType"] == "apartment"
        assert data["createdAt"] == "2026-01-01T00:00:00Z"
        assert response.body["meta"] == {"requestId": "r1"}

    async def test_missing(self, controller, service):
        service.find_by_id.return_value = None

        response = await controller.find_by_id(RequestContext(path_params={"id": "5"}))

        assert response.status == 404
        assert response.body["error"] == {"message": "Property not found", "code": 1200}


class TestCreate:
    async def test_created(self, controller, service):
        service.create.return_value = _property(3)

        response = await controller.create(RequestContext(body=VALID_BODY))

        assert response.status == 201
        assert response.body["data"]["id"] == 3
        (data,) = service.create.await_args.args
        assert data["property_type"] == "apartment"
        assert data["price"] == Decimal("250000")
        assert data["country"] == "España"

    async def test_validation_failure_short_circuits(self, controller, service):
        response = await controller.create(
            RequestContext(body={**VALID_BODY, "title": "ab"})
        )

        assert response.status == 400
        error = response.body["error"]
        assert error["code"] == 1000
        assert error["message"].startswith("Validation failed for title:")
        assert error["details"]["field"] == "title"
        assert error["details"]["errors"][0]["path"] == "title"
        service.create.assert_not_awaited()

    async def test_camel_case_path_reported(self, controller, service):
        body = {key: value for key, value in VALID_BODY.items() if key != "propertyType"}

        response = await controller.create(RequestContext(body=body))

        assert response.body["error"]["details"]["field"] == "propertyType"

    async def test_missing_body_is_validation_error(self, controller, service):
        response = await controller.create(RequestContext(body=None))

        assert response.status == 400
        assert response.body["error"]["details"]["field"] == "input"
        service.create.assert_not_awaited()


class TestUpdate:
    async def test_only_present_fields_forwarded(self, controller, service):
        service.update.return_value = _property(2, title="Nuevo titulo")

        response = await controller.update(
            RequestContext(path_params={"id": "2"}, body={"title": "Nuevo titulo"})
        )

        assert response.status == 200
        service.update.assert_awaited_once_with(2, {"title": "Nuevo titulo"})

    async def test_explicit_null_rejected(self, controller, service):
        response = await controller.update(
            RequestContext(path_params={"id": "2"}, body={"price": None})
        )

        assert response.status == 400
        service.update.assert_not_awaited()

    async def test_business_rule_violation(self, controller, service):
        service.update.side_effect = ValidationError(
            "status", "a sold property cannot be marked available again"
        )

        response = await controller.update(
            RequestContext(path_params={"id": "2"}, body={"status": "available"})
        )

        assert response.status == 400
        assert response.body["error"]["details"] == {"field": "status"}


class TestDelete:
    async def test_deleted_body(self, controller, service):
        response = await controller.delete(RequestContext(path_params={"id": "4"}))

        assert response.status == 200
        assert response.body["data"] == {"id": 4, "deleted": True}
        service.delete.assert_awaited_once_with(4)

    async def test_not_found(self, controller, service):
        service.delete.side_effect = NotFoundError("Property", 4)

        response = await controller.delete(RequestContext(path_params={"id": "4"}))

        assert response.status == 404
        assert response.body["error"] == {
            "message": "Property with id 4 not found",
            "code": 1200,
        }


class TestHandleError:
    @pytest.mark.parametrize(
        ("error", "status", "code"),
        [
            (ConflictError("Client", "email", "a@b.com"), 409, 1201),
            (ForbiddenError("Document link has expired"), 403, 1101),
            (NotFoundError("Client", 1), 404, 1200),
        ],
    )
    def test_client_errors_pass_through_without_details(
        self, controller, error, status, code
    ):
        response = controller.handle_error(error, RequestContext(), "fallback")

        assert response.status == status
        assert response.body["error"] == {"message": error.message, "code": code}

    def test_unexpected_error_logged_and_hidden(self, controller, logger):
        response = controller.handle_error(
            RuntimeError("secret connection string"),
            RequestContext(request_id="req-1"),
            "Failed to update property",
        )

        assert response.status == 500
        assert response.body["error"] == {
            "message": "Failed to update property",
            "code": 1500,
        }
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["request_id"] == "req-1"
