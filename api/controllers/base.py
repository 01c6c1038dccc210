"""Framework-neutral CRUD controller.

A controller takes a ``RequestContext`` (path params, query params, JSON
body, request id) and returns a ``ControllerResponse`` (status + envelope
body). The HTTP binding in ``routes.crud_routes`` only converts between
those and FastAPI objects.

The controller is the only layer that maps errors to HTTP and the only
place where error detail is withheld from the client.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, assert_never

from pydantic import BaseModel

from controllers.validation import SchemaValidator
from core.database import Base
from core.errors import AppError, ErrorCode, ErrorKind, ValidationError
from core.logger import get_logger
from core.responses import api_error, api_response
from models import MAX_ID
from schemas import PaginationParams
from services.base import CrudService

_ID_RE = re.compile(r"^\d+$")


@dataclass
class RequestContext:
    path_params: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    request_id: str | None = None


@dataclass(frozen=True)
class ControllerResponse:
    status: int
    body: dict[str, Any]


def parse_id(value: str | None) -> int | None:
    """Positive integer path id within the key range, or None."""
    if value is None or not _ID_RE.match(value):
        return None
    id = int(value)
    return id if 1 <= id <= MAX_ID else None


class CrudController[E: Base]:
    """Binds the five CRUD operations of one resource.

    Entities are rendered through ``response_schema`` (camelCase,
    ``from_attributes``), which also decides which columns are exposed.
    """

    def __init__(
        self,
        service: CrudService[E],
        *,
        create_schema: type[BaseModel],
        update_schema: type[BaseModel],
        filters_schema: type[BaseModel],
        response_schema: type[BaseModel],
        resource_name: str | None = None,
        name: str | None = None,
        logger: Any = None,
        default_limit: int = 10,
    ):
        self.service = service
        self.create_validator = SchemaValidator(create_schema)
        self.update_validator = SchemaValidator(update_schema)
        self.filters_validator = SchemaValidator(filters_schema)
        self.response_schema = response_schema
        self.resource_name = resource_name or service.resource_name
        self.name = name or f"{self.resource_name}Controller"
        self.logger = logger or get_logger(__name__)
        self.default_limit = default_limit

    # =========================================================================
    # Operations
    # =========================================================================

    async def find_all(self, ctx: RequestContext) -> ControllerResponse:
        plural = f"{self.resource_name.lower()}s"
        try:
            pagination = self.parse_pagination(ctx.query_params)
            filters = self.parse_filters(ctx.query_params)
            result = await self.service.find_all(filters, pagination)
            return ControllerResponse(
                200,
                api_response(
                    [self.serialize(entity) for entity in result.data],
                    {
                        "pagination": result.pagination.model_dump(by_alias=True),
                        "requestId": ctx.request_id,
                    },
                ),
            )
        except Exception as e:
            return self.handle_error(e, ctx, f"Failed to fetch {plural}")

    async def find_by_id(self, ctx: RequestContext) -> ControllerResponse:
        id = parse_id(ctx.path_params.get("id"))
        if id is None:
            return self.invalid_id()

        try:
            entity = await self.service.find_by_id(id)
            if entity is None:
                return ControllerResponse(
                    404,
                    api_error(
                        f"{self.resource_name} not found",
                        ErrorCode.RESOURCE_NOT_FOUND,
                    ),
                )
            return self.ok(entity, ctx)
        except Exception as e:
            return self.handle_error(
                e, ctx, f"Failed to fetch {self.resource_name.lower()}"
            )

    async def create(self, ctx: RequestContext) -> ControllerResponse:
        try:
            data = self.validate_input(self.create_validator, ctx.body)
            entity = await self.service.create(data.model_dump())
            return self.ok(entity, ctx, status=201)
        except Exception as e:
            return self.handle_error(
                e, ctx, f"Failed to create {self.resource_name.lower()}"
            )

    async def update(self, ctx: RequestContext) -> ControllerResponse:
        id = parse_id(ctx.path_params.get("id"))
        if id is None:
            return self.invalid_id()

        try:
            data = self.validate_input(self.update_validator, ctx.body)
            entity = await self.service.update(id, data.model_dump(exclude_unset=True))
            return self.ok(entity, ctx)
        except Exception as e:
            return self.handle_error(
                e, ctx, f"Failed to update {self.resource_name.lower()}"
            )

    async def delete(self, ctx: RequestContext) -> ControllerResponse:
        id = parse_id(ctx.path_params.get("id"))
        if id is None:
            return self.invalid_id()

        try:
            await self.service.delete(id)
            return ControllerResponse(
                200,
                api_response({"id": id, "deleted": True}, {"requestId": ctx.request_id}),
            )
        except Exception as e:
            return self.handle_error(
                e, ctx, f"Failed to delete {self.resource_name.lower()}"
            )

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse_pagination(self, query: Mapping[str, str]) -> PaginationParams:
        """Any invalid page or limit resets both to defaults."""
        raw = {
            "page": query.get("page", 1),
            "limit": query.get("limit", self.default_limit),
        }
        try:
            return PaginationParams.model_validate(raw)
        except ValueError:
            return PaginationParams(page=1, limit=self.default_limit)

    def parse_filters(self, query: Mapping[str, str]) -> dict[str, Any]:
        """Known filter keys only; empty when the filter schema rejects the query."""
        result = self.filters_validator.validate(dict(query))
        if not result.success:
            return {}
        return result.data.model_dump(exclude_none=True)

    def validate_input(self, validator: SchemaValidator, payload: Any) -> BaseModel:
        result = validator.validate(payload)
        if not result.success:
            issue = result.error
            raise ValidationError(
                issue.field_path, issue.message, {"errors": issue.errors}
            )
        return result.data

    # =========================================================================
    # Responses
    # =========================================================================

    def serialize(self, entity: E) -> dict[str, Any]:
        return self.response_schema.model_validate(entity).model_dump(
            mode="json", by_alias=True
        )

    def ok(
        self, entity: E, ctx: RequestContext, status: int = 200
    ) -> ControllerResponse:
        return ControllerResponse(
            status, api_response(self.serialize(entity), {"requestId": ctx.request_id})
        )

    def invalid_id(self) -> ControllerResponse:
        return ControllerResponse(
            400,
            api_error(
                "Invalid ID parameter: must be a positive integer",
                ErrorCode.INVALID_INPUT,
            ),
        )

    def handle_error(
        self, error: Exception, ctx: RequestContext, default_message: str
    ) -> ControllerResponse:
        """Map any exception to an error envelope.

        Application errors keep their own status and code. Persistence and
        unrecognised errors are logged and answered with ``default_message``.
        """
        if not isinstance(error, AppError):
            self.logger.error(
                "controller.error.unhandled",
                controller=self.name,
                error=str(error),
                error_type=type(error).__name__,
                request_id=ctx.request_id,
                exc_info=error,
            )
            return ControllerResponse(
                500, api_error(default_message, ErrorCode.INTERNAL_ERROR)
            )

        match error.kind:
            case ErrorKind.VALIDATION:
                return ControllerResponse(
                    400, api_error(error.message, error.code, error.details)
                )
            case (
                ErrorKind.NOT_FOUND
                | ErrorKind.UNAUTHORIZED
                | ErrorKind.FORBIDDEN
                | ErrorKind.CONFLICT
            ):
                return ControllerResponse(
                    error.status_code, api_error(error.message, error.code)
                )
            case ErrorKind.PERSISTENCE:
                self.logger.error(
                    "controller.error.server",
                    controller=self.name,
                    error=error.message,
                    code=int(error.code),
                    request_id=ctx.request_id,
                )
                return ControllerResponse(
                    500, api_error(default_message, ErrorCode.DATABASE_ERROR)
                )
            case _:
                assert_never(error.kind)
