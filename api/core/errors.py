"""Application error taxonomy.

Every error the CRUD layers raise on purpose is an ``AppError`` carrying an
explicit ``kind`` discriminant. Controllers match on ``kind`` instead of
walking the class hierarchy, so each kind maps to exactly one HTTP status
and application ``ErrorCode``.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Any


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"


class ErrorCode(IntEnum):
    """Application-level error codes rendered as ``error.code``.

    Independent from the HTTP status: a 400 may carry either
    VALIDATION_FAILED (body failed its schema) or INVALID_INPUT (bad path
    parameter).
    """

    VALIDATION_FAILED = 1000
    INVALID_INPUT = 1001
    AUTH_REQUIRED = 1100
    PERMISSION_DENIED = 1101
    RESOURCE_NOT_FOUND = 1200
    RESOURCE_CONFLICT = 1201
    DATABASE_ERROR = 1300
    INTERNAL_ERROR = 1500


class AppError(Exception):
    """Base class for expected application errors."""

    kind: ErrorKind

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        status_code: int,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(kind={self.kind.value!r}, "
            f"status_code={self.status_code}, message={self.message!r})"
        )


class ValidationError(AppError):
    """Input failed schema or business-rule validation."""

    def __init__(
        self, field: str, message: str, details: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            f"Validation failed for {field}: {message}",
            kind=ErrorKind.VALIDATION,
            status_code=400,
            code=ErrorCode.VALIDATION_FAILED,
            details={"field": field, **(details or {})},
        )
        self.field = field


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource", id: int | None = None) -> None:
        message = (
            f"{resource} not found"
            if id is None
            else f"{resource} with id {id} not found"
        )
        super().__init__(
            message,
            kind=ErrorKind.NOT_FOUND,
            status_code=404,
            code=ErrorCode.RESOURCE_NOT_FOUND,
        )
        self.resource = resource
        self.id = id


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            message,
            kind=ErrorKind.UNAUTHORIZED,
            status_code=401,
            code=ErrorCode.AUTH_REQUIRED,
        )


class ForbiddenError(AppError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(
            message,
            kind=ErrorKind.FORBIDDEN,
            status_code=403,
            code=ErrorCode.PERMISSION_DENIED,
        )


class ConflictError(AppError):
    """A unique business key (e.g. email) is already taken."""

    def __init__(self, resource: str, field: str, value: Any) -> None:
        super().__init__(
            f"{resource} with {field} '{value}' already exists",
            kind=ErrorKind.CONFLICT,
            status_code=409,
            code=ErrorCode.RESOURCE_CONFLICT,
            details={"field": field},
        )
        self.resource = resource
        self.field = field


class PersistenceError(AppError):
    """Storage adapter failure. The original exception is kept as __cause__."""

    def __init__(self, operation: str, repository: str) -> None:
        super().__init__(
            f"Database operation '{operation}' failed in {repository}",
            kind=ErrorKind.PERSISTENCE,
            status_code=500,
            code=ErrorCode.DATABASE_ERROR,
        )
        self.operation = operation
        self.repository = repository
