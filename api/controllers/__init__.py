"""HTTP-facing controllers, independent of the web framework."""

from controllers.base import (
    ControllerResponse,
    CrudController,
    RequestContext,
    parse_id,
)
from controllers.documents import DocumentsController
from controllers.validation import SchemaValidator, ValidationResult

__all__ = [
    "ControllerResponse",
    "CrudController",
    "DocumentsController",
    "RequestContext",
    "SchemaValidator",
    "ValidationResult",
    "parse_id",
]
