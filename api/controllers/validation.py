"""Schema validation wrapper used by controllers.

Turns pydantic's exception-based validation into a result object so the
controller can decide how a failure is reported.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError


@dataclass(frozen=True)
class ValidationIssue:
    field_path: str
    message: str
    errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ValidationResult[T]:
    success: bool
    data: T | None = None
    error: ValidationIssue | None = None


class SchemaValidator[T: BaseModel]:
    def __init__(self, schema: type[T]):
        self.schema = schema

    def validate(self, payload: Any) -> ValidationResult[T]:
        """Validate ``payload``; on failure report the first offending field.

        Field paths use wire (camelCase) names joined with ``.``; errors not
        tied to a field report ``input``.
        """
        try:
            data = self.schema.model_validate(payload)
        except PydanticValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            first = errors[0]
            path = ".".join(str(part) for part in first["loc"]) or "input"
            return ValidationResult(
                success=False,
                error=ValidationIssue(
                    field_path=path,
                    message=first["msg"],
                    errors=[
                        {
                            "path": ".".join(str(p) for p in err["loc"]) or "input",
                            "message": err["msg"],
                            "type": err["type"],
                        }
                        for err in errors
                    ],
                ),
            )
        return ValidationResult(success=True, data=data)
