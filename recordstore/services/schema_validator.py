"""Schema validation for candidate records.

The declarative ``SchemaDefinition`` is compiled once into a strict pydantic
model. Validation never mutates the record and has no side effects; it
either returns the record as given or raises ``ValidationAppError`` listing
every violated constraint.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from recordstore.core.errors import FieldErrorDetail, ValidationAppError
from recordstore.schemas.record_schema import NUMERIC_TYPES, FieldSpec, SchemaDefinition

logger = logging.getLogger(__name__)

_PYTHON_TYPES: dict[str, type] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
}


def _build_field(name: str, spec: FieldSpec) -> tuple[type, Any]:
    """Translate a FieldSpec into a pydantic (annotation, FieldInfo) pair.

    Record field names are arbitrary, so they are bound through aliases
    instead of attribute names.
    """
    constraints: dict[str, Any] = {}
    if spec.type == "string":
        constraints.update(min_length=spec.min_length, max_length=spec.max_length)
    elif spec.type in NUMERIC_TYPES:
        constraints.update(ge=spec.minimum, le=spec.maximum)
    if spec.type == "number":
        constraints["allow_inf_nan"] = False

    field_info = Field(
        ... if spec.required else None,
        alias=name,
        strict=True,
        **constraints,
    )
    return _PYTHON_TYPES[spec.type], field_info


def compile_schema(schema: SchemaDefinition) -> type[BaseModel]:
    """Compile a schema definition into a pydantic model class."""
    fields = {
        f"field_{index}": _build_field(name, spec)
        for index, (name, spec) in enumerate(schema.fields.items())
    }
    return create_model(
        "Record",
        __config__=ConfigDict(extra="allow" if schema.allow_unknown else "forbid"),
        **fields,
    )


def _format_errors(exc: ValidationError) -> list[FieldErrorDetail]:
    errors: list[FieldErrorDetail] = []
    for error in exc.errors(include_url=False):
        field = ".".join(str(part) for part in error["loc"]) or "record"
        errors.append({"field": field, "message": error["msg"]})
    return errors


class SchemaValidator:
    """Validate records against one schema definition.

    Attributes:
        schema: The declarative definition this validator enforces.
    """

    def __init__(self, schema: SchemaDefinition) -> None:
        self.schema = schema
        self._model = compile_schema(schema)

    def validate(self, record: Any) -> dict[str, Any]:
        """Check every constraint of the schema against ``record``.

        Args:
            record: Candidate record (expected to be a JSON object).

        Returns:
            The record, unchanged.

        Raises:
            ValidationAppError: If the record is not an object or any
                constraint fails. All failures are reported together.
        """
        if not isinstance(record, dict):
            raise ValidationAppError(
                code="invalid_record",
                message="Validation Error: record must be a JSON object",
            )

        try:
            self._model.model_validate(record)
        except ValidationError as exc:
            errors = _format_errors(exc)
            summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
            logger.debug(
                "schema.validation_failed",
                extra={
                    "error_count": len(errors),
                    "fields": [e["field"] for e in errors],
                },
            )
            raise ValidationAppError(
                code="validation_failed",
                message=f"Validation Error: {summary}",
                details={"errors": errors},
            ) from exc

        return record


def validate_record(record: Any, schema: SchemaDefinition) -> dict[str, Any]:
    """Validate ``record`` against ``schema`` without keeping a validator."""
    return SchemaValidator(schema).validate(record)
