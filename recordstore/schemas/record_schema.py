"""Pydantic schemas describing a record schema definition.

A schema definition is declarative data (field name -> type + constraints),
so it can be loaded from a JSON file per deployment and interpreted by
``SchemaValidator``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

FieldType = Literal["string", "integer", "number", "boolean"]

NUMERIC_TYPES: frozenset[str] = frozenset({"integer", "number"})


class FieldSpec(BaseModel):
    """Type and constraints of a single record field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: FieldType = Field(..., description="JSON type of the field value.")
    required: bool = Field(
        default=True,
        description="Whether the field must be present on every record.",
    )
    min_length: int | None = Field(
        default=None, ge=0, description="Minimum string length (inclusive)."
    )
    max_length: int | None = Field(
        default=None, ge=0, description="Maximum string length (inclusive)."
    )
    minimum: float | None = Field(
        default=None, description="Minimum numeric value (inclusive)."
    )
    maximum: float | None = Field(
        default=None, description="Maximum numeric value (inclusive)."
    )

    @model_validator(mode="after")
    def _check_constraints(self) -> "FieldSpec":
        has_length = self.min_length is not None or self.max_length is not None
        has_range = self.minimum is not None or self.maximum is not None

        if has_length and self.type != "string":
            raise ValueError("min_length/max_length only apply to string fields")
        if has_range and self.type not in NUMERIC_TYPES:
            raise ValueError("minimum/maximum only apply to integer or number fields")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError("min_length must be <= max_length")
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError("minimum must be <= maximum")
        return self


class SchemaDefinition(BaseModel):
    """Declarative description of the records a store accepts.

    Every definition must declare a required numeric ``id`` field, since the
    store identifies records by it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    fields: dict[str, FieldSpec] = Field(
        ..., description="Field name to field specification."
    )
    allow_unknown: bool = Field(
        default=False,
        description="Accept fields that are not declared in 'fields'.",
    )

    @model_validator(mode="after")
    def _check_id_field(self) -> "SchemaDefinition":
        id_spec = self.fields.get("id")
        if id_spec is None:
            raise ValueError("schema must declare an 'id' field")
        if id_spec.type not in NUMERIC_TYPES:
            raise ValueError("'id' must be an integer or number field")
        if not id_spec.required:
            raise ValueError("'id' must be required")
        return self


DEFAULT_SCHEMA = SchemaDefinition(
    fields={
        "id": FieldSpec(type="number"),
        "name": FieldSpec(type="string", min_length=3),
        "age": FieldSpec(type="integer", minimum=18, maximum=100),
    }
)


def load_schema_definition(path: Path | None) -> SchemaDefinition:
    """Load a schema definition from a JSON file.

    Args:
        path: JSON file path, or None for the default people schema.

    Returns:
        Parsed schema definition.

    Raises:
        OSError: If the file cannot be read.
        pydantic.ValidationError: If the file content is not a valid definition.
    """
    if path is None:
        return DEFAULT_SCHEMA
    return SchemaDefinition.model_validate_json(Path(path).read_text(encoding="utf-8"))
