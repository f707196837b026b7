"""Unit tests for schema definitions and the schema validator."""

import json

import pytest
from pydantic import ValidationError

from recordstore.core.errors import ValidationAppError
from recordstore.schemas.record_schema import (
    DEFAULT_SCHEMA,
    FieldSpec,
    SchemaDefinition,
    load_schema_definition,
)
from recordstore.services.schema_validator import SchemaValidator, validate_record


class TestDefaultSchema:
    """The default schema: id number, name string (min 3), age integer [18, 100]."""

    def test_valid_record_passes_unchanged(self, validator: SchemaValidator) -> None:
        record = {"id": 1, "name": "John", "age": 25}

        result = validator.validate(record)

        assert result is record
        assert record == {"id": 1, "name": "John", "age": 25}

    def test_name_too_short(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate({"id": 1, "name": "Jo", "age": 25})

        exc = exc_info.value
        assert exc.code == "validation_failed"
        assert exc.message.startswith("Validation Error:")
        assert "name" in exc.message
        assert [e["field"] for e in exc.details["errors"]] == ["name"]

    @pytest.mark.parametrize("age", [17, 101])
    def test_age_out_of_range(self, validator: SchemaValidator, age: int) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate({"id": 1, "name": "John", "age": age})

        assert exc_info.value.details["errors"][0]["field"] == "age"

    @pytest.mark.parametrize("age", [18, 100])
    def test_age_bounds_are_inclusive(self, validator: SchemaValidator, age: int) -> None:
        validator.validate({"id": 1, "name": "John", "age": age})

    def test_age_must_be_integer(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError):
            validator.validate({"id": 1, "name": "John", "age": 25.5})

    def test_integral_float_is_not_an_integer(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate({"id": 1, "name": "John", "age": 26.0})

        assert [e["field"] for e in exc_info.value.details["errors"]] == ["age"]

    def test_float_id_is_accepted(self, validator: SchemaValidator) -> None:
        validator.validate({"id": 2.5, "name": "John", "age": 25})

    @pytest.mark.parametrize("bad_id", ["1", True, None])
    def test_id_must_be_a_number(self, validator: SchemaValidator, bad_id) -> None:
        with pytest.raises(ValidationAppError):
            validator.validate({"id": bad_id, "name": "John", "age": 25})

    def test_strings_are_not_coerced(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError):
            validator.validate({"id": 1, "name": "John", "age": "25"})

    def test_missing_required_fields_are_all_reported(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate({"id": 1})

        fields = {e["field"] for e in exc_info.value.details["errors"]}
        assert fields == {"name", "age"}

    def test_unknown_fields_are_rejected(self, validator: SchemaValidator) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate({"id": 1, "name": "John", "age": 25, "email": "j@x.io"})

        assert exc_info.value.details["errors"][0]["field"] == "email"

    @pytest.mark.parametrize("record", [[1, 2], "record", 42, None])
    def test_non_object_record(self, validator: SchemaValidator, record) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            validator.validate(record)

        assert exc_info.value.code == "invalid_record"


class TestCustomSchemas:
    """Pluggable schema definitions."""

    def test_optional_field_may_be_missing(self) -> None:
        schema = SchemaDefinition(
            fields={
                "id": FieldSpec(type="integer"),
                "nickname": FieldSpec(type="string", required=False, max_length=5),
            }
        )

        validate_record({"id": 1}, schema)
        validate_record({"id": 1, "nickname": "Al"}, schema)
        with pytest.raises(ValidationAppError):
            validate_record({"id": 1, "nickname": "Alexander"}, schema)

    def test_allow_unknown_accepts_extra_fields(self) -> None:
        schema = SchemaDefinition(
            fields={"id": FieldSpec(type="number")},
            allow_unknown=True,
        )

        validate_record({"id": 1, "anything": {"nested": True}}, schema)

    def test_boolean_field_is_strict(self) -> None:
        schema = SchemaDefinition(
            fields={"id": FieldSpec(type="number"), "active": FieldSpec(type="boolean")}
        )

        validate_record({"id": 1, "active": False}, schema)
        with pytest.raises(ValidationAppError):
            validate_record({"id": 1, "active": 1}, schema)

    def test_field_names_that_shadow_model_attributes(self) -> None:
        schema = SchemaDefinition(
            fields={
                "id": FieldSpec(type="number"),
                "model_config": FieldSpec(type="string"),
                "json": FieldSpec(type="string"),
            }
        )

        validate_record({"id": 1, "model_config": "a", "json": "b"}, schema)


class TestSchemaDefinition:
    """Validation of the schema definitions themselves."""

    def test_id_field_is_mandatory(self) -> None:
        with pytest.raises(ValidationError):
            SchemaDefinition(fields={"name": FieldSpec(type="string")})

    def test_id_must_be_numeric(self) -> None:
        with pytest.raises(ValidationError):
            SchemaDefinition(fields={"id": FieldSpec(type="string")})

    def test_id_must_be_required(self) -> None:
        with pytest.raises(ValidationError):
            SchemaDefinition(fields={"id": FieldSpec(type="number", required=False)})

    def test_length_bounds_only_for_strings(self) -> None:
        with pytest.raises(ValidationError):
            FieldSpec(type="integer", min_length=3)

    def test_range_bounds_only_for_numbers(self) -> None:
        with pytest.raises(ValidationError):
            FieldSpec(type="string", minimum=1)

    def test_inverted_bounds(self) -> None:
        with pytest.raises(ValidationError):
            FieldSpec(type="integer", minimum=10, maximum=1)

    def test_load_default_when_no_path(self) -> None:
        assert load_schema_definition(None) is DEFAULT_SCHEMA

    def test_load_from_json_file(self, tmp_path) -> None:
        path = tmp_path / "schema.json"
        path.write_text(
            json.dumps(
                {
                    "fields": {
                        "id": {"type": "integer"},
                        "title": {"type": "string", "min_length": 1},
                    }
                }
            ),
            encoding="utf-8",
        )

        schema = load_schema_definition(path)

        assert set(schema.fields) == {"id", "title"}
        assert schema.fields["title"].min_length == 1
        assert schema.allow_unknown is False
