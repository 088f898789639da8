# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import json

import pytest

from crm_helpers.schema import (
    ConfigSchema,
    ConfigValidationError,
    SchemaProperty,
    matches_type,
    validate_against_schema,
)


@pytest.fixture
def schema() -> ConfigSchema:
    return ConfigSchema(
        properties={
            "field": SchemaProperty(type="string", description="Field to read"),
            "mode": SchemaProperty(type="string", enum=["a", "b"], default="a"),
            "count": SchemaProperty(type="integer"),
            "ratio": SchemaProperty(type="number"),
            "enabled": SchemaProperty(type="boolean", default=True),
            "tags": SchemaProperty(type="array", items=SchemaProperty(type="string")),
            "rules": SchemaProperty(
                type="array",
                items=SchemaProperty(
                    type="object",
                    properties={"tag_id": SchemaProperty(type="string")},
                    required=["tag_id"],
                ),
            ),
        },
        required=["field", "tags"],
    )


def test_valid_config_passes(schema: ConfigSchema) -> None:
    """A config with correctly typed values validates."""
    validate_against_schema(
        schema,
        {"field": "email", "tags": ["x"], "mode": "b", "count": 3, "ratio": 0.5, "enabled": False},
    )


def test_missing_required_field_is_named(schema: ConfigSchema) -> None:
    """The error identifies the missing field."""
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_against_schema(schema, {"tags": ["x"]})
    assert exc_info.value.field == "field"
    assert str(exc_info.value) == "field is required"


def test_blank_required_string_rejected(schema: ConfigSchema) -> None:
    """Whitespace-only strings count as missing."""
    with pytest.raises(ConfigValidationError, match="field is required"):
        validate_against_schema(schema, {"field": "   ", "tags": ["x"]})


def test_empty_required_array_rejected(schema: ConfigSchema) -> None:
    """Required arrays need at least one item."""
    with pytest.raises(ConfigValidationError, match="tags must contain at least one item"):
        validate_against_schema(schema, {"field": "email", "tags": []})


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("field", 12, "field must be a string"),
        ("count", "3", "count must be an integer"),
        ("count", 2.5, "count must be an integer"),
        ("ratio", True, "ratio must be a number"),
        ("ratio", float("inf"), "ratio must be a number"),
        ("ratio", float("nan"), "ratio must be a number"),
        ("enabled", "yes", "enabled must be a boolean"),
        ("tags", "x", "tags must be an array"),
    ],
)
def test_type_mismatch_rejected(schema: ConfigSchema, key: str, value: object, message: str) -> None:
    """Declared types are enforced with a field-specific message."""
    config = {"field": "email", "tags": ["x"], key: value}
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_against_schema(schema, config)
    assert str(exc_info.value) == message
    assert exc_info.value.field == key


def test_enum_violation_lists_allowed_values(schema: ConfigSchema) -> None:
    with pytest.raises(ConfigValidationError, match=r"invalid mode: c \(expected one of: a, b\)"):
        validate_against_schema(schema, {"field": "email", "tags": ["x"], "mode": "c"})


def test_array_item_types_checked(schema: ConfigSchema) -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_against_schema(schema, {"field": "email", "tags": ["x", 5]})
    assert exc_info.value.field == "tags[1]"


def test_nested_object_required_checked(schema: ConfigSchema) -> None:
    """Objects inside arrays have their own required set."""
    with pytest.raises(ConfigValidationError) as exc_info:
        validate_against_schema(schema, {"field": "email", "tags": ["x"], "rules": [{"points": 3}]})
    assert exc_info.value.field == "rules[0].tag_id"


def test_unknown_keys_ignored(schema: ConfigSchema) -> None:
    validate_against_schema(schema, {"field": "email", "tags": ["x"], "something_else": object()})


def test_non_mapping_config_rejected(schema: ConfigSchema) -> None:
    with pytest.raises(ConfigValidationError, match="config must be an object"):
        validate_against_schema(schema, ["field"])


def test_integral_float_counts_as_integer() -> None:
    """JSON decoders may hand integers over as floats."""
    assert matches_type(3.0, "integer")
    assert not matches_type(True, "integer")
    assert not matches_type(None, "string")


def test_json_round_trip_is_lossless(schema: ConfigSchema) -> None:
    """The schema survives serialization to JSON text and back."""
    text = json.dumps(schema.to_json_schema())
    restored = ConfigSchema.model_validate(json.loads(text))
    assert restored == schema


def test_json_schema_omits_unset_keys() -> None:
    schema = ConfigSchema(properties={"field": SchemaProperty(type="string")}, required=["field"])
    assert schema.to_json_schema() == {
        "type": "object",
        "properties": {"field": {"type": "string"}},
        "required": ["field"],
    }
