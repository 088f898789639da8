# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import math
from collections.abc import Mapping
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

__all__ = [
    "ConfigSchema",
    "ConfigValidationError",
    "SchemaProperty",
    "SchemaType",
    "matches_type",
    "validate_against_schema",
]

SchemaType = Literal["string", "number", "integer", "boolean", "array", "object"]

_ARTICLES = {"integer": "an", "array": "an", "object": "an"}


class ConfigValidationError(ValueError):
    """Raised by config validation; identifies the offending field."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


class SchemaProperty(BaseModel):
    """
    Description of one accepted configuration property (JSON-Schema subset).
    """

    type: SchemaType
    description: Optional[str] = None
    enum: Optional[List[Any]] = None
    default: Any = None
    items: Optional["SchemaProperty"] = None
    properties: Optional[Dict[str, "SchemaProperty"]] = None
    required: Optional[List[str]] = None


class ConfigSchema(BaseModel):
    """
    Declarative description of a helper's configuration.

    Purely descriptive: it drives UI generation and `validate_against_schema`,
    and serializes to a minimal JSON Schema via `to_json_schema`.
    """

    type: Literal["object"] = "object"
    properties: Dict[str, SchemaProperty] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def to_json_schema(self) -> Dict[str, Any]:
        """Return the schema as a plain JSON-compatible dict."""
        return self.model_dump(mode="json", exclude_none=True)


def matches_type(value: Any, schema_type: str) -> bool:
    """Check a config value against a declared schema type.

    Booleans and non-finite floats never count as numbers. Integral floats
    (as produced by JSON decoders) are accepted for `integer`.
    """
    if schema_type == "string":
        return isinstance(value, str)
    if schema_type == "boolean":
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if schema_type == "number":
        return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))
    if schema_type == "integer":
        return isinstance(value, int) or (isinstance(value, float) and value.is_integer())
    if schema_type == "array":
        return isinstance(value, (list, tuple))
    if schema_type == "object":
        return isinstance(value, Mapping)
    return False


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _check_value(path: str, prop: SchemaProperty, value: Any) -> None:
    if not matches_type(value, prop.type):
        article = _ARTICLES.get(prop.type, "a")
        raise ConfigValidationError(path, f"{path} must be {article} {prop.type}")

    if prop.enum is not None and value not in prop.enum:
        allowed = ", ".join(str(v) for v in prop.enum)
        raise ConfigValidationError(path, f"invalid {path}: {value} (expected one of: {allowed})")

    if prop.type == "array" and prop.items is not None:
        for index, item in enumerate(value):
            _check_value(f"{path}[{index}]", prop.items, item)

    if prop.type == "object" and prop.properties is not None:
        _check_mapping(value, prop.properties, prop.required or [], prefix=f"{path}.")


def _check_mapping(
    config: Mapping[str, Any],
    properties: Dict[str, SchemaProperty],
    required: List[str],
    prefix: str = "",
) -> None:
    for name in required:
        path = f"{prefix}{name}"
        value = config.get(name)
        if _is_blank(value):
            raise ConfigValidationError(path, f"{path} is required")
        if isinstance(value, (list, tuple)) and not value:
            raise ConfigValidationError(path, f"{path} must contain at least one item")

    for name, prop in properties.items():
        value = config.get(name)
        if value is None:
            continue
        _check_value(f"{prefix}{name}", prop, value)


def validate_against_schema(schema: ConfigSchema, config: Any) -> None:
    """
    Validate a raw config mapping against a schema.

    Checks the required set (present, not blank, arrays not empty), declared
    types, enum membership, and array item / nested object shapes. Unknown keys
    are ignored.

    Raises:
        ConfigValidationError: On the first violation found.
    """
    if not isinstance(config, Mapping):
        raise ConfigValidationError("config", "config must be an object")
    _check_mapping(config, schema.properties, schema.required)
