# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from typing import Optional

from pydantic import BaseModel

from crm_helpers.helpers.coerce import as_text, is_empty
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

FORMATS = [
    "uppercase",
    "lowercase",
    "title_case",
    "trim",
    "trim_uppercase",
    "trim_lowercase",
    "trim_title_case",
]


def title_case(value: str) -> str:
    """Capitalize the first letter after whitespace, '-' or an apostrophe; lowercase the rest."""
    chars = []
    prev = " "
    for char in value:
        if prev.isspace() or prev in "-'":
            chars.append(char.upper())
        else:
            chars.append(char.lower())
        prev = char
    return "".join(chars)


def apply_format(value: str, fmt: str) -> str:
    if fmt.startswith("trim"):
        value = value.strip()
        fmt = fmt[len("trim_") :] if fmt != "trim" else ""
    if fmt == "uppercase":
        return value.upper()
    if fmt == "lowercase":
        return value.lower()
    if fmt == "title_case":
        return title_case(value)
    return value


class FormatItSettings(BaseModel):
    field: str
    format: str
    target_field: Optional[str] = None


class FormatIt(Helper):
    helper_name = "Format It"
    helper_type = "format_it"
    category = "data"
    description = "Format a contact field value (uppercase, lowercase, title case, trim, etc.)"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "field": SchemaProperty(type="string", description="The field key to format"),
                "format": SchemaProperty(type="string", enum=FORMATS, description="The format to apply"),
                "target_field": SchemaProperty(
                    type="string",
                    description="Optional: write result to a different field (defaults to same field)",
                ),
            },
            required=["field", "format"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(FormatItSettings, input.config)
        target_field = cfg.target_field or cfg.field
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            value = await connector.get_contact_field_value(input.contact_id, cfg.field)
        except Exception as e:
            self.fail(output, f"Failed to read field '{cfg.field}': {e}")

        if is_empty(value):
            output.success = True
            output.message = f"Field '{cfg.field}' is empty, nothing to format"
            output.log(output.message)
            return output

        original = as_text(value)
        formatted = apply_format(original, cfg.format)

        # An unchanged value only needs writing when it goes to another field.
        if formatted == original and target_field == cfg.field:
            output.success = True
            output.message = f"Field '{cfg.field}' already formatted correctly"
            output.log(output.message)
            return output

        try:
            await connector.set_contact_field_value(input.contact_id, target_field, formatted)
        except Exception as e:
            self.fail(output, f"Failed to update field '{target_field}': {e}")

        output.success = True
        output.message = f"Formatted '{cfg.field}' from '{original}' to '{formatted}'"
        output.add_action(ActionType.FIELD_UPDATED, target_field, formatted)
        output.modified_data = {target_field: formatted}
        output.log(f"Formatted field '{cfg.field}' ({cfg.format}): '{original}' -> '{formatted}'")
        return output
