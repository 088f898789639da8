# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from typing import NamedTuple, Optional

from pydantic import BaseModel

from crm_helpers.helpers.coerce import as_text, is_empty
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

SUFFIXES = {"jr", "sr", "ii", "iii", "iv", "v", "phd", "md", "esq", "dds"}


class ParsedName(NamedTuple):
    first: str
    last: str
    suffix: str


def parse_name(full_name: str) -> ParsedName:
    """Split a full name into first name, last name and a trailing suffix.

    A suffix is only recognized when at least two other parts remain, so
    "John V" keeps "V" as the last name.
    """
    parts = full_name.split()
    suffix = ""
    if len(parts) > 2 and parts[-1].lower().rstrip(".") in SUFFIXES:
        suffix = parts.pop()
    if not parts:
        return ParsedName("", "", suffix)
    return ParsedName(parts[0], " ".join(parts[1:]), suffix)


class NameParseItSettings(BaseModel):
    source_field: str
    first_name_field: str = "first_name"
    last_name_field: str = "last_name"
    suffix_field: Optional[str] = None


class NameParseIt(Helper):
    helper_name = "Name Parse It"
    helper_type = "name_parse_it"
    category = "contact"
    description = "Parse a full name into first, last, and suffix components"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "source_field": SchemaProperty(type="string", description="The field containing the full name"),
                "first_name_field": SchemaProperty(
                    type="string", description="Field to store parsed first name", default="first_name"
                ),
                "last_name_field": SchemaProperty(
                    type="string", description="Field to store parsed last name", default="last_name"
                ),
                "suffix_field": SchemaProperty(
                    type="string", description="Optional field to store parsed suffix (Jr, Sr, III, etc.)"
                ),
            },
            required=["source_field"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(NameParseItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            value = await connector.get_contact_field_value(input.contact_id, cfg.source_field)
        except Exception as e:
            self.fail(output, f"Failed to read field '{cfg.source_field}': {e}")

        if is_empty(value):
            output.success = True
            output.message = f"Field '{cfg.source_field}' is empty, nothing to parse"
            output.log(output.message)
            return output

        full_name = as_text(value).strip()
        parsed = parse_name(full_name)

        writes = [
            ("first name", cfg.first_name_field, parsed.first),
            ("last name", cfg.last_name_field, parsed.last),
        ]
        if cfg.suffix_field and parsed.suffix:
            writes.append(("suffix", cfg.suffix_field, parsed.suffix))

        for label, field, part in writes:
            try:
                await connector.set_contact_field_value(input.contact_id, field, part)
            except Exception as e:
                output.log(f"Failed to set {label} on '{field}': {e}")
                continue
            output.add_action(ActionType.FIELD_UPDATED, field, part)
            output.modified_data[field] = part

        output.success = bool(output.actions)
        output.message = f"Parsed name '{full_name}' into first='{parsed.first}', last='{parsed.last}'"
        if parsed.suffix:
            output.message += f", suffix='{parsed.suffix}'"
        if not output.success:
            output.message = f"Failed to store any part of name '{full_name}'"
        output.log(output.message)
        return output
