# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import re
from datetime import datetime
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from crm_helpers.crm import NormalizedContact
from crm_helpers.helpers.coerce import as_text
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

MERGE_FIELD = re.compile(r"@(\w+)")


def merge_values(contact: NormalizedContact) -> Dict[str, str]:
    """Values available to @Field merge tokens, standard names first."""
    values = {key: as_text(value) for key, value in contact.custom_fields.items()}
    values.update(
        {
            "FirstName": contact.first_name,
            "LastName": contact.last_name,
            "Email": contact.email,
            "Phone1": contact.phone,
            "Company": contact.company,
            "JobTitle": contact.job_title,
            "Id": contact.id,
        }
    )
    return values


def expand_date_macros(template: str, now: datetime) -> str:
    now_str = now.strftime("%Y-%m-%d %H:%M:%S")
    today_str = now.strftime("%Y-%m-%d")
    text = template.replace("@date_now", now_str).replace("@date_today", today_str)
    keyword = text.replace('"', "").strip().lower()
    if keyword == "now":
        return now_str
    if keyword == "today":
        return today_str
    return text


class DefaultToFieldSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    default_value: str = Field(alias="default")
    to_field: str


class DefaultToField(Helper):
    """Writes a static value, date macro or merge-field template into a field.

    Unknown `@tokens` are left as typed.
    """

    helper_name = "Default To Field"
    helper_type = "default_to_field"
    category = "contact"
    description = "Set a default or computed value into a contact field with support for date macros and merge fields"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "default": SchemaProperty(
                    type="string",
                    description=(
                        "The default value to set. Supports @field_name merge fields and date macros: "
                        "'now', 'today', @date_now, @date_today"
                    ),
                ),
                "to_field": SchemaProperty(type="string", description="The target field key to write the value into"),
            },
            required=["default", "to_field"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(DefaultToFieldSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        value = expand_date_macros(cfg.default_value, datetime.now())

        if "@" in value:
            try:
                contact = await connector.get_contact(input.contact_id)
            except Exception as e:
                output.log(f"Warning: could not fetch contact for merge fields: {e}")
            else:
                known = merge_values(contact)

                def substitute(match: "re.Match[str]") -> str:
                    return known.get(match.group(1), match.group(0))

                value = MERGE_FIELD.sub(substitute, value)

        if not value:
            output.success = True
            output.message = "Default value resolved to empty, nothing to set"
            output.log(output.message)
            return output

        try:
            await connector.set_contact_field_value(input.contact_id, cfg.to_field, value)
        except Exception as e:
            self.fail(output, f"Failed to set field '{cfg.to_field}': {e}")

        output.success = True
        output.message = f"Set field '{cfg.to_field}' to default value"
        output.add_action(ActionType.FIELD_UPDATED, cfg.to_field, value)
        output.modified_data = {cfg.to_field: value}
        output.log(f"Set field '{cfg.to_field}' to '{value}' on contact {input.contact_id}")
        return output
