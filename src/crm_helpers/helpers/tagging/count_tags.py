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

from crm_helpers.helpers.tagging.clear_tags import tag_categories
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput


class CountTagsSettings(BaseModel):
    target_field: str
    category: Optional[str] = None


class CountTags(Helper):
    helper_name = "Count Tags"
    helper_type = "count_tags"
    category = "tagging"
    description = "Count tags on a contact and store the count in a field"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "target_field": SchemaProperty(type="string", description="The field to store the tag count"),
                "category": SchemaProperty(type="string", description="Optional: only count tags in this category"),
            },
            required=["target_field"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(CountTagsSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            contact = await connector.get_contact(input.contact_id)
            if cfg.category:
                categories = await tag_categories(connector)
                count = sum(1 for ref in contact.tags if categories.get(ref.id) == cfg.category)
            else:
                count = len(contact.tags)
        except Exception as e:
            self.fail(output, f"Failed to load tags for contact '{input.contact_id}': {e}")

        count_str = str(count)
        try:
            await connector.set_contact_field_value(input.contact_id, cfg.target_field, count_str)
        except Exception as e:
            self.fail(output, f"Failed to set count field '{cfg.target_field}': {e}")

        output.success = True
        if cfg.category:
            output.message = f"Counted {count} tags in category '{cfg.category}'"
        else:
            output.message = f"Counted {count} total tags"
        output.add_action(ActionType.FIELD_UPDATED, cfg.target_field, count_str)
        output.modified_data = {cfg.target_field: count_str}
        output.log(
            f"Tag count for contact {input.contact_id}: {count} "
            f"(category: {cfg.category or 'any'}), stored in '{cfg.target_field}'"
        )
        return output
