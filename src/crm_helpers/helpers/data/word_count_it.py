# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from pydantic import BaseModel

from crm_helpers.helpers.coerce import as_text
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput


class WordCountItSettings(BaseModel):
    source_field: str
    target_field: str
    count_type: str


class WordCountIt(Helper):
    helper_name = "Word Count It"
    helper_type = "word_count_it"
    category = "data"
    description = "Count words or characters in a field and store the count"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "source_field": SchemaProperty(type="string", description="The field to count words/characters in"),
                "target_field": SchemaProperty(type="string", description="The field to store the count"),
                "count_type": SchemaProperty(
                    type="string",
                    enum=["words", "characters"],
                    description="Whether to count words or characters",
                ),
            },
            required=["source_field", "target_field", "count_type"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(WordCountItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            value = await connector.get_contact_field_value(input.contact_id, cfg.source_field)
        except Exception as e:
            self.fail(output, f"Failed to read field '{cfg.source_field}': {e}")

        text = as_text(value)
        count = len(text.split()) if cfg.count_type == "words" else len(text)
        count_str = str(count)

        try:
            await connector.set_contact_field_value(input.contact_id, cfg.target_field, count_str)
        except Exception as e:
            self.fail(output, f"Failed to set count field '{cfg.target_field}': {e}")

        output.success = True
        output.message = f"Counted {count} {cfg.count_type} in '{cfg.source_field}'"
        output.add_action(ActionType.FIELD_UPDATED, cfg.target_field, count_str)
        output.modified_data = {cfg.target_field: count_str}
        output.log(
            f"Counted {count} {cfg.count_type} in field '{cfg.source_field}', "
            f"stored in '{cfg.target_field}' on contact {input.contact_id}"
        )
        return output
