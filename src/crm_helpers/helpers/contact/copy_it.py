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

from crm_helpers.helpers.coerce import is_empty
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput


class CopyItSettings(BaseModel):
    source_field: str
    target_field: str
    overwrite: bool = True


class CopyIt(Helper):
    """Copies one field's raw value into another field."""

    helper_name = "Copy It"
    helper_type = "copy_it"
    category = "contact"
    description = "Copy a field value from one field to another on a contact"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "source_field": SchemaProperty(type="string", description="The field key to copy from"),
                "target_field": SchemaProperty(type="string", description="The field key to copy to"),
                "overwrite": SchemaProperty(
                    type="boolean", description="Whether to overwrite existing target field value", default=True
                ),
            },
            required=["source_field", "target_field"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(CopyItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            value = await connector.get_contact_field_value(input.contact_id, cfg.source_field)
        except Exception as e:
            self.fail(output, f"Failed to read source field '{cfg.source_field}': {e}")

        if is_empty(value):
            output.success = True
            output.message = f"Source field '{cfg.source_field}' is empty, nothing to copy"
            output.log(output.message)
            return output

        if not cfg.overwrite:
            try:
                existing = await connector.get_contact_field_value(input.contact_id, cfg.target_field)
            except Exception as e:
                output.log(f"Could not read target field '{cfg.target_field}': {e}")
                existing = None
            if not is_empty(existing):
                output.success = True
                output.message = f"Target field '{cfg.target_field}' already has a value, skipping (overwrite=false)"
                output.log(output.message)
                return output

        try:
            await connector.set_contact_field_value(input.contact_id, cfg.target_field, value)
        except Exception as e:
            self.fail(output, f"Failed to write to target field '{cfg.target_field}': {e}")

        output.success = True
        output.message = f"Copied '{cfg.source_field}' to '{cfg.target_field}'"
        output.add_action(ActionType.FIELD_UPDATED, cfg.target_field, value)
        output.modified_data = {cfg.target_field: value}
        output.log(f"Copied value from '{cfg.source_field}' to '{cfg.target_field}' on contact {input.contact_id}")
        return output
