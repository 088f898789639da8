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

from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput


class TriggerItSettings(BaseModel):
    automation_id: str


class TriggerIt(Helper):
    helper_name = "Trigger It"
    helper_type = "trigger_it"
    category = "automation"
    description = "Trigger a CRM automation or sequence for a contact"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "automation_id": SchemaProperty(type="string", description="The automation/sequence ID to trigger"),
            },
            required=["automation_id"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(TriggerItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            await connector.trigger_automation(input.contact_id, cfg.automation_id)
        except Exception as e:
            self.fail(output, f"Failed to trigger automation {cfg.automation_id}: {e}")

        output.success = True
        output.message = f"Triggered automation {cfg.automation_id} for contact {input.contact_id}"
        output.add_action(ActionType.AUTOMATION_TRIGGERED, input.contact_id, cfg.automation_id)
        output.modified_data = {"automation_id": cfg.automation_id}
        output.log(output.message)
        return output
