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

DEFAULT_INTEGRATION = "mfh"


class GoalItSettings(BaseModel):
    goal_name: str
    integration: str = DEFAULT_INTEGRATION


class GoalIt(Helper):
    """Achieves a campaign API goal for the contact (Keap only)."""

    helper_name = "Goal It"
    helper_type = "goal_it"
    category = "automation"
    description = "Achieve a campaign goal for a contact"
    supported_platforms = ["keap"]

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "goal_name": SchemaProperty(type="string", description="The API goal call name to achieve"),
                "integration": SchemaProperty(
                    type="string",
                    description="The integration name the goal is registered under",
                    default=DEFAULT_INTEGRATION,
                ),
            },
            required=["goal_name"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(GoalItSettings, input.config)
        integration = cfg.integration or DEFAULT_INTEGRATION
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            await connector.achieve_goal(input.contact_id, cfg.goal_name, integration)
        except Exception as e:
            output.log(f"Goal '{cfg.goal_name}' ({integration}) failed for contact {input.contact_id}: {e}")
            self.fail(output, f"Failed to achieve goal {cfg.goal_name}: {e}")

        output.success = True
        output.message = f"Achieved goal {cfg.goal_name} for contact {input.contact_id}"
        output.add_action(ActionType.GOAL_ACHIEVED, input.contact_id, cfg.goal_name)
        output.modified_data = {"goal_name": cfg.goal_name, "integration": integration}
        output.log(f"Goal '{cfg.goal_name}' achieved via integration '{integration}' for contact {input.contact_id}")
        return output
