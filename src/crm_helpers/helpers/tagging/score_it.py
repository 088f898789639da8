# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from typing import List

from pydantic import BaseModel

from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput


class ScoreRule(BaseModel):
    tag_id: str
    has_tag: bool = True
    points: int = 0


class ScoreItSettings(BaseModel):
    rules: List[ScoreRule]
    target_field: str


class ScoreIt(Helper):
    helper_name = "Score It"
    helper_type = "score_it"
    category = "tagging"
    description = "Score contacts based on tag criteria and store the result"

    def get_config_schema(self) -> ConfigSchema:
        rule = SchemaProperty(
            type="object",
            properties={
                "tag_id": SchemaProperty(type="string"),
                "has_tag": SchemaProperty(type="boolean", default=True),
                "points": SchemaProperty(type="integer"),
            },
            required=["tag_id"],
        )
        return ConfigSchema(
            properties={
                "rules": SchemaProperty(
                    type="array", items=rule, description="Array of scoring rules: {tag_id, has_tag, points}"
                ),
                "target_field": SchemaProperty(type="string", description="The field to store the total score"),
            },
            required=["rules", "target_field"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(ScoreItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            contact = await connector.get_contact(input.contact_id)
        except Exception as e:
            self.fail(output, f"Failed to get contact '{input.contact_id}': {e}")

        held = {ref.id for ref in contact.tags}
        total = 0
        matched = 0
        for rule in cfg.rules:
            if (rule.tag_id in held) == rule.has_tag:
                total += rule.points
                matched += 1
                output.log(f"Rule matched: tag {rule.tag_id} (has_tag={rule.has_tag}), {rule.points:+d} points")

        score = str(total)
        try:
            await connector.set_contact_field_value(input.contact_id, cfg.target_field, score)
        except Exception as e:
            self.fail(output, f"Failed to set score field '{cfg.target_field}': {e}")

        output.success = True
        output.message = f"Scored contact: {total} points ({matched} of {len(cfg.rules)} rules matched)"
        output.add_action(ActionType.FIELD_UPDATED, cfg.target_field, score)
        output.modified_data = {cfg.target_field: score}
        output.log(f"Score for contact {input.contact_id}: {total} points, stored in '{cfg.target_field}'")
        return output
