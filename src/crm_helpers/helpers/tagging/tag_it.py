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


class TagItSettings(BaseModel):
    action: str
    tag_ids: List[str]


class TagIt(Helper):
    """Applies or removes a list of tags.

    Each tag is attempted independently; the run succeeds if at least one
    tag operation went through.
    """

    helper_name = "Tag It"
    helper_type = "tag_it"
    category = "tagging"
    description = "Apply or remove tags from a contact"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "action": SchemaProperty(
                    type="string", enum=["apply", "remove"], description="Whether to apply or remove the tags"
                ),
                "tag_ids": SchemaProperty(
                    type="array",
                    items=SchemaProperty(type="string"),
                    description="List of tag IDs to apply or remove",
                ),
            },
            required=["action", "tag_ids"],
        )

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(TagItSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)
        applying = cfg.action == "apply"
        action_type = ActionType.TAG_APPLIED if applying else ActionType.TAG_REMOVED
        verb = "applied" if applying else "removed"

        changed = []
        for tag_id in cfg.tag_ids:
            try:
                if applying:
                    await connector.apply_tag(input.contact_id, tag_id)
                else:
                    await connector.remove_tag(input.contact_id, tag_id)
            except Exception as e:
                output.log(f"Failed to {cfg.action} tag {tag_id}: {e}")
                continue
            output.add_action(action_type, input.contact_id, tag_id)
            changed.append(tag_id)
            output.log(f"Tag {tag_id} {verb} on contact {input.contact_id}")

        output.success = bool(changed)
        if output.success:
            output.message = f"Successfully {verb} {len(changed)} tag(s)"
            output.modified_data = {f"tags_{verb}": changed}
        else:
            output.message = f"Failed to {cfg.action} any tags"
        return output
