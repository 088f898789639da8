# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from crm_helpers.interfaces import CRMConnector, Helper, HelperInput
from crm_helpers.schema import ConfigSchema, ConfigValidationError, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

MODES = ["specific", "all", "prefix", "category"]


async def tag_categories(connector: CRMConnector) -> Dict[str, str]:
    """Map tag id to category from the CRM's tag definitions."""
    return {tag.id: tag.category for tag in await connector.get_tags()}


class ClearTagsSettings(BaseModel):
    mode: str
    tag_ids: List[str] = Field(default_factory=list)
    prefix: Optional[str] = None
    category: Optional[str] = None


class ClearTags(Helper):
    """Removes tags chosen by id, name prefix, category, or all of them."""

    helper_name = "Clear Tags"
    helper_type = "clear_tags"
    category = "tagging"
    description = "Remove tags from a contact by IDs, category, or all"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "mode": SchemaProperty(type="string", enum=MODES, description="How to select tags to remove"),
                "tag_ids": SchemaProperty(
                    type="array",
                    items=SchemaProperty(type="string"),
                    description="Specific tag IDs to remove (for 'specific' mode)",
                ),
                "prefix": SchemaProperty(
                    type="string", description="Remove tags whose name starts with this prefix (for 'prefix' mode)"
                ),
                "category": SchemaProperty(
                    type="string", description="Remove tags in this category (for 'category' mode)"
                ),
            },
            required=["mode"],
        )

    def check_config(self, config: Mapping[str, Any]) -> None:
        mode = config["mode"]
        if mode == "specific" and not config.get("tag_ids"):
            raise ConfigValidationError("tag_ids", "tag_ids must contain at least one tag for 'specific' mode")
        if mode in ("prefix", "category") and not config.get(mode):
            raise ConfigValidationError(mode, f"{mode} is required for '{mode}' mode")

    async def _select(self, connector: CRMConnector, input: HelperInput, cfg: ClearTagsSettings) -> List[str]:
        if cfg.mode == "specific":
            return list(cfg.tag_ids)
        contact = await connector.get_contact(input.contact_id)
        if cfg.mode == "all":
            return [ref.id for ref in contact.tags]
        if cfg.mode == "prefix":
            prefix = cfg.prefix or ""
            return [ref.id for ref in contact.tags if ref.name.startswith(prefix)]
        categories = await tag_categories(connector)
        return [ref.id for ref in contact.tags if categories.get(ref.id) == cfg.category]

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(ClearTagsSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            to_remove = await self._select(connector, input, cfg)
        except Exception as e:
            self.fail(output, f"Failed to load tags for contact '{input.contact_id}': {e}")

        if not to_remove:
            output.success = True
            output.message = "No matching tags to remove"
            output.log(output.message)
            return output

        removed = []
        for tag_id in to_remove:
            try:
                await connector.remove_tag(input.contact_id, tag_id)
            except Exception as e:
                output.log(f"Failed to remove tag {tag_id}: {e}")
                continue
            output.add_action(ActionType.TAG_REMOVED, input.contact_id, tag_id)
            removed.append(tag_id)

        output.success = bool(removed)
        output.message = f"Removed {len(removed)} of {len(to_remove)} tag(s) ({cfg.mode} mode)"
        output.modified_data = {"tags_removed": removed}
        output.log(output.message)
        return output
