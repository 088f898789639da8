# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from typing import Any

import mcp.types as types
from mcp.server import Server

from crm_helpers.config import AppConfig
from crm_helpers.executor import HelperExecutor
from crm_helpers.helpers import build_registry
from crm_helpers.interfaces import CRMConnector, ConnectorProvider
from crm_helpers.registry import HelperRegistry
from crm_helpers.types import ExecutionRequest, HelperInfo
from crm_helpers.utils.logger import logger


def tool_for_helper(info: HelperInfo) -> types.Tool:
    """Describe a helper as an MCP tool; its config schema nests under `config`."""
    return types.Tool(
        name=info.type,
        description=f"{info.name} ({info.category}): {info.description}",
        inputSchema={
            "type": "object",
            "properties": {
                "contact_id": {"type": "string", "description": "ID of the contact to run the helper against"},
                "connection_id": {"type": "string", "description": "CRM connection to use (default if omitted)"},
                "config": info.config_schema.to_json_schema(),
            },
            "required": ["contact_id", "config"],
        },
    )


class CRMHelperServer(Server):
    """The MCP Host that exposes every registered helper as a tool."""

    def __init__(
        self,
        config: AppConfig | None = None,
        registry: HelperRegistry | None = None,
        connector_provider: ConnectorProvider | None = None,
        name: str = "crm-helpers",
        version: str = "0.1.0",
    ) -> None:
        """Initialize the MCP Server.

        Args:
            config: Host configuration. Defaults to standard AppConfig.
            registry: Helper registry. Defaults to one built from `config`.
            connector_provider: Resolves CRM connections for tool calls.
            name: Name of the server. Defaults to "crm-helpers".
            version: Version of the server. Defaults to "0.1.0".
        """
        super().__init__(name)
        self.version = version

        self.config = config or AppConfig()
        self.registry = registry if registry is not None else build_registry(self.config)
        self.connector_provider = connector_provider
        self.executor = HelperExecutor(self.registry)
        self.tool_registry: dict[str, types.Tool] = {}

        self._load_tools()

        # Using type: ignore because mcp.server.Server decorators are not typed in a way mypy likes
        self.list_tools()(self._list_tools_handler)  # type: ignore[no-untyped-call]
        self.call_tool()(self._call_tool_handler)

        logger.info(f"Initialized {name} v{version} with {len(self.tool_registry)} helper tools")

    def _load_tools(self) -> None:
        """Build one tool per registered helper."""
        for info in self.registry.list_helper_info():
            self.tool_registry[info.type] = tool_for_helper(info)

    def _resolve_connector(self, connection_id: str | None) -> CRMConnector | None:
        if self.connector_provider is None:
            return None
        return self.connector_provider.get_connector(connection_id)

    async def _list_tools_handler(self) -> list[types.Tool]:
        """Handler for listing tools.

        Returns:
            A list of Tool objects, one per helper type.
        """
        return list(self.tool_registry.values())

    async def _call_tool_handler(
        self, name: str, arguments: dict[str, Any]
    ) -> list[types.TextContent | types.ImageContent | types.EmbeddedResource]:
        """Handler for calling tools.

        Args:
            name: The helper type to execute.
            arguments: `contact_id`, optional `connection_id`, and the helper `config`.

        Returns:
            A list containing the serialized ExecutionResult as text content.
        """
        if name not in self.tool_registry or not self.registry.is_registered(name):
            return [types.TextContent(type="text", text=f"Error: Helper '{name}' not found.")]

        arguments = arguments or {}
        connection_id = arguments.get("connection_id")
        try:
            connector = self._resolve_connector(connection_id)
        except Exception as e:
            logger.error(f"Failed to resolve CRM connection '{connection_id}' for helper '{name}': {e}")
            return [types.TextContent(type="text", text=f"Error: Could not resolve CRM connection - {e}")]

        config = arguments.get("config") or {}
        if not isinstance(config, dict):
            return [types.TextContent(type="text", text=f"Error: 'config' for helper '{name}' must be an object.")]

        request = ExecutionRequest(
            helper_type=name,
            contact_id=str(arguments.get("contact_id", "")),
            config=config,
            connection_id=connection_id,
        )
        result = await self.executor.execute(request, connector)
        return [types.TextContent(type="text", text=result.model_dump_json())]
