# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import asyncio
import importlib
import os
from pathlib import Path

from mcp.server.stdio import stdio_server

from crm_helpers.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from crm_helpers.interfaces import ConnectorProvider
from crm_helpers.memory import InMemoryConnector, SingleConnectorProvider
from crm_helpers.server import CRMHelperServer
from crm_helpers.utils.logger import logger


def resolve_config() -> AppConfig:
    """Load the configured YAML file, or fall back to defaults when none exists."""
    config_path = Path(os.getenv("CRM_HELPERS_CONFIG_PATH", DEFAULT_CONFIG_PATH))
    if not config_path.exists():
        logger.info(f"No configuration at {config_path}, using defaults")
        return AppConfig()
    return load_config(config_path)


def resolve_connector_provider(config: AppConfig) -> ConnectorProvider:
    """
    Build the ConnectorProvider named by `config.connector_provider`.

    The setting is an import path such as ``my_crm.providers:build``; the
    attribute is called with no arguments. Without it the host runs as a demo
    against an empty in-memory CRM, so every contact lookup fails.

    Raises:
        ImportError: If the module cannot be imported.
        AttributeError: If the module has no such attribute.
        TypeError: If the attribute is not callable.
    """
    if config.connector_provider is None:
        logger.warning("No connector_provider configured, serving against an empty in-memory CRM")
        return SingleConnectorProvider(InMemoryConnector())

    module_name, _, attribute = config.connector_provider.partition(":")
    factory = getattr(importlib.import_module(module_name), attribute)
    if not callable(factory):
        raise TypeError(f"connector_provider '{config.connector_provider}' is not callable")
    logger.info(f"Using connector provider {config.connector_provider}")
    return factory()


async def serve() -> None:
    """Run the helper host over stdio until the client disconnects."""
    config = resolve_config()
    server = CRMHelperServer(config=config, connector_provider=resolve_connector_provider(config))
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Console entry point."""
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":  # pragma: no cover
    main()
