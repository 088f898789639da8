# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from crm_helpers.utils.logger import logger

DEFAULT_CONFIG_PATH = "helpers.yaml"


class PluginConfig(BaseModel):
    """Configuration for a single helper plugin."""

    id: str = Field(..., description="Unique identifier for the plugin")
    type: str = Field(..., description="How to load the plugin (local_python, module)")
    path: str | None = Field(None, description="Path to the plugin source file (local_python)")
    module: str | None = Field(None, description="Dotted module path to import (module)")
    description: str | None = Field(None, description="Human-readable description")

    @field_validator("path")
    @classmethod
    def validate_path_safety(cls, v: str | None) -> str | None:
        """Reject plugin paths that resolve outside the working directory."""
        if v is None:
            return v
        try:
            safe_zone = Path.cwd().resolve()
            resolved = (safe_zone / v).resolve()
        except (OSError, ValueError) as e:
            raise ValueError(f"Invalid path resolution for '{v}': {e}") from e
        if not resolved.is_relative_to(safe_zone):
            raise ValueError(f"Plugin path must be within the safe zone: {v}")
        return v


class IPLookupConfig(BaseModel):
    """Settings for the ip_location helper's geolocation API."""

    base_url: str = Field("http://ip-api.com/json", description="Base URL of the ip-api.com compatible service")
    timeout: float = Field(10.0, gt=0, description="Request timeout in seconds")


class AppConfig(BaseModel):
    """Root configuration for the helper host."""

    plugins: list[PluginConfig] = Field(default_factory=list, description="Extra helper modules to load")
    disabled_helpers: list[str] = Field(default_factory=list, description="Helper types to leave unregistered")
    ip_lookup: IPLookupConfig = Field(default_factory=IPLookupConfig)
    connector_provider: str | None = Field(
        None, description="Import path 'module:attribute' of a zero-argument ConnectorProvider factory"
    )

    @field_validator("plugins")
    @classmethod
    def check_unique_ids(cls, v: list[PluginConfig]) -> list[PluginConfig]:
        """Ensure that all plugin IDs are unique."""
        ids = [p.id for p in v]
        if len(ids) != len(set(ids)):
            duplicates = {x for x in ids if ids.count(x) > 1}
            raise ValueError(f"Duplicate plugin IDs found: {duplicates}")
        return v

    @field_validator("connector_provider")
    @classmethod
    def check_provider_path(cls, v: str | None) -> str | None:
        if v is None:
            return v
        module, _, attribute = v.partition(":")
        if not module or not attribute:
            raise ValueError(f"connector_provider must look like 'package.module:factory', got '{v}'")
        return v


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """
    Load the application configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, checks CRM_HELPERS_CONFIG_PATH
                     env var or defaults to ./helpers.yaml.

    Returns:
        AppConfig: The parsed configuration.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If the configuration file is invalid.
    """
    if config_path is None:
        config_path = os.getenv("CRM_HELPERS_CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path_obj = Path(config_path)
    logger.info(f"Loading configuration from {path_obj.absolute()}")

    if not path_obj.exists():
        logger.error(f"Configuration file not found: {path_obj}")
        raise FileNotFoundError(f"Configuration file not found at {path_obj}")

    try:
        with open(path_obj, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise ValueError(f"Invalid YAML configuration: {e}") from e

    if raw_data is None:
        raw_data = {}
    if not isinstance(raw_data, dict):
        logger.error(f"Configuration root must be a dictionary, got {type(raw_data)}")
        raise ValueError("Configuration root must be a dictionary")

    try:
        config = AppConfig(**raw_data)
    except Exception as e:
        logger.error(f"Configuration validation failed: {e}")
        raise ValueError(f"Configuration validation failed: {e}") from e

    logger.info(
        f"Successfully loaded {len(config.plugins)} plugins, {len(config.disabled_helpers)} disabled helpers"
    )
    return config
