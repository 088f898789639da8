# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

"""Helper plugin framework for running configured steps against CRM contacts."""

from crm_helpers.executor import HelperExecutor
from crm_helpers.interfaces import CRMConnector, ConnectorProvider, Helper, HelperInput
from crm_helpers.registry import HelperFactory, HelperRegistry
from crm_helpers.schema import ConfigSchema, ConfigValidationError, SchemaProperty
from crm_helpers.types import (
    ActionType,
    ExecutionRequest,
    ExecutionResult,
    HelperAction,
    HelperExecutionError,
    HelperInfo,
    HelperMetadata,
    HelperNotRegisteredError,
    HelperOutput,
)

__version__ = "0.1.0"

__all__ = [
    "ActionType",
    "CRMConnector",
    "ConfigSchema",
    "ConfigValidationError",
    "ConnectorProvider",
    "ExecutionRequest",
    "ExecutionResult",
    "Helper",
    "HelperAction",
    "HelperExecutionError",
    "HelperExecutor",
    "HelperFactory",
    "HelperInfo",
    "HelperInput",
    "HelperMetadata",
    "HelperNotRegisteredError",
    "HelperOutput",
    "HelperRegistry",
    "SchemaProperty",
]
