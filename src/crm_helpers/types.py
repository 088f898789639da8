# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from crm_helpers.schema import ConfigSchema, ConfigValidationError

__all__ = [
    "ActionType",
    "ConfigValidationError",
    "ConnectorError",
    "ContactNotFoundError",
    "ExecutionRequest",
    "ExecutionResult",
    "FieldNotFoundError",
    "HelperAction",
    "HelperExecutionError",
    "HelperInfo",
    "HelperMetadata",
    "HelperNotRegisteredError",
    "HelperOutput",
    "TagNotFoundError",
]


class ActionType(str, Enum):
    """Kinds of state-changing operations a helper can report."""

    FIELD_UPDATED = "field_updated"
    TAG_APPLIED = "tag_applied"
    TAG_REMOVED = "tag_removed"
    GOAL_ACHIEVED = "goal_achieved"
    AUTOMATION_TRIGGERED = "automation_triggered"


class HelperAction(BaseModel):
    """
    Audit record of one successful external mutation.
    """

    type: ActionType
    target: str
    value: Any = None


class HelperOutput(BaseModel):
    """
    What a helper reports back after running against one contact.

    `actions` lists mutations in the order they happened and never contains a
    mutation that failed. `logs` is diagnostic only.
    """

    success: bool = False
    message: str = ""
    actions: List[HelperAction] = Field(default_factory=list)
    modified_data: Dict[str, Any] = Field(default_factory=dict)
    logs: List[str] = Field(default_factory=list)

    def add_action(self, action_type: ActionType, target: str, value: Any = None) -> HelperAction:
        """Append an action to the audit trail."""
        action = HelperAction(type=action_type, target=target, value=value)
        self.actions.append(action)
        return action

    def log(self, line: str) -> None:
        self.logs.append(line)


class HelperMetadata(BaseModel):
    """
    Read-only description of a helper kind, computed from a live instance.
    """

    name: str
    type: str
    category: str
    description: str
    requires_crm: bool = True
    supported_crms: Optional[List[str]] = None  # None = all platforms


class HelperInfo(HelperMetadata):
    """
    Catalog entry: metadata plus the helper's config schema.
    """

    config_schema: ConfigSchema


class ExecutionRequest(BaseModel):
    """
    A single "run helper X with config Y against contact Z" request.
    """

    helper_type: str
    contact_id: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
    helper_id: Optional[str] = None
    account_id: Optional[str] = None
    connection_id: Optional[str] = None


class ExecutionResult(BaseModel):
    """
    Full result of one execution, suitable for persisting as history.
    """

    success: bool = False
    output: Optional[HelperOutput] = None
    error: Optional[str] = None
    helper_type: str
    contact_id: str = ""
    duration_ms: int = 0
    executed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class HelperNotRegisteredError(LookupError):
    """Raised when a helper type has no registered factory."""

    def __init__(self, helper_type: str) -> None:
        self.helper_type = helper_type
        super().__init__(f"helper type '{helper_type}' is not registered")


class HelperExecutionError(Exception):
    """Hard failure during `execute`; carries the partial output."""

    def __init__(self, message: str, output: Optional[HelperOutput] = None) -> None:
        self.message = message
        self.output = output
        super().__init__(message)


class ConnectorError(Exception):
    """Base error raised by CRM connectors."""


class ContactNotFoundError(ConnectorError):
    """The contact does not exist in the CRM."""


class FieldNotFoundError(ConnectorError):
    """The field key is unknown to the CRM."""


class TagNotFoundError(ConnectorError):
    """The tag does not exist in the CRM."""
