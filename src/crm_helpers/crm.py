# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Capability(str, Enum):
    """A feature supported by a CRM connector."""

    CONTACTS = "contacts"
    TAGS = "tags"
    CUSTOM_FIELDS = "custom_fields"
    AUTOMATIONS = "automations"
    GOALS = "goals"
    DEALS = "deals"
    EMAILS = "emails"
    WEBHOOKS = "webhooks"


class TagRef(BaseModel):
    """
    Lightweight tag reference held by a contact.
    """

    id: str
    name: str = ""


class Tag(BaseModel):
    """
    Full tag definition as known to the CRM.
    """

    id: str
    name: str
    category: str = ""
    description: Optional[str] = None


class CustomField(BaseModel):
    """
    Custom field definition.
    """

    id: str
    key: str
    label: str = ""
    field_type: str = "text"  # e.g. "text", "number", "date"
    options: Optional[List[str]] = None


class NormalizedContact(BaseModel):
    """
    A contact record normalized across CRM platforms.

    Field values in `custom_fields` are opaque; helpers coerce what they need.
    """

    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    job_title: str = ""
    tags: List[TagRef] = Field(default_factory=list)
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    source_crm: Optional[str] = None
    source_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QueryOptions(BaseModel):
    """
    Filtering and pagination for contact list operations.
    """

    limit: int = 100
    offset: int = 0
    cursor: Optional[str] = None
    order_by: Optional[str] = None
    filters: Dict[str, str] = Field(default_factory=dict)
    tag_id: Optional[str] = None
    email: Optional[str] = None


class ContactList(BaseModel):
    """
    One page of contacts.
    """

    contacts: List[NormalizedContact] = Field(default_factory=list)
    total: int = 0
    next_cursor: Optional[str] = None
    has_more: bool = False


class CreateContactInput(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    company: Optional[str] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)


class UpdateContactInput(BaseModel):
    """
    Partial update; `None` means "leave unchanged".
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    custom_fields: Dict[str, Any] = Field(default_factory=dict)


class ConnectorMetadata(BaseModel):
    platform_slug: str
    platform_name: str
    api_version: str = ""
    base_url: str = ""

