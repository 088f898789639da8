# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from crm_helpers.crm import (
    Capability,
    ContactList,
    ConnectorMetadata,
    CreateContactInput,
    CustomField,
    NormalizedContact,
    QueryOptions,
    Tag,
    TagRef,
    UpdateContactInput,
)
from crm_helpers.interfaces import CRMConnector
from crm_helpers.types import ContactNotFoundError, FieldNotFoundError, TagNotFoundError

# Field keys that map onto NormalizedContact attributes rather than custom fields.
STANDARD_FIELDS = ("id", "first_name", "last_name", "email", "phone", "company", "job_title")


class InMemoryConnector(CRMConnector):
    """A dict-backed CRM connector.

    Implements the full connector contract without any network access. Unknown
    field keys raise `FieldNotFoundError` on read; writes to an unknown key
    create the custom field unless `strict_fields` is set.
    """

    def __init__(
        self,
        contacts: Optional[Iterable[NormalizedContact]] = None,
        tags: Optional[Iterable[Tag]] = None,
        custom_fields: Optional[Iterable[CustomField]] = None,
        platform_slug: str = "memory",
        strict_fields: bool = False,
    ) -> None:
        self.contacts: dict[str, NormalizedContact] = {c.id: c for c in contacts or []}
        self.tags: dict[str, Tag] = {t.id: t for t in tags or []}
        self.custom_fields: dict[str, CustomField] = {f.key: f for f in custom_fields or []}
        self.platform_slug = platform_slug
        self.strict_fields = strict_fields
        self.triggered_automations: list[tuple[str, str]] = []
        self.achieved_goals: list[tuple[str, str, str]] = []

    def _contact(self, contact_id: str) -> NormalizedContact:
        contact = self.contacts.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"contact '{contact_id}' not found")
        return contact

    def _touch(self, contact: NormalizedContact) -> None:
        contact.updated_at = datetime.now(timezone.utc)

    async def get_contacts(self, opts: QueryOptions) -> ContactList:
        matches = list(self.contacts.values())
        if opts.email:
            matches = [c for c in matches if c.email.lower() == opts.email.lower()]
        if opts.tag_id:
            matches = [c for c in matches if any(t.id == opts.tag_id for t in c.tags)]
        for key, expected in opts.filters.items():
            matches = [c for c in matches if str(_read_field(c, key)) == expected]
        if opts.order_by:
            matches.sort(key=lambda c: str(_read_field(c, opts.order_by or "id")))

        offset = int(opts.cursor) if opts.cursor else opts.offset
        page = matches[offset : offset + opts.limit]
        has_more = offset + len(page) < len(matches)
        return ContactList(
            contacts=[c.model_copy(deep=True) for c in page],
            total=len(matches),
            next_cursor=str(offset + len(page)) if has_more else None,
            has_more=has_more,
        )

    async def get_contact(self, contact_id: str) -> NormalizedContact:
        return self._contact(contact_id).model_copy(deep=True)

    async def create_contact(self, contact: CreateContactInput) -> NormalizedContact:
        now = datetime.now(timezone.utc)
        tag_refs = []
        for tag_id in contact.tags:
            tag = self.tags.get(tag_id)
            tag_refs.append(TagRef(id=tag_id, name=tag.name if tag else ""))
        record = NormalizedContact(
            id=uuid.uuid4().hex,
            first_name=contact.first_name,
            last_name=contact.last_name,
            email=contact.email,
            phone=contact.phone or "",
            company=contact.company or "",
            tags=tag_refs,
            custom_fields=dict(contact.custom_fields),
            source_crm=self.platform_slug,
            created_at=now,
            updated_at=now,
        )
        self.contacts[record.id] = record
        return record.model_copy(deep=True)

    async def update_contact(self, contact_id: str, updates: UpdateContactInput) -> NormalizedContact:
        contact = self._contact(contact_id)
        for key, value in updates.model_dump(exclude={"custom_fields"}, exclude_none=True).items():
            setattr(contact, key, value)
        contact.custom_fields.update(updates.custom_fields)
        self._touch(contact)
        return contact.model_copy(deep=True)

    async def delete_contact(self, contact_id: str) -> None:
        self._contact(contact_id)
        del self.contacts[contact_id]

    async def get_tags(self) -> List[Tag]:
        return [t.model_copy() for t in self.tags.values()]

    async def apply_tag(self, contact_id: str, tag_id: str) -> None:
        contact = self._contact(contact_id)
        tag = self.tags.get(tag_id)
        if tag is None:
            raise TagNotFoundError(f"tag '{tag_id}' not found")
        if not any(ref.id == tag_id for ref in contact.tags):
            contact.tags.append(TagRef(id=tag.id, name=tag.name))
            self._touch(contact)

    async def remove_tag(self, contact_id: str, tag_id: str) -> None:
        contact = self._contact(contact_id)
        contact.tags = [ref for ref in contact.tags if ref.id != tag_id]
        self._touch(contact)

    async def get_custom_fields(self) -> List[CustomField]:
        return [f.model_copy() for f in self.custom_fields.values()]

    async def get_contact_field_value(self, contact_id: str, field_key: str) -> Any:
        contact = self._contact(contact_id)
        if field_key in STANDARD_FIELDS:
            return getattr(contact, field_key)
        if field_key in contact.custom_fields:
            return contact.custom_fields[field_key]
        if field_key in self.custom_fields:
            return None
        raise FieldNotFoundError(f"field '{field_key}' not found")

    async def set_contact_field_value(self, contact_id: str, field_key: str, value: Any) -> None:
        contact = self._contact(contact_id)
        if field_key == "id":
            raise FieldNotFoundError("field 'id' is read-only")
        if field_key in STANDARD_FIELDS:
            setattr(contact, field_key, "" if value is None else str(value))
        else:
            if self.strict_fields and field_key not in self.custom_fields and field_key not in contact.custom_fields:
                raise FieldNotFoundError(f"field '{field_key}' not found")
            contact.custom_fields[field_key] = value
        self._touch(contact)

    async def trigger_automation(self, contact_id: str, automation_id: str) -> None:
        self._contact(contact_id)
        self.triggered_automations.append((contact_id, automation_id))

    async def achieve_goal(self, contact_id: str, goal_name: str, integration: str) -> None:
        self._contact(contact_id)
        self.achieved_goals.append((contact_id, goal_name, integration))

    async def test_connection(self) -> None:
        return None

    def get_metadata(self) -> ConnectorMetadata:
        return ConnectorMetadata(platform_slug=self.platform_slug, platform_name="In-Memory CRM", api_version="1")

    def get_capabilities(self) -> List[Capability]:
        return [
            Capability.CONTACTS,
            Capability.TAGS,
            Capability.CUSTOM_FIELDS,
            Capability.AUTOMATIONS,
            Capability.GOALS,
        ]


def _read_field(contact: NormalizedContact, key: str) -> Any:
    if key in STANDARD_FIELDS:
        return getattr(contact, key)
    return contact.custom_fields.get(key)


class SingleConnectorProvider:
    """Resolves every connection id to one connector."""

    def __init__(self, connector: CRMConnector) -> None:
        self.connector = connector

    def get_connector(self, connection_id: Optional[str] = None) -> CRMConnector:
        return self.connector
