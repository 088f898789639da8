# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Mapping, NoReturn, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crm_helpers.crm import (
    Capability,
    ContactList,
    ConnectorMetadata,
    CreateContactInput,
    CustomField,
    NormalizedContact,
    QueryOptions,
    Tag,
    UpdateContactInput,
)
from crm_helpers.schema import ConfigSchema, validate_against_schema
from crm_helpers.types import HelperExecutionError, HelperMetadata, HelperOutput

__all__ = ["CRMConnector", "ConnectorProvider", "Helper", "HelperInput"]

SettingsT = TypeVar("SettingsT", bound=BaseModel)


class CRMConnector(ABC):
    """
    The normalized capability surface every CRM platform adapter fulfills.

    Helpers program against this interface only. Field values exchanged via
    `get_contact_field_value` / `set_contact_field_value` are opaque; unknown
    keys raise `FieldNotFoundError`.
    """

    # Contacts
    @abstractmethod
    async def get_contacts(self, opts: QueryOptions) -> ContactList:
        pass  # pragma: no cover

    @abstractmethod
    async def get_contact(self, contact_id: str) -> NormalizedContact:
        pass  # pragma: no cover

    @abstractmethod
    async def create_contact(self, contact: CreateContactInput) -> NormalizedContact:
        pass  # pragma: no cover

    @abstractmethod
    async def update_contact(self, contact_id: str, updates: UpdateContactInput) -> NormalizedContact:
        pass  # pragma: no cover

    @abstractmethod
    async def delete_contact(self, contact_id: str) -> None:
        pass  # pragma: no cover

    # Tags
    @abstractmethod
    async def get_tags(self) -> List[Tag]:
        pass  # pragma: no cover

    @abstractmethod
    async def apply_tag(self, contact_id: str, tag_id: str) -> None:
        pass  # pragma: no cover

    @abstractmethod
    async def remove_tag(self, contact_id: str, tag_id: str) -> None:
        pass  # pragma: no cover

    # Custom fields
    @abstractmethod
    async def get_custom_fields(self) -> List[CustomField]:
        pass  # pragma: no cover

    @abstractmethod
    async def get_contact_field_value(self, contact_id: str, field_key: str) -> Any:
        pass  # pragma: no cover

    @abstractmethod
    async def set_contact_field_value(self, contact_id: str, field_key: str, value: Any) -> None:
        pass  # pragma: no cover

    # Automations
    @abstractmethod
    async def trigger_automation(self, contact_id: str, automation_id: str) -> None:
        pass  # pragma: no cover

    @abstractmethod
    async def achieve_goal(self, contact_id: str, goal_name: str, integration: str) -> None:
        pass  # pragma: no cover

    # Health & metadata
    @abstractmethod
    async def test_connection(self) -> None:
        """Raise `ConnectorError` if the CRM cannot be reached."""
        pass  # pragma: no cover

    @abstractmethod
    def get_metadata(self) -> ConnectorMetadata:
        pass  # pragma: no cover

    @abstractmethod
    def get_capabilities(self) -> List[Capability]:
        pass  # pragma: no cover


@runtime_checkable
class ConnectorProvider(Protocol):
    """Protocol for resolving the connector behind a stored CRM connection."""

    def get_connector(self, connection_id: Optional[str] = None) -> CRMConnector:
        """Return a connector for the connection, or the default one when None."""
        ...


class HelperInput(BaseModel):
    """
    Input to one `Helper.execute` call.

    `config` has already passed `validate_config`. The connector is borrowed
    for the duration of the call.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    contact_id: str
    config: dict[str, Any] = Field(default_factory=dict)
    connector: Optional[CRMConnector] = None


class Helper(ABC):
    """The contract that every helper plugin must fulfill.

    Helpers are stateless: identity lives in class attributes, and a fresh
    instance is built per execution by the registry factory.
    """

    helper_name: ClassVar[str] = ""
    helper_type: ClassVar[str] = ""
    category: ClassVar[str] = ""
    description: ClassVar[str] = ""
    crm_required: ClassVar[bool] = True
    supported_platforms: ClassVar[Optional[List[str]]] = None

    def get_name(self) -> str:
        return self.helper_name

    def get_type(self) -> str:
        return self.helper_type

    def get_category(self) -> str:
        return self.category

    def get_description(self) -> str:
        return self.description

    def requires_crm(self) -> bool:
        return self.crm_required

    def supported_crms(self) -> Optional[List[str]]:
        """Platform slugs this helper supports; None means all platforms."""
        return list(self.supported_platforms) if self.supported_platforms else None

    def get_metadata(self) -> HelperMetadata:
        return HelperMetadata(
            name=self.get_name(),
            type=self.get_type(),
            category=self.get_category(),
            description=self.get_description(),
            requires_crm=self.requires_crm(),
            supported_crms=self.supported_crms(),
        )

    @abstractmethod
    def get_config_schema(self) -> ConfigSchema:
        """Return the static description of accepted configuration."""
        pass  # pragma: no cover

    def validate_config(self, config: Mapping[str, Any]) -> None:
        """Validate a raw config mapping.

        Runs the generic schema checks first, then `check_config` for
        cross-field rules. Never touches the connector.

        Raises:
            ConfigValidationError: Naming the offending field.
        """
        validate_against_schema(self.get_config_schema(), config)
        self.check_config(config)

    def check_config(self, config: Mapping[str, Any]) -> None:
        """Hook for conditional requirements between fields."""
        return None

    @abstractmethod
    async def execute(self, input: HelperInput) -> HelperOutput:
        """Run the helper against one contact.

        Returns:
            HelperOutput: The outcome, including soft "nothing to do" results.

        Raises:
            HelperExecutionError: On hard failures, with the partial output attached.
        """
        pass  # pragma: no cover

    def parse_config(self, model: type[SettingsT], config: Mapping[str, Any]) -> SettingsT:
        """Coerce a validated config mapping into the helper's typed settings."""
        try:
            return model.model_validate(dict(config))
        except ValidationError as e:
            raise HelperExecutionError(f"{self.get_name()}: malformed config: {e}") from e

    def connector_for(self, input: HelperInput, output: HelperOutput) -> CRMConnector:
        """Return the input's connector, failing if none was supplied."""
        if input.connector is None:
            self.fail(output, f"{self.get_name()} requires a CRM connection but none was provided")
        return input.connector

    def fail(self, output: HelperOutput, message: str) -> NoReturn:
        """Mark the output failed and raise `HelperExecutionError`."""
        output.success = False
        output.message = message
        raise HelperExecutionError(message, output=output)
