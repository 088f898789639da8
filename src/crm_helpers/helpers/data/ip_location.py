# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import ipaddress
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from crm_helpers.helpers.coerce import as_text, is_empty
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

DEFAULT_BASE_URL = "http://ip-api.com/json"
DEFAULT_TIMEOUT = 10.0


class IPLocationSettings(BaseModel):
    ip_field: str
    city_field: Optional[str] = None
    state_field: Optional[str] = None
    country_field: Optional[str] = None
    zip_field: Optional[str] = None


class GeoLookup(BaseModel):
    """Subset of the ip-api.com JSON response."""

    model_config = ConfigDict(populate_by_name=True)

    status: str = ""
    message: str = ""
    country: str = ""
    country_code: str = Field(default="", alias="countryCode")
    region_name: str = Field(default="", alias="regionName")
    city: str = ""
    zip: str = ""
    lat: float = 0.0
    lon: float = 0.0
    timezone: str = ""
    isp: str = ""


class IPLocation(Helper):
    """Resolves a contact's IP address to a location via ip-api.com.

    The lookup is bounded by `timeout`. Location parts are written to the
    configured fields one by one; a failed write is logged and the rest still
    run.
    """

    helper_name = "IP Location"
    helper_type = "ip_location"
    category = "data"
    description = "Lookup IP address geolocation and store city, state, country, and zip on the contact"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "ip_field": SchemaProperty(
                    type="string", description="The contact field containing the IP address to look up"
                ),
                "city_field": SchemaProperty(type="string", description="The contact field to store the resolved city"),
                "state_field": SchemaProperty(
                    type="string", description="The contact field to store the resolved state/region"
                ),
                "country_field": SchemaProperty(
                    type="string", description="The contact field to store the resolved country"
                ),
                "zip_field": SchemaProperty(
                    type="string", description="The contact field to store the resolved zip/postal code"
                ),
            },
            required=["ip_field"],
        )

    async def lookup(self, ip: str) -> GeoLookup:
        """Query the geolocation API for one address.

        Raises:
            httpx.HTTPError: On transport errors, timeouts or non-2xx responses.
            ValueError: If the body is not a JSON object.
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(f"{self.base_url}/{ip}")
            response.raise_for_status()
            payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("unexpected response body")
        return GeoLookup.model_validate(payload)

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(IPLocationSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            value = await connector.get_contact_field_value(input.contact_id, cfg.ip_field)
        except Exception as e:
            output.log(f"Could not read IP field '{cfg.ip_field}': {e}")
            value = None

        if is_empty(value):
            output.success = True
            output.message = f"IP field '{cfg.ip_field}' is empty, nothing to look up"
            output.log(output.message)
            return output

        ip = as_text(value).strip()
        try:
            ipaddress.ip_address(ip)
        except ValueError:
            output.log(f"Invalid IP address format: {ip}")
            self.fail(output, f"Invalid IP address format in '{cfg.ip_field}': {ip}")

        output.log(f"Looking up IP address: {ip}")
        try:
            geo = await self.lookup(ip)
        except httpx.TimeoutException:
            self.fail(output, f"IP lookup for {ip} timed out after {self.timeout:g}s")
        except (httpx.HTTPError, ValueError) as e:
            self.fail(output, f"IP lookup request failed for {ip}: {e}")

        if geo.status != "success":
            reason = geo.message or "unknown error"
            output.log(f"IP lookup failed for {ip}: {reason}")
            self.fail(output, f"IP lookup failed for {ip}: {reason}")

        output.log(f"IP lookup result: {geo.city}, {geo.region_name}, {geo.country} {geo.zip}")

        writes = [
            ("city", cfg.city_field, geo.city),
            ("state", cfg.state_field, geo.region_name),
            ("country", cfg.country_field, geo.country),
            ("zip", cfg.zip_field, geo.zip),
        ]
        attempted = 0
        for label, field, resolved in writes:
            if not field or not resolved:
                continue
            attempted += 1
            try:
                await connector.set_contact_field_value(input.contact_id, field, resolved)
            except Exception as e:
                output.log(f"Failed to set {label} field '{field}': {e}")
                continue
            output.add_action(ActionType.FIELD_UPDATED, field, resolved)

        output.modified_data = self._location_data(ip, geo)
        if attempted and not output.actions:
            output.success = False
            output.message = f"IP location resolved for {ip} but no location fields could be updated"
            return output

        output.success = True
        output.message = f"IP location resolved for {ip}: {geo.city}, {geo.region_name}, {geo.country}"
        output.log(
            f"IP location for contact {input.contact_id}: {ip} -> "
            f"{geo.city}, {geo.region_name}, {geo.country} {geo.zip}"
        )
        return output

    @staticmethod
    def _location_data(ip: str, geo: GeoLookup) -> Dict[str, Any]:
        return {
            "ip_address": ip,
            "city": geo.city,
            "state": geo.region_name,
            "country": geo.country,
            "country_code": geo.country_code,
            "zip": geo.zip,
            "latitude": geo.lat,
            "longitude": geo.lon,
            "timezone": geo.timezone,
            "isp": geo.isp,
        }
