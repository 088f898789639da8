# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import calendar
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from crm_helpers.helpers.coerce import as_text, parse_date
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, ConfigValidationError, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

OPERATIONS = [
    "add_days",
    "subtract_days",
    "add_months",
    "subtract_months",
    "add_years",
    "subtract_years",
    "set_now",
    "diff_days",
    "format",
]
SHIFT_OPERATIONS = {op for op in OPERATIONS if op.startswith(("add_", "subtract_"))}
DEFAULT_OUTPUT_FORMAT = "%Y-%m-%d"


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the end of the target month."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def shift_date(value: datetime, operation: str, amount: int) -> datetime:
    if operation.startswith("subtract_"):
        amount = -amount
    unit = operation.split("_", 1)[1]
    if unit == "days":
        return value + timedelta(days=amount)
    if unit == "months":
        return add_months(value, amount)
    return add_months(value, amount * 12)


def _as_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class DateCalcSettings(BaseModel):
    operation: str
    field: str
    amount: Optional[int] = None
    target_field: Optional[str] = None
    compare_field: Optional[str] = None
    output_format: str = DEFAULT_OUTPUT_FORMAT


class DateCalc(Helper):
    """Date arithmetic, differences and reformatting on a contact date field.

    Shift operations (`add_days`, `subtract_months`, ...) need `field` and
    `amount`; `diff_days` stores the whole days from `field` to
    `compare_field`; `set_now` stamps the current UTC date without reading
    `field`. Results are rendered with the strftime `output_format`.
    """

    helper_name = "Date Calc"
    helper_type = "date_calc"
    category = "data"
    description = "Perform date calculations: add/subtract days, months or years, diff dates, format dates"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "field": SchemaProperty(type="string", description="The date field to operate on"),
                "operation": SchemaProperty(
                    type="string", enum=OPERATIONS, description="The date operation to perform"
                ),
                "amount": SchemaProperty(
                    type="integer", description="Number of days/months/years (for add/subtract operations)"
                ),
                "target_field": SchemaProperty(
                    type="string", description="Field to store the result (defaults to same field)"
                ),
                "compare_field": SchemaProperty(type="string", description="Second date field for diff_days operation"),
                "output_format": SchemaProperty(
                    type="string",
                    description="Output date format (strftime, default: %Y-%m-%d)",
                    default=DEFAULT_OUTPUT_FORMAT,
                ),
            },
            required=["operation", "field"],
        )

    def check_config(self, config: Mapping[str, Any]) -> None:
        operation = config["operation"]
        if operation in SHIFT_OPERATIONS and config.get("amount") is None:
            raise ConfigValidationError("amount", f"amount is required for operation '{operation}'")
        if operation == "diff_days" and not config.get("compare_field"):
            raise ConfigValidationError("compare_field", "compare_field is required for diff_days operation")

    async def _read_date(self, input: HelperInput, output: HelperOutput, field: str) -> datetime:
        connector = self.connector_for(input, output)
        try:
            raw = await connector.get_contact_field_value(input.contact_id, field)
        except Exception as e:
            self.fail(output, f"Failed to read field '{field}': {e}")
        try:
            return parse_date(raw)
        except ValueError:
            self.fail(output, f"Could not parse date '{as_text(raw)}' in field '{field}'")

    def _render(self, output: HelperOutput, value: datetime, fmt: str) -> str:
        try:
            return value.strftime(fmt)
        except ValueError as e:
            self.fail(output, f"Cannot render date with format '{fmt}': {e}")

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(DateCalcSettings, input.config)
        target_field = cfg.target_field or cfg.field
        output = HelperOutput()
        connector = self.connector_for(input, output)

        if cfg.operation == "set_now":
            result = self._render(output, datetime.now(timezone.utc), cfg.output_format)
            source_text = "now"
        else:
            source = await self._read_date(input, output, cfg.field)
            source_text = source.isoformat()
            if cfg.operation == "diff_days":
                compare = await self._read_date(input, output, cfg.compare_field or "")
                delta = _as_utc_naive(compare) - _as_utc_naive(source)
                result = str(int(delta.total_seconds() / 86400))
            elif cfg.operation == "format":
                result = self._render(output, source, cfg.output_format)
            else:
                try:
                    shifted = shift_date(source, cfg.operation, cfg.amount or 0)
                except (ValueError, OverflowError) as e:
                    self.fail(output, f"Cannot {cfg.operation.replace('_', ' ')} {cfg.amount} on {source_text}: {e}")
                result = self._render(output, shifted, cfg.output_format)

        try:
            await connector.set_contact_field_value(input.contact_id, target_field, result)
        except Exception as e:
            self.fail(output, f"Failed to set result on '{target_field}': {e}")

        output.success = True
        output.message = f"Date {cfg.operation}: result = {result}"
        output.add_action(ActionType.FIELD_UPDATED, target_field, result)
        output.modified_data = {target_field: result}
        output.log(f"Date calc '{cfg.operation}' on contact {input.contact_id}: {source_text} -> {result}")
        return output
