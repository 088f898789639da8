# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import math
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from crm_helpers.helpers.coerce import round_half_away, to_float
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, ConfigValidationError, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

OPERATIONS = ["power", "sqrt", "abs", "round", "ceil", "floor", "min", "max"]
BINARY_OPERATIONS = {"power", "min", "max"}


class AdvanceMathSettings(BaseModel):
    operation: str
    source_field: str
    target_field: str
    operand: Optional[float] = None
    second_field: Optional[str] = None


class AdvanceMath(Helper):
    """Unary and binary float operations; the result is written as a number."""

    helper_name = "Advance Math"
    helper_type = "advance_math"
    category = "data"
    description = (
        "Perform advanced mathematical operations (power, square root, absolute value, "
        "rounding, min, max) on contact field values"
    )

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "operation": SchemaProperty(
                    type="string", enum=OPERATIONS, description="Mathematical operation to perform"
                ),
                "source_field": SchemaProperty(type="string", description="Source field containing the numeric value"),
                "operand": SchemaProperty(
                    type="number",
                    description="Operand for operations that require a second value (power, min, max)",
                ),
                "second_field": SchemaProperty(
                    type="string",
                    description="Second source field for min/max operations (alternative to operand)",
                ),
                "target_field": SchemaProperty(type="string", description="Target field to store the result"),
            },
            required=["operation", "source_field", "target_field"],
        )

    def check_config(self, config: Mapping[str, Any]) -> None:
        operation = config["operation"]
        if operation in BINARY_OPERATIONS and config.get("operand") is None and not config.get("second_field"):
            field = "second_field" if "second_field" in config else "operand"
            raise ConfigValidationError(
                field, f"{operation} operation requires either 'operand' or 'second_field'"
            )

    async def _read_number(self, input: HelperInput, output: HelperOutput, field: str, label: str) -> float:
        connector = self.connector_for(input, output)
        try:
            value = await connector.get_contact_field_value(input.contact_id, field)
        except Exception as e:
            self.fail(output, f"Failed to get {label} field '{field}': {e}")
        try:
            return to_float(value)
        except ValueError:
            self.fail(output, f"{label.capitalize()} field '{field}' value '{value}' is not a valid number")

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(AdvanceMathSettings, input.config)
        output = HelperOutput()
        connector = self.connector_for(input, output)

        source = await self._read_number(input, output, cfg.source_field, "source")
        output.log(f"Source value: {cfg.source_field} = {source:g}")

        if cfg.operation == "sqrt":
            if source < 0:
                self.fail(output, f"Cannot compute square root of negative number {source:g} from '{cfg.source_field}'")
            result = math.sqrt(source)
        elif cfg.operation == "abs":
            result = abs(source)
        elif cfg.operation == "round":
            result = round_half_away(source, 0)
        elif cfg.operation == "ceil":
            result = float(math.ceil(source))
        elif cfg.operation == "floor":
            result = float(math.floor(source))
        else:
            if cfg.second_field:
                second = await self._read_number(input, output, cfg.second_field, "second")
                output.log(f"Second value: {cfg.second_field} = {second:g}")
            else:
                second = cfg.operand if cfg.operand is not None else 0.0
                output.log(f"Operand value: {second:g}")

            if cfg.operation == "power":
                try:
                    result = math.pow(source, second)
                except (ValueError, OverflowError) as e:
                    self.fail(output, f"Cannot raise {source:g} to the power {second:g}: {e}")
            elif cfg.operation == "min":
                result = min(source, second)
            else:
                result = max(source, second)

        try:
            await connector.set_contact_field_value(input.contact_id, cfg.target_field, result)
        except Exception as e:
            self.fail(output, f"Failed to set target field '{cfg.target_field}': {e}")

        output.success = True
        output.message = f"Computed {cfg.operation}({source:g}) = {result:g}, saved to '{cfg.target_field}'"
        output.add_action(ActionType.FIELD_UPDATED, cfg.target_field, result)
        output.modified_data = {
            cfg.target_field: result,
            "operation": cfg.operation,
            "source": source,
            "result": result,
        }
        output.log(f"Result: {cfg.target_field} = {result:g}")
        return output
