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

from crm_helpers.helpers.coerce import format_number, is_empty, round_half_away, to_float
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.schema import ConfigSchema, ConfigValidationError, SchemaProperty
from crm_helpers.types import ActionType, HelperOutput

OPERATIONS = ["add", "subtract", "multiply", "divide", "round", "ceil", "floor", "abs", "percent"]
NEEDS_OPERAND = {"add", "subtract", "multiply", "divide", "percent"}


class MathItSettings(BaseModel):
    field: str
    operation: str
    operand: Optional[float] = None
    target_field: Optional[str] = None
    decimal_places: int = 2


class MathIt(Helper):
    """Performs arithmetic on a contact field and stores the result as text."""

    helper_name = "Math It"
    helper_type = "math_it"
    category = "data"
    description = "Perform math operations on contact field values"

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(
            properties={
                "field": SchemaProperty(type="string", description="The field to perform the operation on"),
                "operation": SchemaProperty(
                    type="string", enum=OPERATIONS, description="The math operation to perform"
                ),
                "operand": SchemaProperty(
                    type="number",
                    description="The value to use in the operation (not needed for round/ceil/floor/abs)",
                ),
                "target_field": SchemaProperty(
                    type="string", description="Optional field to store result (defaults to same field)"
                ),
                "decimal_places": SchemaProperty(
                    type="integer", description="Number of decimal places for rounding (default: 2)", default=2
                ),
            },
            required=["field", "operation"],
        )

    def check_config(self, config: Mapping[str, Any]) -> None:
        operation = config["operation"]
        if operation in NEEDS_OPERAND and config.get("operand") is None:
            raise ConfigValidationError("operand", f"operand is required for operation '{operation}'")
        if config.get("decimal_places") is not None and config["decimal_places"] < 0:
            raise ConfigValidationError("decimal_places", "decimal_places must not be negative")

    async def execute(self, input: HelperInput) -> HelperOutput:
        cfg = self.parse_config(MathItSettings, input.config)
        target_field = cfg.target_field or cfg.field
        operand = cfg.operand if cfg.operand is not None else 0.0
        output = HelperOutput()
        connector = self.connector_for(input, output)

        try:
            raw_value = await connector.get_contact_field_value(input.contact_id, cfg.field)
        except Exception as e:
            self.fail(output, f"Failed to read field '{cfg.field}': {e}")

        try:
            current = 0.0 if is_empty(raw_value) else to_float(raw_value)
        except ValueError:
            self.fail(output, f"Field '{cfg.field}' value '{raw_value}' is not a valid number")

        if cfg.operation == "add":
            result = current + operand
        elif cfg.operation == "subtract":
            result = current - operand
        elif cfg.operation == "multiply":
            result = current * operand
        elif cfg.operation == "divide":
            if operand == 0:
                self.fail(output, f"Cannot divide {current:g} by zero")
            result = current / operand
        elif cfg.operation == "round":
            result = round_half_away(current, cfg.decimal_places)
        elif cfg.operation == "ceil":
            result = float(math.ceil(current))
        elif cfg.operation == "floor":
            result = float(math.floor(current))
        elif cfg.operation == "abs":
            result = abs(current)
        else:  # percent
            result = current * (operand / 100)

        if not math.isfinite(result):
            self.fail(output, f"Result of {cfg.operation} on {current:g} is not a finite number")
        if cfg.operation != "round":
            result = round_half_away(result, cfg.decimal_places)
        result_str = format_number(result, cfg.decimal_places)

        try:
            await connector.set_contact_field_value(input.contact_id, target_field, result_str)
        except Exception as e:
            self.fail(output, f"Failed to set result on '{target_field}': {e}")

        output.success = True
        output.message = f"{cfg.field} {cfg.operation} {operand:g} = {result_str}"
        output.add_action(ActionType.FIELD_UPDATED, target_field, result_str)
        output.modified_data = {target_field: result_str}
        output.log(
            f"Math: {current:g} {cfg.operation} {operand:g} = {result_str} "
            f"(stored in '{target_field}')"
        )
        return output
