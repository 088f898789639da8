# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import time
from datetime import datetime, timezone
from typing import Optional

from crm_helpers.interfaces import CRMConnector, HelperInput
from crm_helpers.registry import HelperRegistry
from crm_helpers.schema import ConfigValidationError
from crm_helpers.types import ExecutionRequest, ExecutionResult, HelperExecutionError, HelperNotRegisteredError
from crm_helpers.utils.logger import logger


class HelperExecutor:
    """Runs one helper step: registry lookup, validation, then execution."""

    def __init__(self, registry: HelperRegistry) -> None:
        self.registry = registry

    async def execute(self, request: ExecutionRequest, connector: Optional[CRMConnector] = None) -> ExecutionResult:
        """Execute a helper request against a connector.

        Helper-domain failures are reported in the returned result rather
        than raised.

        Args:
            request: Which helper to run, with which config, on which contact.
            connector: The CRM connector, if the caller has one.

        Returns:
            ExecutionResult: Outcome with timing information.
        """
        start = time.monotonic()
        result = ExecutionResult(
            helper_type=request.helper_type,
            contact_id=request.contact_id,
            executed_at=datetime.now(timezone.utc),
        )

        def finish(error: Optional[str] = None) -> ExecutionResult:
            result.error = error
            result.duration_ms = int((time.monotonic() - start) * 1000)
            return result

        try:
            helper = self.registry.new_helper(request.helper_type)
        except HelperNotRegisteredError:
            logger.warning(f"Unknown helper type requested: {request.helper_type}")
            return finish(f"unknown helper type: {request.helper_type}")

        try:
            helper.validate_config(request.config)
        except ConfigValidationError as e:
            logger.info(f"Rejected config for '{request.helper_type}' (field '{e.field}'): {e}")
            return finish(f"invalid config: {e}")

        if helper.requires_crm() and connector is None:
            return finish("helper requires a CRM connection but none was provided")

        supported = helper.supported_crms()
        if supported and connector is not None:
            platform = connector.get_metadata().platform_slug
            if platform not in supported:
                return finish(
                    f"helper '{request.helper_type}' does not support platform '{platform}' "
                    f"(supported: {', '.join(supported)})"
                )

        helper_input = HelperInput(contact_id=request.contact_id, config=request.config, connector=connector)

        try:
            output = await helper.execute(helper_input)
        except HelperExecutionError as e:
            logger.warning(f"Helper '{request.helper_type}' failed for contact '{request.contact_id}': {e.message}")
            result.output = e.output
            return finish(e.message)
        except Exception as e:
            logger.exception(f"Unexpected error executing helper '{request.helper_type}'")
            return finish(str(e))

        result.success = output.success
        result.output = output
        logger.info(
            f"Executed '{request.helper_type}' on contact '{request.contact_id}': "
            f"success={output.success}, actions={len(output.actions)}"
        )
        return finish()
