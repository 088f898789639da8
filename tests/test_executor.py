# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from unittest.mock import patch

import pytest

from crm_helpers.executor import HelperExecutor
from crm_helpers.interfaces import Helper, HelperInput
from crm_helpers.memory import InMemoryConnector
from crm_helpers.registry import HelperRegistry
from crm_helpers.schema import ConfigSchema, SchemaProperty
from crm_helpers.types import ExecutionRequest, HelperOutput
from tests.fixtures.connectors import seed_contacts


class EchoHelper(Helper):
    """Needs no CRM; echoes its config back."""

    helper_name = "Echo"
    helper_type = "echo"
    category = "test"
    crm_required = False

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema(properties={"text": SchemaProperty(type="string")}, required=["text"])

    async def execute(self, input: HelperInput) -> HelperOutput:
        return HelperOutput(success=True, message=input.config["text"])


class ExplodingHelper(Helper):
    helper_name = "Exploding"
    helper_type = "exploding"
    category = "test"
    crm_required = False

    def get_config_schema(self) -> ConfigSchema:
        return ConfigSchema()

    async def execute(self, input: HelperInput) -> HelperOutput:
        raise RuntimeError("kaboom")


@pytest.fixture
def executor(registry: HelperRegistry) -> HelperExecutor:
    registry.register("echo", EchoHelper)
    registry.register("exploding", ExplodingHelper)
    return HelperExecutor(registry)


@pytest.mark.asyncio
async def test_successful_execution(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    request = ExecutionRequest(
        helper_type="tag_it", contact_id="c2", config={"action": "apply", "tag_ids": ["t4"]}
    )

    result = await executor.execute(request, connector)

    assert result.success is True
    assert result.error is None
    assert result.output is not None
    assert len(result.output.actions) == 1
    assert result.helper_type == "tag_it"
    assert result.contact_id == "c2"
    assert result.duration_ms >= 0


@pytest.mark.asyncio
async def test_unknown_helper_type(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    result = await executor.execute(ExecutionRequest(helper_type="nope", contact_id="c1"), connector)

    assert result.success is False
    assert result.error == "unknown helper type: nope"
    assert result.output is None


@pytest.mark.asyncio
async def test_invalid_config_never_reaches_connector(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    request = ExecutionRequest(helper_type="tag_it", contact_id="c2", config={"action": "apply"})

    with patch.object(connector, "apply_tag") as apply_tag:
        result = await executor.execute(request, connector)

    assert result.success is False
    assert result.error is not None
    assert result.error.startswith("invalid config:")
    assert "tag_ids" in result.error
    apply_tag.assert_not_called()


@pytest.mark.asyncio
async def test_missing_connector(executor: HelperExecutor) -> None:
    request = ExecutionRequest(helper_type="trigger_it", contact_id="c1", config={"automation_id": "a1"})

    result = await executor.execute(request)

    assert result.success is False
    assert result.error == "helper requires a CRM connection but none was provided"


@pytest.mark.asyncio
async def test_config_checked_before_connector(executor: HelperExecutor) -> None:
    result = await executor.execute(ExecutionRequest(helper_type="trigger_it", contact_id="c1"))
    assert result.error is not None
    assert result.error.startswith("invalid config:")


@pytest.mark.asyncio
async def test_platform_not_supported(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    request = ExecutionRequest(helper_type="goal_it", contact_id="c1", config={"goal_name": "signup"})

    result = await executor.execute(request, connector)

    assert result.success is False
    assert result.error is not None
    assert "does not support platform 'memory'" in result.error
    assert "keap" in result.error
    assert connector.achieved_goals == []


@pytest.mark.asyncio
async def test_platform_supported(executor: HelperExecutor) -> None:
    keap = InMemoryConnector(contacts=seed_contacts(), platform_slug="keap")
    request = ExecutionRequest(helper_type="goal_it", contact_id="c1", config={"goal_name": "signup"})

    result = await executor.execute(request, keap)

    assert result.success is True
    assert keap.achieved_goals == [("c1", "signup", "mfh")]


@pytest.mark.asyncio
async def test_helper_without_crm_runs_without_connector(executor: HelperExecutor) -> None:
    result = await executor.execute(ExecutionRequest(helper_type="echo", config={"text": "hi"}))

    assert result.success is True
    assert result.output is not None
    assert result.output.message == "hi"


@pytest.mark.asyncio
async def test_helper_failure_keeps_partial_output(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    connector.contacts["c1"].custom_fields["amount"] = -4.0
    request = ExecutionRequest(
        helper_type="advance_math",
        contact_id="c1",
        config={"operation": "sqrt", "source_field": "amount", "target_field": "root"},
    )

    result = await executor.execute(request, connector)

    assert result.success is False
    assert result.error is not None
    assert "square root of negative number -4" in result.error
    assert result.output is not None
    assert result.output.success is False
    assert result.output.actions == []


@pytest.mark.asyncio
async def test_unexpected_exception_is_captured(executor: HelperExecutor) -> None:
    with patch("crm_helpers.executor.logger") as mock_logger:
        result = await executor.execute(ExecutionRequest(helper_type="exploding"))

    assert result.success is False
    assert result.error == "kaboom"
    mock_logger.exception.assert_called_once()


@pytest.mark.asyncio
async def test_soft_failure_is_not_an_error(executor: HelperExecutor, connector: InMemoryConnector) -> None:
    request = ExecutionRequest(helper_type="tag_it", contact_id="c2", config={"action": "apply", "tag_ids": ["x"]})

    result = await executor.execute(request, connector)

    assert result.success is False
    assert result.error is None
    assert result.output is not None
    assert result.output.message == "Failed to apply any tags"
