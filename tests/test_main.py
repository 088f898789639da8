# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from crm_helpers.config import AppConfig
from crm_helpers.main import main, resolve_config, resolve_connector_provider, serve
from crm_helpers.memory import InMemoryConnector, SingleConnectorProvider


def test_resolve_config_defaults_without_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CRM_HELPERS_CONFIG_PATH", raising=False)

    config = resolve_config()

    assert config.plugins == []
    assert config.disabled_helpers == []


def test_resolve_config_reads_env_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "custom.yaml"
    with open(config_file, "w") as f:
        yaml.dump({"disabled_helpers": ["goal_it"]}, f)
    monkeypatch.setenv("CRM_HELPERS_CONFIG_PATH", str(config_file))

    assert resolve_config().disabled_helpers == ["goal_it"]


@pytest.mark.asyncio
async def test_serve_runs_server_over_stdio() -> None:
    """Test that serve wires the server to the stdio streams."""
    with (
        patch("crm_helpers.main.stdio_server") as mock_stdio,
        patch("crm_helpers.main.CRMHelperServer") as MockServer,
        patch("crm_helpers.main.resolve_config") as mock_resolve,
        patch("crm_helpers.main.resolve_connector_provider") as mock_provider,
    ):
        mock_stdio.return_value.__aenter__.return_value = ("read", "write")
        server_instance = MockServer.return_value
        server_instance.run = AsyncMock()
        server_instance.create_initialization_options = MagicMock(return_value="init")

        await serve()

        MockServer.assert_called_once()
        assert MockServer.call_args.kwargs["config"] is mock_resolve.return_value
        assert MockServer.call_args.kwargs["connector_provider"] is mock_provider.return_value
        mock_provider.assert_called_once_with(mock_resolve.return_value)
        server_instance.run.assert_awaited_once_with("read", "write", "init")


def test_connector_provider_defaults_to_empty_demo_crm() -> None:
    with patch("crm_helpers.main.logger") as mock_logger:
        provider = resolve_connector_provider(AppConfig())

    assert isinstance(provider, SingleConnectorProvider)
    connector = provider.get_connector(None)
    assert isinstance(connector, InMemoryConnector)
    assert connector.contacts == {}
    mock_logger.warning.assert_called_once()
    assert "empty in-memory CRM" in mock_logger.warning.call_args[0][0]


@pytest.mark.asyncio
async def test_connector_provider_loaded_from_import_path() -> None:
    config = AppConfig(connector_provider="tests.fixtures.providers:build_provider")

    provider = resolve_connector_provider(config)

    connector = provider.get_connector(None)
    contact = await connector.get_contact("c1")
    assert contact.email == "ada@example.com"


def test_connector_provider_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "helpers.yaml"
    with open(config_file, "w") as f:
        yaml.dump({"connector_provider": "tests.fixtures.providers:build_provider"}, f)
    monkeypatch.setenv("CRM_HELPERS_CONFIG_PATH", str(config_file))

    provider = resolve_connector_provider(resolve_config())

    assert provider.get_connector(None).contacts["c1"].first_name == "Ada"


@pytest.mark.parametrize("path", ["tests.fixtures.providers", ":build_provider", "tests.fixtures.providers:"])
def test_malformed_connector_provider_rejected(path: str) -> None:
    with pytest.raises(ValueError, match="connector_provider must look like"):
        AppConfig(connector_provider=path)


def test_connector_provider_import_errors_propagate() -> None:
    with pytest.raises(ModuleNotFoundError):
        resolve_connector_provider(AppConfig(connector_provider="tests.fixtures.no_such_module:build"))
    with pytest.raises(AttributeError):
        resolve_connector_provider(AppConfig(connector_provider="tests.fixtures.providers:missing"))
    with pytest.raises(TypeError, match="is not callable"):
        resolve_connector_provider(AppConfig(connector_provider="tests.fixtures.providers:NOT_CALLABLE"))


def test_main() -> None:
    """Test the main entry point."""
    with patch("crm_helpers.main.serve", new=MagicMock()), patch("crm_helpers.main.asyncio.run") as mock_run:
        main()
        mock_run.assert_called_once()


def test_main_keyboard_interrupt() -> None:
    """Test that main handles KeyboardInterrupt gracefully."""
    with (
        patch("crm_helpers.main.serve", new=MagicMock()),
        patch("crm_helpers.main.asyncio.run", side_effect=KeyboardInterrupt) as mock_run,
    ):
        main()
        mock_run.assert_called_once()
