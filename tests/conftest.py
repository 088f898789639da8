# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import pytest

from crm_helpers.crm import CustomField
from crm_helpers.helpers import build_registry
from crm_helpers.memory import InMemoryConnector
from crm_helpers.registry import HelperRegistry
from tests.fixtures.connectors import FlakyConnector, seed_contacts, seed_tags


@pytest.fixture
def connector() -> InMemoryConnector:
    return InMemoryConnector(
        contacts=seed_contacts(),
        tags=seed_tags(),
        custom_fields=[CustomField(id="f1", key="score", label="Score", field_type="number")],
    )


@pytest.fixture
def flaky_connector() -> FlakyConnector:
    return FlakyConnector(contacts=seed_contacts(), tags=seed_tags())


@pytest.fixture
def registry() -> HelperRegistry:
    return build_registry()
