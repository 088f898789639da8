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

from crm_helpers.helpers.tagging.clear_tags import ClearTags
from crm_helpers.helpers.tagging.count_tags import CountTags
from crm_helpers.helpers.tagging.score_it import ScoreIt
from crm_helpers.helpers.tagging.tag_it import TagIt
from crm_helpers.interfaces import HelperInput
from crm_helpers.memory import InMemoryConnector
from crm_helpers.schema import ConfigValidationError
from crm_helpers.types import ActionType, HelperExecutionError
from tests.fixtures.connectors import FlakyConnector


def tag_ids(connector: InMemoryConnector, contact_id: str = "c1") -> list[str]:
    return [ref.id for ref in connector.contacts[contact_id].tags]


# --- tag_it -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_tag_it_applies_tags(connector: InMemoryConnector) -> None:
    output = await TagIt().execute(
        HelperInput(contact_id="c2", config={"action": "apply", "tag_ids": ["t1", "t4"]}, connector=connector)
    )

    assert output.success is True
    assert output.message == "Successfully applied 2 tag(s)"
    assert tag_ids(connector, "c2") == ["t1", "t4"]
    assert [(a.type, a.target, a.value) for a in output.actions] == [
        (ActionType.TAG_APPLIED, "c2", "t1"),
        (ActionType.TAG_APPLIED, "c2", "t4"),
    ]
    assert output.modified_data == {"tags_applied": ["t1", "t4"]}


@pytest.mark.asyncio
async def test_tag_it_removes_tags(connector: InMemoryConnector) -> None:
    output = await TagIt().execute(
        HelperInput(contact_id="c1", config={"action": "remove", "tag_ids": ["t2"]}, connector=connector)
    )
    assert output.success is True
    assert tag_ids(connector) == ["t1", "t3"]
    assert output.actions[0].type == ActionType.TAG_REMOVED
    assert output.modified_data == {"tags_removed": ["t2"]}


@pytest.mark.asyncio
async def test_tag_it_single_failure_reports_no_success(flaky_connector: FlakyConnector) -> None:
    """A rejected apply leaves success False and records nothing."""
    flaky_connector.fail_apply.add("tag_a")

    output = await TagIt().execute(
        HelperInput(contact_id="c1", config={"action": "apply", "tag_ids": ["tag_a"]}, connector=flaky_connector)
    )

    assert output.success is False
    assert "Failed to apply" in output.message
    assert output.actions == []
    assert any("tag_a" in line for line in output.logs)


@pytest.mark.asyncio
async def test_tag_it_partial_failure_is_success(flaky_connector: FlakyConnector) -> None:
    flaky_connector.fail_apply.add("t1")

    output = await TagIt().execute(
        HelperInput(contact_id="c2", config={"action": "apply", "tag_ids": ["t1", "t4"]}, connector=flaky_connector)
    )

    assert output.success is True
    assert [a.value for a in output.actions] == ["t4"]
    assert output.modified_data == {"tags_applied": ["t4"]}


@pytest.mark.asyncio
async def test_tag_it_unknown_tag_is_not_applied(connector: InMemoryConnector) -> None:
    output = await TagIt().execute(
        HelperInput(contact_id="c2", config={"action": "apply", "tag_ids": ["nope"]}, connector=connector)
    )
    assert output.success is False
    assert tag_ids(connector, "c2") == []


def test_tag_it_rejects_non_string_tag_ids() -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        TagIt().validate_config({"action": "apply", "tag_ids": [1, 2]})
    assert exc_info.value.field.startswith("tag_ids")


# --- clear_tags -------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "config, removed",
    [
        ({"mode": "specific", "tag_ids": ["t1", "t3"]}, ["t1", "t3"]),
        ({"mode": "all"}, ["t1", "t2", "t3"]),
        ({"mode": "prefix", "prefix": "lead:"}, ["t2", "t3"]),
        ({"mode": "category", "category": "status"}, ["t1"]),
    ],
)
async def test_clear_tags_modes(connector: InMemoryConnector, config: dict, removed: list[str]) -> None:
    ClearTags().validate_config(config)

    output = await ClearTags().execute(HelperInput(contact_id="c1", config=config, connector=connector))

    assert output.success is True
    assert output.modified_data == {"tags_removed": removed}
    assert [a.value for a in output.actions] == removed
    assert not set(removed) & set(tag_ids(connector))
    assert output.message.endswith(f"({config['mode']} mode)")


@pytest.mark.asyncio
async def test_clear_tags_no_match_is_soft_success(connector: InMemoryConnector) -> None:
    output = await ClearTags().execute(
        HelperInput(contact_id="c1", config={"mode": "prefix", "prefix": "zzz"}, connector=connector)
    )
    assert output.success is True
    assert output.message == "No matching tags to remove"
    assert output.actions == []


@pytest.mark.asyncio
async def test_clear_tags_continues_past_failed_removal(flaky_connector: FlakyConnector) -> None:
    """One failed removal does not stop the batch."""
    flaky_connector.fail_remove.add("t2")

    output = await ClearTags().execute(
        HelperInput(contact_id="c1", config={"mode": "all"}, connector=flaky_connector)
    )

    assert output.success is True
    assert output.message == "Removed 2 of 3 tag(s) (all mode)"
    assert len(output.actions) < 3
    assert [a.value for a in output.actions] == ["t1", "t3"]
    assert any("Failed to remove tag t2" in line for line in output.logs)
    assert tag_ids(flaky_connector) == ["t2"]


@pytest.mark.asyncio
async def test_clear_tags_every_removal_failing(flaky_connector: FlakyConnector) -> None:
    flaky_connector.fail_remove.update({"t1"})
    output = await ClearTags().execute(
        HelperInput(contact_id="c1", config={"mode": "specific", "tag_ids": ["t1"]}, connector=flaky_connector)
    )
    assert output.success is False
    assert output.actions == []


@pytest.mark.asyncio
async def test_clear_tags_unknown_contact_fails(connector: InMemoryConnector) -> None:
    with pytest.raises(HelperExecutionError, match="Failed to load tags for contact 'ghost'"):
        await ClearTags().execute(HelperInput(contact_id="ghost", config={"mode": "all"}, connector=connector))


@pytest.mark.parametrize(
    "config, field",
    [
        ({"mode": "specific"}, "tag_ids"),
        ({"mode": "specific", "tag_ids": []}, "tag_ids"),
        ({"mode": "prefix"}, "prefix"),
        ({"mode": "category", "category": ""}, "category"),
    ],
)
def test_clear_tags_mode_requirements(config: dict, field: str) -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        ClearTags().validate_config(config)
    assert exc_info.value.field == field


# --- score_it ---------------------------------------------------------------


@pytest.mark.asyncio
async def test_score_it_sums_matching_rules(connector: InMemoryConnector) -> None:
    config = {
        "rules": [
            {"tag_id": "t1", "points": 10},
            {"tag_id": "t4", "has_tag": False, "points": 5},
            {"tag_id": "t4", "points": 100},
            {"tag_id": "t3", "has_tag": True, "points": -3},
        ],
        "target_field": "score",
    }
    ScoreIt().validate_config(config)

    output = await ScoreIt().execute(HelperInput(contact_id="c1", config=config, connector=connector))

    assert output.success is True
    assert connector.contacts["c1"].custom_fields["score"] == "12"
    assert output.message == "Scored contact: 12 points (3 of 4 rules matched)"
    assert output.modified_data == {"score": "12"}


@pytest.mark.asyncio
async def test_score_it_no_rules_match_stores_zero(connector: InMemoryConnector) -> None:
    config = {"rules": [{"tag_id": "t1", "points": 10}], "target_field": "score"}
    await ScoreIt().execute(HelperInput(contact_id="c2", config=config, connector=connector))
    assert connector.contacts["c2"].custom_fields["score"] == "0"


def test_score_it_rule_requires_tag_id() -> None:
    with pytest.raises(ConfigValidationError) as exc_info:
        ScoreIt().validate_config({"rules": [{"points": 3}], "target_field": "score"})
    assert exc_info.value.field == "rules[0].tag_id"


# --- count_tags -------------------------------------------------------------


@pytest.mark.asyncio
async def test_count_tags_total(connector: InMemoryConnector) -> None:
    output = await CountTags().execute(
        HelperInput(contact_id="c1", config={"target_field": "tag_count"}, connector=connector)
    )
    assert connector.contacts["c1"].custom_fields["tag_count"] == "3"
    assert output.message == "Counted 3 total tags"


@pytest.mark.asyncio
async def test_count_tags_in_category(connector: InMemoryConnector) -> None:
    output = await CountTags().execute(
        HelperInput(contact_id="c1", config={"target_field": "tag_count", "category": "lead"}, connector=connector)
    )
    assert connector.contacts["c1"].custom_fields["tag_count"] == "2"
    assert output.modified_data == {"tag_count": "2"}


@pytest.mark.asyncio
async def test_count_tags_write_failure(flaky_connector: FlakyConnector) -> None:
    flaky_connector.fail_set.add("tag_count")
    with pytest.raises(HelperExecutionError) as exc_info:
        await CountTags().execute(
            HelperInput(contact_id="c1", config={"target_field": "tag_count"}, connector=flaky_connector)
        )
    assert exc_info.value.output is not None
    assert exc_info.value.output.actions == []
