# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

"""Built-in helpers and registry construction."""

from functools import partial

from crm_helpers.config import AppConfig
from crm_helpers.helpers.automation.goal_it import GoalIt
from crm_helpers.helpers.automation.trigger_it import TriggerIt
from crm_helpers.helpers.contact.copy_it import CopyIt
from crm_helpers.helpers.contact.default_to_field import DefaultToField
from crm_helpers.helpers.contact.name_parse_it import NameParseIt
from crm_helpers.helpers.data.advance_math import AdvanceMath
from crm_helpers.helpers.data.date_calc import DateCalc
from crm_helpers.helpers.data.format_it import FormatIt
from crm_helpers.helpers.data.ip_location import IPLocation
from crm_helpers.helpers.data.math_it import MathIt
from crm_helpers.helpers.data.word_count_it import WordCountIt
from crm_helpers.helpers.tagging.clear_tags import ClearTags
from crm_helpers.helpers.tagging.count_tags import CountTags
from crm_helpers.helpers.tagging.score_it import ScoreIt
from crm_helpers.helpers.tagging.tag_it import TagIt
from crm_helpers.interfaces import Helper
from crm_helpers.loader import PluginLoader
from crm_helpers.registry import HelperRegistry
from crm_helpers.utils.logger import logger

BUILTIN_HELPERS: tuple[type[Helper], ...] = (
    AdvanceMath,
    DateCalc,
    FormatIt,
    IPLocation,
    MathIt,
    WordCountIt,
    ClearTags,
    CountTags,
    ScoreIt,
    TagIt,
    CopyIt,
    DefaultToField,
    NameParseIt,
    GoalIt,
    TriggerIt,
)


def register_builtin_helpers(registry: HelperRegistry, config: AppConfig | None = None) -> None:
    """Register every built-in helper type on the given registry."""
    config = config or AppConfig()
    registry.register(AdvanceMath.helper_type, AdvanceMath)
    registry.register(DateCalc.helper_type, DateCalc)
    registry.register(FormatIt.helper_type, FormatIt)
    registry.register(
        IPLocation.helper_type,
        partial(IPLocation, base_url=config.ip_lookup.base_url, timeout=config.ip_lookup.timeout),
    )
    registry.register(MathIt.helper_type, MathIt)
    registry.register(WordCountIt.helper_type, WordCountIt)
    registry.register(ClearTags.helper_type, ClearTags)
    registry.register(CountTags.helper_type, CountTags)
    registry.register(ScoreIt.helper_type, ScoreIt)
    registry.register(TagIt.helper_type, TagIt)
    registry.register(CopyIt.helper_type, CopyIt)
    registry.register(DefaultToField.helper_type, DefaultToField)
    registry.register(NameParseIt.helper_type, NameParseIt)
    registry.register(GoalIt.helper_type, GoalIt)
    registry.register(TriggerIt.helper_type, TriggerIt)


def build_registry(config: AppConfig | None = None) -> HelperRegistry:
    """
    Construct and populate a registry.

    Built-ins are registered first, then configured plugins (which may
    override built-ins), then `disabled_helpers` are removed.

    Args:
        config: Host configuration. Defaults to an empty AppConfig.

    Returns:
        HelperRegistry: The populated registry.
    """
    config = config or AppConfig()
    registry = HelperRegistry()
    register_builtin_helpers(registry, config)

    if config.plugins:
        PluginLoader(config).load_all(registry)

    for helper_type in config.disabled_helpers:
        if not registry.unregister(helper_type):
            logger.warning(f"Cannot disable unknown helper type '{helper_type}'")

    logger.info(f"Helper registry ready with {len(registry)} helper types")
    return registry


__all__ = ["BUILTIN_HELPERS", "build_registry", "register_builtin_helpers"]
