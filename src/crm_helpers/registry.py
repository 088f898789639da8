# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import threading
from typing import Callable

from crm_helpers.interfaces import Helper
from crm_helpers.types import HelperInfo, HelperNotRegisteredError
from crm_helpers.utils.logger import logger

HelperFactory = Callable[[], Helper]


class HelperRegistry:
    """Maps helper type strings to zero-argument helper factories.

    Built once at startup (see `crm_helpers.helpers.build_registry`) and then
    read many times. Access is guarded by a lock so plugin loading can race
    with lookups.
    """

    def __init__(self) -> None:
        self._factories: dict[str, HelperFactory] = {}
        self._lock = threading.RLock()

    def register(self, helper_type: str, factory: HelperFactory) -> None:
        """Register a factory for a helper type.

        Registering the same factory twice is a no-op. Registering a different
        factory for a known type replaces it (last registration wins).

        Args:
            helper_type: Stable identifier, e.g. "math_it".
            factory: Zero-argument callable returning a fresh Helper.

        Raises:
            ValueError: If the type is empty or the factory is not callable.
        """
        if not helper_type:
            raise ValueError("helper_type must be a non-empty string")
        if not callable(factory):
            raise ValueError(f"factory for helper '{helper_type}' must be callable")

        with self._lock:
            existing = self._factories.get(helper_type)
            if existing is factory:
                return
            if existing is not None:
                logger.warning(f"Duplicate helper type '{helper_type}' registered. Overwriting.")
            self._factories[helper_type] = factory
        logger.debug(f"Registered helper '{helper_type}'")

    def unregister(self, helper_type: str) -> bool:
        """Remove a helper type. Returns True if it was registered."""
        with self._lock:
            return self._factories.pop(helper_type, None) is not None

    def is_registered(self, helper_type: str) -> bool:
        with self._lock:
            return helper_type in self._factories

    def new_helper(self, helper_type: str) -> Helper:
        """Instantiate a fresh helper.

        Raises:
            HelperNotRegisteredError: If the type is unknown.
        """
        with self._lock:
            factory = self._factories.get(helper_type)
        if factory is None:
            raise HelperNotRegisteredError(helper_type)
        return factory()

    def helper_types(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def list_helper_info(self) -> list[HelperInfo]:
        """Catalog of every registered helper, sorted by category then name.

        A throwaway instance of each helper is built to read its metadata and
        config schema. Helpers that fail to build or describe themselves are
        logged and left out of the catalog.
        """
        with self._lock:
            factories = list(self._factories.items())

        infos = []
        for helper_type, factory in factories:
            try:
                helper = factory()
                info = HelperInfo(
                    **helper.get_metadata().model_dump(),
                    config_schema=helper.get_config_schema(),
                )
            except Exception as e:
                logger.error(f"Failed to describe helper '{helper_type}': {e}")
                continue
            infos.append(info)
        infos.sort(key=lambda info: (info.category, info.name, info.type))
        return infos

    def categories(self) -> list[str]:
        return sorted({info.category for info in self.list_helper_info()})

    def __contains__(self, helper_type: object) -> bool:
        return isinstance(helper_type, str) and self.is_registered(helper_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._factories)
