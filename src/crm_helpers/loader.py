# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_connect

import importlib
import importlib.util
import re
import sys
from pathlib import Path
from types import ModuleType

from crm_helpers.config import AppConfig, PluginConfig
from crm_helpers.registry import HelperRegistry
from crm_helpers.utils.logger import logger

PLUGIN_MODULE_PREFIX = "crm_helpers_plugin_"


def normalize_plugin_id(plugin_id: str) -> str:
    """Turn a plugin id into a valid module name fragment."""
    return re.sub(r"\W", "_", plugin_id.strip().lower())


class PluginLoader:
    """
    Loads extra helper modules named in the configuration.

    Each plugin module must expose a module-level `register(registry)` function
    that registers its helpers explicitly. Failing plugins are logged and
    skipped; they never abort startup.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def load_all(self, registry: HelperRegistry) -> list[str]:
        """
        Import every configured plugin and let it register its helpers.

        Args:
            registry: The registry plugins register into.

        Returns:
            list[str]: IDs of the plugins that loaded successfully, in config order.
        """
        loaded = []
        for plugin in self.config.plugins:
            before = len(registry)
            try:
                module = self._import(plugin)
                register = getattr(module, "register", None)
                if not callable(register):
                    raise TypeError(f"Plugin module '{module.__name__}' has no register(registry) function")
                register(registry)
            except Exception as e:
                logger.error(f"Failed to load plugin '{plugin.id}': {e}")
                continue
            loaded.append(plugin.id)
            logger.info(f"Loaded plugin '{plugin.id}' ({len(registry) - before} new helper types)")
        return loaded

    def _import(self, plugin: PluginConfig) -> ModuleType:
        if plugin.type == "local_python":
            return self._import_file(plugin)
        if plugin.type == "module":
            if not plugin.module:
                raise ValueError(f"Plugin '{plugin.id}' of type 'module' has no module path")
            return importlib.import_module(plugin.module)
        raise ValueError(f"Unsupported plugin type '{plugin.type}'")

    def _import_file(self, plugin: PluginConfig) -> ModuleType:
        if not plugin.path:
            raise ValueError(f"Plugin '{plugin.id}' of type 'local_python' has no path")

        file_path = Path(plugin.path).resolve()
        if not file_path.is_file():
            raise FileNotFoundError(f"Plugin file not found: {file_path}")

        module_name = PLUGIN_MODULE_PREFIX + normalize_plugin_id(plugin.id)
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create import spec for {file_path}")

        module = importlib.util.module_from_spec(spec)
        plugin_dir = str(file_path.parent)
        # Sibling modules next to the plugin file are importable during load only.
        sys.path.insert(0, plugin_dir)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        finally:
            if plugin_dir in sys.path:
                sys.path.remove(plugin_dir)
        return module
