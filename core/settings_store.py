"""
core/settings_store.py
Persistence for the plugin settings file (``config/memos.yaml``).

load() merges the file over DEFAULT_SETTINGS; save() writes the settings
back as-is. Writes go through a temp file + os.replace under a FileLock so
a concurrent reader never sees half a file.
"""

from __future__ import annotations
import logging
import os
from typing import Optional

import yaml
from filelock import FileLock

from adapters.memos.config import DEFAULT_SETTINGS, MemosSettings, merge_settings
from adapters.memos.errors import ConfigurationError

logger = logging.getLogger(__name__)

SETTINGS_FILE = os.path.join("config", "memos.yaml")


class SettingsStore:
    """YAML-backed MemosSettings storage."""

    def __init__(self, path: str = SETTINGS_FILE,
                 defaults: Optional[MemosSettings] = None):
        self.path = path
        self.defaults = defaults or DEFAULT_SETTINGS
        self._lock = FileLock(path + ".lock")

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def load_raw(self) -> dict:
        """File content as a dict; empty when the file is missing."""
        if not self.exists():
            return {}
        with self._lock:
            with open(self.path, encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ConfigurationError(f"invalid YAML in {self.path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{self.path} must hold a mapping, got {type(data).__name__}")
        return data

    def load(self) -> MemosSettings:
        settings = merge_settings(self.defaults, self.load_raw())
        logger.debug("[settings] loaded %s", self.path)
        return settings

    def save(self, settings: MemosSettings) -> None:
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        with self._lock:
            with open(tmp, "w", encoding="utf-8") as f:
                yaml.safe_dump(settings.to_dict(), f, default_flow_style=False,
                               allow_unicode=True, sort_keys=False)
            os.replace(tmp, self.path)
        logger.info("[settings] written: %s", self.path)
