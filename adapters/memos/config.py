"""
adapters/memos/config.py — MemosSettings: plugin settings for the Memos sync.

Settings live in ``config/memos.yaml`` (see ``core/settings_store.py``) and
are merged over ``DEFAULT_SETTINGS`` on load. The merge is a plain shallow
overlay: known keys replace the default, unknown keys are dropped.

The access token can be kept out of the file: set ``access_token_env`` to
the name of an environment variable and leave ``access_token`` empty. The
variable is resolved when a service is built, never written back.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

API_VERSION_PATH = "/api/v1"

# camelCase keys as found in a host plugin data.json
_LEGACY_KEYS = {
    "apiUrl": "api_url",
    "accessToken": "access_token",
    "syncDirectory": "sync_directory",
    "syncLimit": "sync_limit",
}


@dataclass(frozen=True)
class MemosSettings:
    """Memos sync settings."""

    # ── API connection ────────────────────────────────────────────────────
    api_url: str = ""                  # e.g. https://memos.example.com/api/v1
    access_token: str = ""
    access_token_env: str = ""         # env var holding the token
    request_timeout: float = 30.0

    # ── sync ──────────────────────────────────────────────────────────────
    sync_directory: str = "memos"
    sync_limit: int = 1000
    max_pages: Optional[int] = None    # None = bounded by sync_limit

    # ──────────────────────────────────────────────────────────────────────
    #  Helpers
    # ──────────────────────────────────────────────────────────────────────

    @property
    def effective_token(self) -> str:
        if self.access_token:
            return self.access_token
        if self.access_token_env:
            return os.environ.get(self.access_token_env, "")
        return ""

    @property
    def has_versioned_url(self) -> bool:
        return API_VERSION_PATH in self.api_url

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def masked(self) -> dict[str, Any]:
        """Settings safe to print or log."""
        data = self.to_dict()
        token = self.effective_token
        data["access_token"] = f"{token[:4]}…" if token else "(not set)"
        return data


DEFAULT_SETTINGS = MemosSettings()

_FIELD_TYPES = {f.name: f.type for f in fields(MemosSettings)}


def merge_settings(defaults: MemosSettings,
                   loaded: Optional[Mapping[str, Any]]) -> MemosSettings:
    """Overlay ``loaded`` on ``defaults``; returns a new settings object.

    ``None`` values leave the default in place, so an empty YAML key does
    not wipe a setting.
    """
    if not loaded:
        return defaults

    changes: dict[str, Any] = {}
    for key, value in loaded.items():
        name = _LEGACY_KEYS.get(key, key)
        if name not in _FIELD_TYPES:
            logger.debug("[memos] ignoring unknown setting %r", key)
            continue
        if value is None:
            continue
        changes[name] = value
    return replace(defaults, **changes)


def coerce_setting(key: str, raw: str) -> tuple[str, Any]:
    """Resolve ``key`` to a field name and convert ``raw`` to its type."""
    name = _LEGACY_KEYS.get(key, key)
    if name not in _FIELD_TYPES:
        raise KeyError(f"unknown setting: {key}")
    kind = _FIELD_TYPES[name]
    if name == "max_pages":
        return name, (None if raw.lower() in ("", "none", "null") else int(raw))
    if kind == "int":
        return name, int(raw)
    if kind == "float":
        return name, float(raw)
    return name, raw
