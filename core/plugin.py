"""
core/plugin.py
MemosSyncPlugin — host-side lifecycle of the Memos sync.

The host calls on_load() once at startup; settings are then available on
``plugin.settings``. Any change goes through update_settings(), which
persists immediately.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Optional

from adapters.memos.client import MemosService
from adapters.memos.config import DEFAULT_SETTINGS, MemosSettings
from adapters.memos.sync import MemosSyncer, SyncReport
from core.settings_store import SettingsStore

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class MemosSyncPlugin:

    def __init__(self, store: Optional[SettingsStore] = None,
                 transport: Optional["httpx.AsyncBaseTransport"] = None):
        self.store = store or SettingsStore()
        self.transport = transport
        self.settings: MemosSettings = DEFAULT_SETTINGS

    # ── lifecycle ─────────────────────────────────────────────────────────

    def on_load(self) -> None:
        self.load_settings()
        logger.info("[plugin] loaded, api_url=%s, sync_limit=%d",
                    self.settings.api_url or "(not set)", self.settings.sync_limit)

    def on_unload(self) -> None:
        logger.info("[plugin] unloaded")

    # ── settings ──────────────────────────────────────────────────────────

    def load_settings(self) -> MemosSettings:
        self.settings = self.store.load()
        return self.settings

    def save_settings(self) -> None:
        self.store.save(self.settings)

    def update_settings(self, **changes: Any) -> MemosSettings:
        self.settings = replace(self.settings, **changes)
        self.save_settings()
        return self.settings

    # ── sync ──────────────────────────────────────────────────────────────

    def create_service(self) -> MemosService:
        return MemosService.from_settings(self.settings, transport=self.transport)

    async def sync(self) -> SyncReport:
        syncer = MemosSyncer(self.create_service(), self.settings.sync_directory)
        return await syncer.sync()
