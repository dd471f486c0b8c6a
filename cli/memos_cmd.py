"""
cli/memos_cmd.py — ``memos-sync`` actions.

Actions:
    status  — show settings (token masked)
    sync    — fetch memos + attachments into the sync directory
    config  — ``show`` the settings file or ``set <key> <value>``
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import replace
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from adapters.memos.config import coerce_setting
from adapters.memos.errors import MemosError
from core.plugin import MemosSyncPlugin
from core.settings_store import SettingsStore

logger = logging.getLogger(__name__)

ENV_API_URL = "MEMOS_API_URL"
ENV_ACCESS_TOKEN = "MEMOS_ACCESS_TOKEN"


class _theme:
    heading = "bold cyan"
    success = "bold green"
    warning = "bold yellow"
    error = "bold red"
    muted = "dim"


def _load_plugin(settings_path: Optional[str] = None) -> MemosSyncPlugin:
    """Load the plugin; MEMOS_API_URL / MEMOS_ACCESS_TOKEN override the file."""
    store = SettingsStore(settings_path) if settings_path else SettingsStore()
    plugin = MemosSyncPlugin(store)
    plugin.on_load()

    overrides = {}
    if os.environ.get(ENV_API_URL):
        overrides["api_url"] = os.environ[ENV_API_URL]
    if os.environ.get(ENV_ACCESS_TOKEN):
        overrides["access_token"] = os.environ[ENV_ACCESS_TOKEN]
    if overrides:
        logger.debug("[cli] env overrides: %s", ", ".join(sorted(overrides)))
        plugin.settings = replace(plugin.settings, **overrides)
    return plugin


# ══════════════════════════════════════════════════════════════════════════════
#  Main dispatcher
# ══════════════════════════════════════════════════════════════════════════════

def cmd_memos(
    action: str = "status",
    *,
    limit: Optional[int] = None,
    directory: Optional[str] = None,
    config_action: str = "show",
    key: str = "",
    value: str = "",
    settings_path: Optional[str] = None,
    console: Optional[Console] = None,
) -> int:
    """Dispatch ``memos-sync <action>``; returns the process exit code."""
    console = console or Console()

    try:
        if action == "status":
            return _memos_status(console, settings_path)
        if action == "sync":
            return _memos_sync(console, settings_path, limit=limit, directory=directory)
        if action == "config":
            return _memos_config(console, settings_path, config_action, key, value)
    except MemosError as e:
        console.print(f"[{_theme.error}]{escape(str(e))}[/{_theme.error}]")
        return 1

    console.print(f"[{_theme.error}]Unknown action: {escape(action)}[/{_theme.error}]")
    return 2


# ══════════════════════════════════════════════════════════════════════════════
#  Actions
# ══════════════════════════════════════════════════════════════════════════════

def _settings_table(data: dict) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    for k, v in data.items():
        table.add_row(k, "(none)" if v is None else escape(str(v)))
    return table


def _memos_status(console: Console, settings_path: Optional[str]) -> int:
    plugin = _load_plugin(settings_path)
    try:
        _print_status(console, plugin)
    finally:
        plugin.on_unload()
    return 0


def _print_status(console: Console, plugin: MemosSyncPlugin) -> None:
    settings = plugin.settings

    console.print(f"\n[{_theme.heading}]Memos Sync[/{_theme.heading}]\n")
    console.print(_settings_table(settings.masked()))
    if not plugin.store.exists():
        console.print(f"\n  [{_theme.muted}]No settings file at {plugin.store.path}; "
                      f"using defaults[/{_theme.muted}]")
    if settings.api_url and not settings.has_versioned_url:
        console.print(f"\n  [{_theme.warning}]api_url should contain /api/v1[/{_theme.warning}]")


def _memos_sync(console: Console, settings_path: Optional[str], *,
                limit: Optional[int], directory: Optional[str]) -> int:
    plugin = _load_plugin(settings_path)
    try:
        return _run_sync(console, plugin, limit=limit, directory=directory)
    finally:
        plugin.on_unload()


def _run_sync(console: Console, plugin: MemosSyncPlugin, *,
              limit: Optional[int], directory: Optional[str]) -> int:
    overrides = {}
    if limit is not None:
        overrides["sync_limit"] = limit
    if directory:
        overrides["sync_directory"] = directory
    if overrides:
        plugin.settings = replace(plugin.settings, **overrides)

    settings = plugin.settings
    console.print(f"\n[{_theme.heading}]Syncing memos[/{_theme.heading}] "
                  f"from {settings.api_url or '(no api_url)'} "
                  f"(limit {settings.sync_limit}) → {settings.sync_directory}\n")

    report = asyncio.run(plugin.sync())

    if report.aborted:
        console.print(f"[{_theme.error}]Sync failed: {escape(report.errors[0])}[/{_theme.error}]")
        return 1

    console.print(f"[{_theme.success}]✓[/{_theme.success}] Sync complete\n")
    console.print(f"  Fetched:       {report.total_fetched}")
    console.print(f"  Notes:         {report.notes_written}")
    console.print(f"  Attachments:   {report.attachments_downloaded}")
    if report.attachments_failed:
        console.print(f"  [{_theme.warning}]Unavailable:   "
                      f"{report.attachments_failed}[/{_theme.warning}]")
    console.print(f"  Stopped:       {report.stop_reason}")
    console.print(f"  Duration:      {report.duration_seconds}s")
    for err in report.errors[:5]:
        console.print(f"    [{_theme.muted}]{escape(err)}[/{_theme.muted}]")
    return 0


def _memos_config(console: Console, settings_path: Optional[str],
                  config_action: str, key: str, value: str) -> int:
    store = SettingsStore(settings_path) if settings_path else SettingsStore()
    plugin = MemosSyncPlugin(store)
    plugin.load_settings()

    if config_action == "show":
        console.print(_settings_table(plugin.settings.masked()))
        return 0

    if config_action == "set":
        if not key:
            console.print(f"[{_theme.error}]Usage: memos-sync config set <key> <value>"
                          f"[/{_theme.error}]")
            return 2
        try:
            name, typed = coerce_setting(key, value)
        except (KeyError, ValueError) as e:
            console.print(f"[{_theme.error}]{escape(str(e))}[/{_theme.error}]")
            return 2
        plugin.update_settings(**{name: typed})
        shown = "(hidden)" if name == "access_token" else typed
        console.print(f"[{_theme.success}]✓[/{_theme.success}] {name} = {shown}")
        return 0

    console.print(f"[{_theme.error}]Unknown config action: {config_action}[/{_theme.error}]")
    return 2
