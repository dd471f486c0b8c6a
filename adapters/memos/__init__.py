"""
adapters/memos/ — Memos (usememos) REST API integration.

Pulls memos and their attachments from a Memos server into local
Markdown notes.

Public API:
    MemosSettings   — plugin settings (merged over DEFAULT_SETTINGS)
    MemosService    — paged memo fetch + attachment download
    MemosSyncer     — fetch → notes → attachments pipeline
    Ok / Err        — fetch result variants
"""

from adapters.memos.client import MemosService  # noqa: F401
from adapters.memos.config import DEFAULT_SETTINGS, MemosSettings, merge_settings  # noqa: F401
from adapters.memos.errors import (  # noqa: F401
    ConfigurationError,
    Err,
    MalformedResponseError,
    MemosError,
    NetworkUnavailableError,
    Ok,
    TransportError,
)
from adapters.memos.sync import MemosSyncer, SyncReport  # noqa: F401

__all__ = [
    "MemosService",
    "MemosSettings",
    "DEFAULT_SETTINGS",
    "merge_settings",
    "MemosSyncer",
    "SyncReport",
    "MemosError",
    "ConfigurationError",
    "TransportError",
    "MalformedResponseError",
    "NetworkUnavailableError",
    "Ok",
    "Err",
]
