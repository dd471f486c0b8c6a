"""
core/logging_config.py
Logging setup for memos-sync, with a per-run sync ID so every line of one
sync can be grepped together. Optional JSON log format.
"""

from __future__ import annotations
import contextvars
import json
import logging
import os
import time
import uuid

LOG_FILENAME = "memos-sync.log"

# ── Sync ID (per-run tracing) ─────────────────────────────────────────────

# Context-local, so concurrent syncs on one event loop keep their own ID
_sync_id: contextvars.ContextVar[str] = contextvars.ContextVar("memos_sync_id", default="")


def set_sync_id(sid: str = "") -> str:
    """Set the sync ID for the current context; a random one if empty."""
    value = sid or str(uuid.uuid4())[:8]
    _sync_id.set(value)
    return value


def get_sync_id() -> str:
    return _sync_id.get()


# ── Structured JSON Formatter ─────────────────────────────────────────────

class StructuredFormatter(logging.Formatter):
    """
    JSON log formatter.
    Fields: ts, level, logger, msg, sid (sync ID), extra, exception
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        sid = get_sync_id()
        if sid:
            entry["sid"] = sid

        if hasattr(record, "extra_data"):
            entry["extra"] = record.extra_data

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ── Setup ─────────────────────────────────────────────────────────────────

def setup_logging(level: str = "INFO", structured: bool = False,
                  log_dir: str = ".logs"):
    """
    Configure root logging.
    Args:
        level: log level for the log file (DEBUG/INFO/WARNING/ERROR)
        structured: if True, the log file is JSON lines
        log_dir: directory for the log file
    """
    os.makedirs(log_dir, exist_ok=True)
    file_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(file_level)

    for h in root.handlers[:]:
        root.removeHandler(h)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "[%(asctime)s][%(name)s][%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        )

    # Console shows warnings and errors only
    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(
        "[%(asctime)s][%(name)s] %(message)s", datefmt="%H:%M:%S"))
    console.setLevel(logging.WARNING)
    root.addHandler(console)

    file_handler = logging.FileHandler(os.path.join(log_dir, LOG_FILENAME),
                                       encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(file_level)
    root.addHandler(file_handler)

    # httpx logs every request at INFO; keep it out of our file
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root
