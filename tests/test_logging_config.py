"""Tests for core/logging_config.py."""
from __future__ import annotations

import asyncio
import json
import logging

import pytest

from core.logging_config import (
    LOG_FILENAME,
    StructuredFormatter,
    get_sync_id,
    set_sync_id,
    setup_logging,
)


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def _record(msg="hello %s", args=("world",), exc_info=None):
    return logging.LogRecord("adapters.memos.client", logging.INFO, __file__, 1,
                             msg, args, exc_info)


class TestSyncId:

    def test_generates_short_id(self):
        sid = set_sync_id()
        assert len(sid) == 8
        assert get_sync_id() == sid

    def test_explicit_id(self):
        set_sync_id("run-42")
        assert get_sync_id() == "run-42"

    @pytest.mark.asyncio
    async def test_concurrent_tasks_keep_their_own_id(self):
        async def run(sid):
            set_sync_id(sid)
            await asyncio.sleep(0)
            return get_sync_id()

        assert await asyncio.gather(run("first"), run("second")) == ["first", "second"]


class TestStructuredFormatter:

    def test_json_fields(self):
        set_sync_id("abc")
        entry = json.loads(StructuredFormatter().format(_record()))

        assert entry["msg"] == "hello world"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "adapters.memos.client"
        assert entry["sid"] == "abc"

    def test_exception_included(self):
        try:
            raise ValueError("bad page")
        except ValueError:
            import sys
            record = _record(exc_info=sys.exc_info())
        entry = json.loads(StructuredFormatter().format(record))
        assert "ValueError: bad page" in entry["exception"]


class TestSetupLogging:

    def test_writes_log_file(self, tmp_path, restore_root_logging):
        log_dir = tmp_path / "logs"
        setup_logging(level="DEBUG", structured=True, log_dir=str(log_dir))

        logging.getLogger("adapters.memos.sync").info("[memos-sync] wrote %d notes", 3)
        for h in logging.getLogger().handlers:
            h.flush()

        line = (log_dir / LOG_FILENAME).read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["msg"] == "[memos-sync] wrote 3 notes"

    def test_httpx_is_quietened(self, tmp_path, restore_root_logging):
        setup_logging(log_dir=str(tmp_path))
        assert logging.getLogger("httpx").level == logging.WARNING
