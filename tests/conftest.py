"""
tests/conftest.py
Shared fixtures for memos-sync tests.
Provides an isolated working directory and an in-process fake Memos server
served through ``httpx.MockTransport``.
"""

import os
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import yaml

API_URL = "https://memos.test/api/v1"


@pytest.fixture
def tmp_workdir(tmp_path, monkeypatch):
    """Provide an isolated working directory with a minimal config/memos.yaml."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MEMOS_API_URL", raising=False)
    monkeypatch.delenv("MEMOS_ACCESS_TOKEN", raising=False)
    os.makedirs("config", exist_ok=True)

    with open("config/memos.yaml", "w") as f:
        yaml.dump({
            "api_url": API_URL,
            "access_token": "test-token",
            "sync_directory": "vault/memos",
            "sync_limit": 50,
        }, f)

    return tmp_path


class FakeMemosServer:
    """Serves memo pages and attachment bytes; records every request.

    ``pages`` is a list of page bodies (dicts, or ready ``httpx.Response``
    objects), or a callable ``(index, request) -> body`` for endless servers.
    Requests past the end of the list get an empty page.
    """

    def __init__(self, pages=None, files=None):
        self.pages = pages if pages is not None else []
        self.files = files or {}
        self.requests: list[httpx.Request] = []

    @property
    def list_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/memos")]

    @property
    def file_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if "/file/attachments/" in r.url.path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if "/file/attachments/" in request.url.path:
            raw_path = request.url.raw_path.decode().split("?", 1)[0]
            data = self.files.get(raw_path)
            if data is None:
                return httpx.Response(404, text="attachment not found")
            return httpx.Response(200, content=data)

        index = len(self.list_requests) - 1
        if callable(self.pages):
            body = self.pages(index, request)
        elif index < len(self.pages):
            body = self.pages[index]
        else:
            body = {"memos": []}
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(200, json=body)


def make_memos(count, start=0, newest=None, step_minutes=1):
    """``count`` memos with strictly decreasing createTime, named memos/m<N>."""
    newest = newest or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    memos = []
    for i in range(start, start + count):
        created = newest - timedelta(minutes=i * step_minutes)
        memos.append({
            "name": f"memos/m{i}",
            "content": f"memo number {i}",
            "createTime": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "updateTime": created.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "visibility": "PRIVATE",
            "tags": [],
        })
    return memos


@pytest.fixture
def memos_factory():
    return make_memos


@pytest.fixture
def fake_server():
    """Factory: ``fake_server(pages, files=None) -> FakeMemosServer``."""
    return FakeMemosServer
