"""
adapters/memos/sync.py — Memos → local Markdown sync pipeline.

Full pipeline:
    [Memos API]
    → fetch_all_memos (paged, capped at sync_limit, newest first)
    → one Markdown note per memo (YAML front matter + content)
    → attachments downloaded next to the notes

A failed memo fetch aborts the run before anything is written. A failed
attachment is counted and skipped; the rest of the batch carries on.

Usage::

    syncer = MemosSyncer(MemosService.from_settings(settings), "memos")
    report = await syncer.sync()
"""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import yaml

from adapters.memos.errors import Err
from adapters.memos.models import AttachmentRef, attachment_refs, parse_timestamp
from core.logging_config import set_sync_id

if TYPE_CHECKING:
    from adapters.memos.client import MemosService

logger = logging.getLogger(__name__)

ATTACHMENTS_DIRNAME = "attachments"
_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')
_IMAGE_PREFIX = "image/"


@dataclass
class SyncReport:
    """Statistics from a sync run."""
    aborted: bool = False
    total_fetched: int = 0
    notes_written: int = 0
    attachments_downloaded: int = 0
    attachments_failed: int = 0
    stop_reason: str = ""
    output_path: str = ""
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", name).strip().strip(".")
    return cleaned or "untitled"


def memo_id(memo: dict) -> str:
    name = str(memo.get("name") or memo.get("uid") or "")
    return name.rsplit("/", 1)[-1] or "unknown"


def note_filename(memo: dict) -> str:
    created = parse_timestamp(memo.get("createTime"))
    prefix = created.strftime("%Y-%m-%d") if created else "undated"
    return safe_filename(f"{prefix} {memo_id(memo)}") + ".md"


def unique_note_filename(memo: dict, taken: set[str]) -> str:
    """``note_filename`` with a " (2)", " (3)" ... suffix if already taken this run."""
    name = note_filename(memo)
    stem = name[:-len(".md")]
    n = 1
    while name in taken:
        n += 1
        name = f"{stem} ({n}).md"
    taken.add(name)
    return name


def attachment_filename(ref: AttachmentRef) -> str:
    return safe_filename(f"{ref.attachment_id}_{ref.filename}")


def render_note(memo: dict, linked: list[tuple[AttachmentRef, bool]]) -> str:
    """Markdown note for ``memo``; ``linked`` pairs each ref with its download status."""
    meta = {
        "id": memo_id(memo),
        "created": memo.get("createTime", ""),
        "updated": memo.get("updateTime", ""),
        "visibility": memo.get("visibility", ""),
        "tags": list(memo.get("tags") or []),
    }
    front = yaml.safe_dump(meta, allow_unicode=True, sort_keys=False).strip()
    lines = ["---", front, "---", "", str(memo.get("content", "")).rstrip()]

    if linked:
        lines.append("")
        for ref, ok in linked:
            target = f"{ATTACHMENTS_DIRNAME}/{attachment_filename(ref)}"
            if not ok:
                lines.append(f"- {ref.filename} (unavailable)")
            elif ref.type.startswith(_IMAGE_PREFIX):
                lines.append(f"![{ref.filename}]({quote_link(target)})")
            else:
                lines.append(f"- [{ref.filename}]({quote_link(target)})")
    return "\n".join(lines) + "\n"


def quote_link(target: str) -> str:
    return target.replace(" ", "%20")


class MemosSyncer:
    """Fetch memos and write them, with their attachments, to a directory."""

    def __init__(self, service: "MemosService", sync_directory: str):
        self.service = service
        self.sync_directory = sync_directory

    async def sync(self) -> SyncReport:
        set_sync_id()
        start = time.time()
        report = SyncReport(output_path=self.sync_directory)

        result = await self.service.fetch_all_memos()
        if isinstance(result, Err):
            report.aborted = True
            report.errors.append(str(result.error))
            report.duration_seconds = round(time.time() - start, 2)
            logger.error("[memos-sync] aborted: %s", result.error)
            return report

        memos = result.value
        report.total_fetched = len(memos)
        report.stop_reason = result.stop_reason
        logger.info("[memos-sync] fetched %d memos (%s)", len(memos), result.stop_reason)

        attachments_dir = os.path.join(self.sync_directory, ATTACHMENTS_DIRNAME)
        os.makedirs(self.sync_directory, exist_ok=True)

        taken: set[str] = set()
        for memo in memos:
            linked = []
            for ref in attachment_refs(memo):
                ok = await self._save_attachment(ref, attachments_dir, report)
                linked.append((ref, ok))
            try:
                self._write_note(unique_note_filename(memo, taken), memo, linked)
                report.notes_written += 1
            except OSError as e:
                report.errors.append(f"{memo_id(memo)}: {e}")
                logger.error("[memos-sync] writing note %s failed: %s", memo_id(memo), e)

        report.duration_seconds = round(time.time() - start, 2)
        logger.info("[memos-sync] wrote %d notes, %d attachments (%d failed) in %.2fs",
                    report.notes_written, report.attachments_downloaded,
                    report.attachments_failed, report.duration_seconds)
        return report

    async def _save_attachment(self, ref: AttachmentRef, attachments_dir: str,
                               report: SyncReport) -> bool:
        data = await self.service.download_resource(ref)
        if data is None:
            report.attachments_failed += 1
            return False
        try:
            os.makedirs(attachments_dir, exist_ok=True)
            path = os.path.join(attachments_dir, attachment_filename(ref))
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            report.attachments_failed += 1
            report.errors.append(f"{ref.name}: {e}")
            logger.error("[memos-sync] writing attachment %s failed: %s", ref.name, e)
            return False
        report.attachments_downloaded += 1
        return True

    def _write_note(self, filename: str, memo: dict,
                    linked: list[tuple[AttachmentRef, bool]]) -> None:
        path = os.path.join(self.sync_directory, filename)
        tmp = path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(render_note(memo, linked))
        os.replace(tmp, path)
