"""
adapters/memos/models.py — Shapes exchanged with the Memos v1 API.

Memo items themselves stay plain dicts: they are passed through exactly as
the server sent them. Only the page envelope and attachment references get
a typed wrapper.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from adapters.memos.errors import MalformedResponseError

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)
# Memos emits nanosecond fractions; datetime keeps six digits at most
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


# ── page envelope ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PageResponse:
    """One page of ``GET /memos``."""
    memos: list[dict]
    next_page_token: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "PageResponse":
        if not isinstance(data, dict) or not isinstance(data.get("memos"), list):
            raise MalformedResponseError(
                "Invalid response format: body does not contain a memos array")
        if not all(isinstance(m, Mapping) for m in data["memos"]):
            raise MalformedResponseError(
                "Invalid response format: memos array holds a non-object entry")
        # An empty string cursor is the same as no cursor
        token = data.get("nextPageToken") or None
        return cls(memos=data["memos"], next_page_token=token)


# ── attachments ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AttachmentRef:
    """Reference to a binary attachment (``attachments/{id}``)."""
    name: str
    filename: str
    type: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttachmentRef":
        return cls(
            name=str(data.get("name", "")),
            filename=str(data.get("filename", "")),
            type=str(data.get("type") or ""),
        )

    @property
    def attachment_id(self) -> str:
        """Last ``/`` segment of ``name``; the whole name if that is empty."""
        return self.name.rsplit("/", 1)[-1] or self.name


def attachment_refs(memo: Mapping[str, Any]) -> list[AttachmentRef]:
    """Attachment references of a memo.

    Newer servers list them under ``attachments``, older ones under
    ``resources``; entries without a name or filename are skipped.
    """
    raw = memo.get("attachments") or memo.get("resources") or []
    refs = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        ref = AttachmentRef.from_dict(item)
        if ref.name and ref.filename:
            refs.append(ref)
    return refs


# ── timestamps ────────────────────────────────────────────────────────────

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as sent by Memos; ``None`` if unusable."""
    if not isinstance(value, str) or not value:
        return None
    text = _FRACTION_RE.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_create_time(memos: list[dict]) -> list[dict]:
    """Newest first. Equal timestamps keep their fetch order.

    Items whose ``createTime`` cannot be parsed sort last.
    """
    def key(memo: dict) -> datetime:
        parsed = parse_timestamp(memo.get("createTime"))
        if parsed is None:
            logger.debug("[memos] unparseable createTime on %s", memo.get("name", "?"))
            return _EPOCH
        return parsed

    # sorted() stays stable with reverse=True
    return sorted(memos, key=key, reverse=True)
