"""
adapters/memos/paging.py — Cursor pagination as an explicit state machine.

The pager never talks to the network. The caller asks it for the query
parameters of the next request, feeds it the parsed page, and repeats
until ``pager.done``::

    pager = Pager(limit=250)
    while not pager.done:
        page = PageResponse.from_json(await get(pager.params()))
        pager.feed(page)
    memos = pager.items

States:
    FETCHING  — another request is needed (``params()`` is valid)
    DONE      — terminal; ``stop_reason`` says why

A non-empty page always adds at least one item until the limit is hit, so
the loop ends after at most ``limit`` pages. ``max_pages`` can tighten that
bound further; a server that repeats a cursor is stopped immediately.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from adapters.memos.errors import ConfigurationError
from adapters.memos.models import PageResponse

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100  # server-side cap per request


class PagerState(str, Enum):
    FETCHING = "fetching"
    DONE = "done"


class StopReason(str, Enum):
    LIMIT_REACHED = "limit_reached"
    NO_CURSOR = "no_cursor"
    EMPTY_PAGE = "empty_page"
    PAGE_CAP = "page_cap"
    REPEATED_CURSOR = "repeated_cursor"


class Pager:
    """Accumulates memo pages up to ``limit`` items."""

    def __init__(self, limit: int, max_pages: Optional[int] = None):
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ConfigurationError(f"sync limit must be a positive integer, got {limit!r}")
        if max_pages is not None and max_pages <= 0:
            raise ConfigurationError(f"max_pages must be positive, got {max_pages!r}")

        self.limit = limit
        self.page_size = min(MAX_PAGE_SIZE, limit)
        self.max_pages = max_pages or limit
        self.items: list[dict] = []
        self.pages = 0
        self.token: Optional[str] = None
        self.state = PagerState.FETCHING
        self.stop_reason: Optional[StopReason] = None
        self._seen_tokens: set[str] = set()

    @property
    def done(self) -> bool:
        return self.state is PagerState.DONE

    @property
    def remaining(self) -> int:
        return self.limit - len(self.items)

    def params(self) -> dict[str, str]:
        """Query parameters for the next ``GET /memos``."""
        if self.done:
            raise RuntimeError("pager is done; no further request")
        params = {"state": "NORMAL", "pageSize": str(self.page_size)}
        if self.token:
            params["pageToken"] = self.token
        return params

    def feed(self, page: PageResponse) -> None:
        """Consume one page and move to the next state."""
        if self.done:
            raise RuntimeError("pager is done; cannot feed another page")
        self.pages += 1

        if not page.memos:
            self._stop(StopReason.EMPTY_PAGE)
            return

        taken = page.memos[:self.remaining]
        self.items.extend(taken)
        logger.debug("[memos] page %d: took %d memos, total %d/%d",
                     self.pages, len(taken), len(self.items), self.limit)

        next_token = page.next_page_token
        if len(self.items) >= self.limit:
            self._stop(StopReason.LIMIT_REACHED)
        elif not next_token:
            self._stop(StopReason.NO_CURSOR)
        elif next_token in self._seen_tokens:
            logger.warning("[memos] server repeated page token %r, stopping", next_token)
            self._stop(StopReason.REPEATED_CURSOR)
        elif self.pages >= self.max_pages:
            logger.warning("[memos] page cap %d reached with %d/%d memos",
                           self.max_pages, len(self.items), self.limit)
            self._stop(StopReason.PAGE_CAP)
        else:
            self._seen_tokens.add(next_token)
            self.token = next_token

    def _stop(self, reason: StopReason) -> None:
        self.state = PagerState.DONE
        self.stop_reason = reason
