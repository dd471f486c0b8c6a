"""
tests/test_paging.py
Tests for adapters/memos/paging.py — the pagination state machine.
"""

import pytest

from adapters.memos.errors import ConfigurationError
from adapters.memos.models import PageResponse
from adapters.memos.paging import MAX_PAGE_SIZE, Pager, PagerState, StopReason


def _page(n, token=None, start=0):
    return PageResponse(memos=[{"name": f"memos/{i}"} for i in range(start, start + n)],
                        next_page_token=token)


class TestPagerSetup:

    def test_page_size_follows_small_limit(self):
        assert Pager(25).page_size == 25

    def test_page_size_is_capped(self):
        assert Pager(1000).page_size == MAX_PAGE_SIZE

    @pytest.mark.parametrize("limit", [0, -1, 2.5, "10", True, None])
    def test_rejects_bad_limit(self, limit):
        with pytest.raises(ConfigurationError):
            Pager(limit)

    def test_rejects_bad_max_pages(self):
        with pytest.raises(ConfigurationError):
            Pager(10, max_pages=0)

    def test_default_page_cap_is_the_limit(self):
        assert Pager(42).max_pages == 42


class TestPagerTransitions:

    def test_first_params_have_no_token(self):
        pager = Pager(10)
        assert pager.params() == {"state": "NORMAL", "pageSize": "10"}
        assert pager.state is PagerState.FETCHING

    def test_cursor_carried_to_next_params(self):
        pager = Pager(10)
        pager.feed(_page(3, token="abc"))

        assert not pager.done
        assert pager.params()["pageToken"] == "abc"

    def test_truncates_to_remaining(self):
        pager = Pager(5)
        pager.feed(_page(3, token="t1"))
        pager.feed(_page(3, token="t2", start=3))

        assert [m["name"] for m in pager.items] == [f"memos/{i}" for i in range(5)]
        assert pager.stop_reason is StopReason.LIMIT_REACHED

    def test_limit_wins_over_missing_cursor(self):
        pager = Pager(3)
        pager.feed(_page(3))
        assert pager.stop_reason is StopReason.LIMIT_REACHED

    def test_empty_page_stops(self):
        pager = Pager(10)
        pager.feed(_page(0, token="still-here"))

        assert pager.done
        assert pager.stop_reason is StopReason.EMPTY_PAGE
        assert pager.items == []

    def test_no_cursor_stops(self):
        pager = Pager(10)
        pager.feed(_page(2))
        assert pager.stop_reason is StopReason.NO_CURSOR
        assert pager.remaining == 8

    def test_cursor_seen_before_stops(self):
        pager = Pager(100)
        pager.feed(_page(1, token="a"))
        pager.feed(_page(1, token="b"))
        pager.feed(_page(1, token="a"))
        assert pager.stop_reason is StopReason.REPEATED_CURSOR
        assert pager.pages == 3

    def test_done_pager_refuses_more_work(self):
        pager = Pager(10)
        pager.feed(_page(1))
        with pytest.raises(RuntimeError):
            pager.params()
        with pytest.raises(RuntimeError):
            pager.feed(_page(1))
