"""
adapters/memos/errors.py — Error taxonomy and fetch result type.

Errors raised while listing memos are collected into a ``FetchResult``
instead of escaping as exceptions, so callers can branch on ``Ok`` / ``Err``::

    result = await service.fetch_all_memos()
    if isinstance(result, Err):
        print(result.error)
    else:
        memos = result.value

``result.unwrap()`` gives the old raise-on-failure behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


# ── taxonomy ──────────────────────────────────────────────────────────────

class MemosError(Exception):
    """Base class for every failure of the Memos integration."""


class ConfigurationError(MemosError):
    """Settings are unusable (bad API URL, non-positive sync limit)."""


class TransportError(MemosError):
    """The memo list endpoint answered with a non-200 status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: request failed\nResponse body: {body}")


class MalformedResponseError(MemosError):
    """The response body is not an object carrying a ``memos`` list."""


class NetworkUnavailableError(MemosError):
    """The host could not be reached at all."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Network error: cannot connect to {url}. "
            "Check that the URL is correct and reachable.")


# ── result ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T
    # Why pagination ended, for diagnostics (see adapters/memos/paging.py)
    stop_reason: str = ""
    pages: int = 0

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: MemosError
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


FetchResult = Union[Ok[list[dict]], Err]
