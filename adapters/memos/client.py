"""
adapters/memos/client.py — Memos v1 REST API client.

Wraps two endpoints:
    GET  {api_url}/memos                              Paged memo list
    GET  {base}/file/attachments/{id}/{filename}      Raw attachment bytes

``fetch_all_memos`` pages through the list with a hard item cap and returns
a ``FetchResult`` (``Ok`` / ``Err``); ``download_resource`` never raises and
answers ``None`` when an attachment is unavailable.

Uses ``httpx.AsyncClient`` for async HTTP. Pass ``transport=`` to route
requests through a custom ``httpx`` transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union
from urllib.parse import quote

from adapters.memos.config import API_VERSION_PATH
from adapters.memos.errors import (
    ConfigurationError,
    Err,
    FetchResult,
    MalformedResponseError,
    MemosError,
    NetworkUnavailableError,
    Ok,
    TransportError,
)
from adapters.memos.models import AttachmentRef, PageResponse, sort_by_create_time
from adapters.memos.paging import Pager

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    import httpx

    from adapters.memos.config import MemosSettings

# Characters encodeURIComponent leaves alone
_URI_COMPONENT_SAFE = "-_.!~*'()"


class MemosService:
    """HTTP client for the Memos REST API."""

    def __init__(self, api_url: str, access_token: str, sync_limit: int, *,
                 max_pages: Optional[int] = None,
                 timeout: float = 30.0,
                 transport: Optional["httpx.AsyncBaseTransport"] = None):
        self.api_url = api_url.rstrip("/")
        self.access_token = access_token
        self.sync_limit = sync_limit
        self.max_pages = max_pages
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: "MemosSettings",
                      transport: Optional["httpx.AsyncBaseTransport"] = None,
                      ) -> "MemosService":
        return cls(
            settings.api_url,
            settings.effective_token,
            settings.sync_limit,
            max_pages=settings.max_pages,
            timeout=settings.request_timeout,
            transport=transport,
        )

    def _headers(self, accept: str) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": accept,
        }

    def _client(self) -> "httpx.AsyncClient":
        import httpx
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    # ── memos ─────────────────────────────────────────────────────────────

    async def fetch_all_memos(self) -> FetchResult:
        """GET /memos, page by page, until ``sync_limit`` or the last page.

        Returns ``Ok(memos)`` sorted newest first, or ``Err(error)``. Nothing
        is returned from a partially completed fetch.
        """
        import httpx

        logger.debug("[memos] fetching memos, API URL: %s", self.api_url)
        logger.debug("[memos] access token: %s", "set" if self.access_token else "not set")
        logger.debug("[memos] sync limit: %s", self.sync_limit)

        url = f"{self.api_url}/memos"
        pages = 0
        try:
            if API_VERSION_PATH not in self.api_url:
                raise ConfigurationError(
                    f"API URL is malformed, it must contain {API_VERSION_PATH}: {self.api_url!r}")
            pager = Pager(self.sync_limit, max_pages=self.max_pages)

            async with self._client() as client:
                while not pager.done:
                    params = pager.params()
                    logger.debug("[memos] GET %s params=%s", url, params)
                    try:
                        resp = await client.get(url, params=params,
                                                headers=self._headers("application/json"))
                    except httpx.ConnectError as e:
                        raise NetworkUnavailableError(self.api_url) from e
                    pages += 1

                    if resp.status_code != 200:
                        raise TransportError(resp.status_code, resp.text)
                    try:
                        data = resp.json()
                    except ValueError as e:
                        raise MalformedResponseError(
                            "Invalid response format: body is not JSON") from e

                    page = PageResponse.from_json(data)
                    logger.debug("[memos] page %d: %d memos, nextPageToken=%r",
                                 pages, len(page.memos), page.next_page_token)
                    pager.feed(page)

            logger.debug("[memos] returning %d memos (%s after %d pages)",
                         len(pager.items), pager.stop_reason.value, pager.pages)
            return Ok(sort_by_create_time(pager.items),
                      stop_reason=pager.stop_reason.value, pages=pager.pages)
        except MemosError as e:
            logger.error("[memos] fetching memos failed: %s", e)
            return Err(e, details={"url": url, "pages": pages})
        except Exception as e:
            logger.error("[memos] fetching memos failed: %s", e)
            raise

    # ── attachments ───────────────────────────────────────────────────────

    def attachment_url(self, ref: AttachmentRef) -> str:
        base = self.api_url.replace(API_VERSION_PATH, "", 1)
        filename = quote(ref.filename, safe=_URI_COMPONENT_SAFE)
        return f"{base}/file/attachments/{ref.attachment_id}/{filename}"

    async def download_resource(
        self,
        resource: Union[AttachmentRef, Mapping[str, Any]],
    ) -> Optional[bytes]:
        """Download one attachment. ``None`` means unavailable, never raises.

        A 200 with a zero-length body is a real empty file and comes back as
        ``b""``.
        """
        try:
            ref = resource if isinstance(resource, AttachmentRef) \
                else AttachmentRef.from_dict(resource)
            url = self.attachment_url(ref)
            logger.debug("[memos] downloading attachment: %s", url)

            async with self._client() as client:
                resp = await client.get(url, headers=self._headers("*/*"))

            if resp.status_code != 200:
                logger.error("[memos] attachment download failed: HTTP %d", resp.status_code)
                logger.error("[memos] response body: %s", resp.text[:500])
                return None

            content = resp.content
            logger.debug("[memos] downloaded attachment, %d bytes", len(content))
            return content
        except Exception as e:
            logger.error("[memos] error downloading attachment: %s", e)
            return None
