# fabexport/scraper/fetcher.py
"""
Same-origin page fetching through the browser context's request API.

Requests share the browser context's cookie jar, so every fetch carries the
logged-in GEM session. Network and HTTP failures are reported as
FetchResult(ok=False) instead of raised; the orchestrator decides what a
failure means at each level.
"""

import logging
from typing import Optional
from urllib.parse import urlencode, urljoin

from playwright.async_api import APIRequestContext, Error as PlaywrightError

from fabexport.config import GEM_ORIGIN, HISTORY_PATH, PLAYER_PATH, REQUEST_TIMEOUT_MS
from fabexport.dom import parse_html
from fabexport.models import FetchResult

LOGGER = logging.getLogger(__name__)


class GemFetcher:
    """Fetch GEM history, player and report pages as parsed documents."""

    def __init__(
        self,
        request: APIRequestContext,
        origin: str = GEM_ORIGIN,
        timeout_ms: int = REQUEST_TIMEOUT_MS,
    ):
        self.request = request
        self.origin = origin
        self.timeout_ms = timeout_ms

    def history_url(self, page_num: int) -> str:
        return f"{urljoin(self.origin, HISTORY_PATH)}?{urlencode({'page': page_num})}"

    def player_url(self) -> str:
        return urljoin(self.origin, PLAYER_PATH)

    def resolve(self, href: str) -> str:
        return urljoin(self.origin, href)

    async def fetch(self, url: str) -> FetchResult:
        try:
            response = await self.request.get(url, timeout=self.timeout_ms)
        except PlaywrightError as exc:
            LOGGER.debug("Fetch failed for %s: %s", url, exc)
            return FetchResult.failure(url, str(exc))

        try:
            if not response.ok:
                LOGGER.debug("Fetch for %s returned HTTP %s", url, response.status)
                return FetchResult.failure(url, f"HTTP {response.status}", status=response.status)
            html = await response.text()
        except PlaywrightError as exc:
            LOGGER.debug("Reading body of %s failed: %s", url, exc)
            return FetchResult.failure(url, str(exc), status=response.status)
        finally:
            # Playwright keeps bodies buffered until disposed
            await self._dispose(response)

        return FetchResult.success(url, parse_html(html), status=response.status)

    @staticmethod
    async def _dispose(response) -> None:
        try:
            await response.dispose()
        except PlaywrightError as exc:
            LOGGER.debug("Disposing response failed: %s", exc)

    async def fetch_history_page(self, page_num: int) -> FetchResult:
        return await self.fetch(self.history_url(page_num))

    async def fetch_player_page(self) -> FetchResult:
        return await self.fetch(self.player_url())

    async def fetch_report_page(self, href: Optional[str]) -> FetchResult:
        if not href:
            return FetchResult.failure("", "Missing report link")
        return await self.fetch(self.resolve(href))
