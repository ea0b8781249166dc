# fabexport/scraper/session.py
"""
Browser session management for the GEM exporter.

Owns the Playwright browser, persists the GEM login through storage state,
and acts as the host for everything the pipeline needs from a browser:
the page currently on screen, same-origin fetches, clipboard and new tabs.
"""

import logging
import os
from typing import Optional, Tuple
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)

from fabexport.config import DEFAULT_STORAGE_STATE_PATH, GEM_ORIGIN, HISTORY_PATH, PLAYER_PATH
from fabexport.dom import parse_html
from .fetcher import GemFetcher

LOGGER = logging.getLogger(__name__)


class SessionError(Exception):
    """Raised when the browser session cannot be started or saved."""


async def create_browser_context(
    headed: bool = True,
    storage_state_path: Optional[str] = None,
) -> Tuple[Playwright, Browser, BrowserContext]:
    """
    Start Playwright and create a browser context.

    Args:
        headed: If True, run browser in headed mode (visible window)
        storage_state_path: Path to storage state JSON file for cookie persistence.
                           If file exists, cookies will be loaded.

    Returns:
        (playwright, browser, context) tuple

    Raises:
        SessionError: If browser launch fails
    """
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=not headed)

        context_kwargs = {}
        if storage_state_path and os.path.exists(storage_state_path):
            context_kwargs["storage_state"] = storage_state_path

        context = await browser.new_context(**context_kwargs)
        await context.grant_permissions(["clipboard-read", "clipboard-write"], origin=GEM_ORIGIN)
        return playwright, browser, context
    except PlaywrightError as e:
        await playwright.stop()
        raise SessionError(f"Failed to create browser context: {e}") from e


async def save_storage_state(context: BrowserContext, path: str) -> None:
    """Save cookies/localStorage so the GEM login survives between runs."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        await context.storage_state(path=path)
    except (OSError, PlaywrightError) as e:
        raise SessionError(f"Failed to save storage state to {path}: {e}") from e


class GemSession:
    """A logged-in GEM browser session, usable as an async context manager."""

    def __init__(
        self,
        headed: bool = True,
        storage_state_path: Optional[str] = DEFAULT_STORAGE_STATE_PATH,
        origin: str = GEM_ORIGIN,
    ):
        self.headed = headed
        self.storage_state_path = storage_state_path
        self.origin = origin
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._fetcher: Optional[GemFetcher] = None

    async def __aenter__(self) -> "GemSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self.browser:
            return
        self._playwright, self.browser, self.context = await create_browser_context(
            headed=self.headed,
            storage_state_path=self.storage_state_path,
        )
        self.page = await self.context.new_page()
        self._fetcher = GemFetcher(self.context.request, origin=self.origin)

    async def close(self) -> None:
        """Persist storage state (best effort) and release browser resources."""
        if self.context and self.storage_state_path:
            try:
                await save_storage_state(self.context, self.storage_state_path)
            except SessionError as exc:
                LOGGER.warning("%s", exc)
        if self.browser:
            try:
                await self.browser.close()
            except PlaywrightError as exc:
                LOGGER.debug("Browser close failed: %s", exc)
        if self._playwright:
            await self._playwright.stop()

        self._playwright = None
        self.browser = None
        self.context = None
        self.page = None
        self._fetcher = None

    @property
    def fetcher(self) -> GemFetcher:
        if self._fetcher is None:
            raise SessionError("Session not started")
        return self._fetcher

    async def open(self, path: str = HISTORY_PATH) -> None:
        """Navigate the visible tab to a GEM page (e.g. to log in)."""
        await self.page.goto(urljoin(self.origin, path), wait_until="domcontentloaded")

    # --- Active view ---

    def _current_location(self) -> Tuple[str, int]:
        if self.page is None:
            return "", 0
        parsed = urlparse(self.page.url)
        if f"{parsed.scheme}://{parsed.netloc}" != self.origin:
            return "", 0
        page_values = parse_qs(parsed.query).get("page") or ["1"]
        try:
            page_num = int(page_values[0])
        except ValueError:
            page_num = 0
        return parsed.path, page_num

    async def _current_document(self) -> Optional[BeautifulSoup]:
        """The visible tab's document, or None if it cannot be read (e.g. mid-navigation)."""
        try:
            return parse_html(await self.page.content())
        except PlaywrightError as exc:
            LOGGER.debug("Could not read the active tab, fetching instead: %s", exc)
            return None

    async def history_page_one_document(self) -> Optional[BeautifulSoup]:
        path, page_num = self._current_location()
        if path.startswith(HISTORY_PATH.rstrip("/")) and page_num == 1:
            return await self._current_document()
        return None

    async def player_page_document(self) -> Optional[BeautifulSoup]:
        path, _ = self._current_location()
        if path.startswith(PLAYER_PATH.rstrip("/")):
            return await self._current_document()
        return None

    # --- Delivery host ---

    async def write_clipboard(self, text: str) -> bool:
        try:
            await self.page.evaluate("text => navigator.clipboard.writeText(text)", text)
            return True
        except PlaywrightError as exc:
            LOGGER.debug("Clipboard write failed: %s", exc)
            return False

    async def open_url(self, url: str) -> None:
        tab = await self.context.new_page()
        await tab.goto(url, wait_until="domcontentloaded")
