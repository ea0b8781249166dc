# fabexport/scraper/pagination.py

from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup

from fabexport.config import PAGE_BATCH_SIZE
from fabexport.models import EventRecord

LOGGER = logging.getLogger(__name__)

PAGE_PARAM = re.compile(r"[?&]page=(\d+)")

ProgressCallback = Callable[[int, int, int], None]


class HistoryFetchError(Exception):
    """Raised when the first history page cannot be loaded."""


def count_matches(events: Iterable[EventRecord]) -> int:
    return sum(len(event.matches) for event in events)


class HistoryPaginator:
    """
    Walk the GEM history listing and merge in the player page's live events.

    Args:
        fetcher: GemFetcher-like object (fetch_history_page, fetch_player_page)
        extractor: EventExtractor turning documents into EventRecords
        active_view: optional object exposing the document the browser is
            already showing (history_page_one_document / player_page_document),
            used to skip a network round trip
        batch_size: history pages fetched concurrently per batch
    """

    def __init__(self, fetcher, extractor, active_view=None, batch_size: int = PAGE_BATCH_SIZE):
        self.fetcher = fetcher
        self.extractor = extractor
        self.active_view = active_view
        self.batch_size = batch_size

    @staticmethod
    def detect_total_pages(document: BeautifulSoup) -> int:
        total = 1
        for link in document.select("a[href*='page=']"):
            match = PAGE_PARAM.search(link.get("href") or "")
            if match:
                total = max(total, int(match.group(1)))
        return total

    async def fetch_all_pages(
        self,
        on_progress: Optional[ProgressCallback] = None,
        max_pages: int = 0,
    ) -> List[EventRecord]:
        """
        Collect every event with match results.

        Args:
            on_progress: called as (current_page, total_pages, match_count)
                after page 1 and after each batch
            max_pages: page budget for quick sync, 0 for the full listing

        Returns:
            Accumulated EventRecords, unique by event_id across the listing
            and the player page

        Raises:
            HistoryFetchError: If history page 1 cannot be loaded
        """
        report = on_progress or (lambda current, total, matches: None)

        first_page = await self._resolve_first_page()
        total_pages = self.detect_total_pages(first_page)
        if max_pages > 0:
            total_pages = min(total_pages, max_pages)

        events = await self.extractor.parse_events(first_page)
        report(1, total_pages, count_matches(events))

        for batch_start in range(2, total_pages + 1, self.batch_size):
            page_nums = list(range(batch_start, min(batch_start + self.batch_size, total_pages + 1)))
            for document in await self._fetch_batch(page_nums):
                events.extend(await self.extractor.parse_events(document))
            report(page_nums[-1], total_pages, count_matches(events))

        await self._merge_player_page(events)
        LOGGER.info("Collected %s events (%s matches) from %s history pages",
                    len(events), count_matches(events), total_pages)
        return events

    async def _resolve_first_page(self) -> BeautifulSoup:
        if self.active_view is not None:
            document = await self.active_view.history_page_one_document()
            if document is not None:
                return document

        result = await self.fetcher.fetch_history_page(1)
        if not result.ok:
            raise HistoryFetchError(f"Page 1: {result.error}")
        return result.document

    async def _fetch_batch(self, page_nums: List[int]) -> List[BeautifulSoup]:
        results = await asyncio.gather(*(self.fetcher.fetch_history_page(p) for p in page_nums))
        if all(result.ok for result in results):
            return [result.document for result in results]

        LOGGER.info("Concurrent fetch of pages %s failed, retrying sequentially", page_nums)
        documents: List[BeautifulSoup] = []
        for page_num in page_nums:
            result = await self.fetcher.fetch_history_page(page_num)
            if result.ok:
                documents.append(result.document)
            else:
                LOGGER.warning("Dropping history page %s: %s", page_num, result.error)
        return documents

    async def _resolve_player_page(self) -> Optional[BeautifulSoup]:
        if self.active_view is not None:
            document = await self.active_view.player_page_document()
            if document is not None:
                return document

        result = await self.fetcher.fetch_player_page()
        if not result.ok:
            LOGGER.info("Skipping player page merge: %s", result.error)
            return None
        return result.document

    async def _merge_player_page(self, events: List[EventRecord]) -> None:
        document = await self._resolve_player_page()
        if document is None:
            return

        seen_ids = {event.event_id for event in events}
        for record in await self.extractor.parse_events(document):
            if record.event_id in seen_ids:
                continue
            events.append(record)
            seen_ids.add(record.event_id)
