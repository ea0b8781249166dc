# fabexport/scraper/events.py
"""
Per-event extraction from GEM history and player pages.

An event card either carries its results inline (completed events) or, while
the event is running, only links to a report page that has to be fetched.
Cards that yield no matches on either path are dropped.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from fabexport.config import REPORT_PATH_MARKER
from fabexport.dom import Node, body_of, child_elements, following_siblings, has_class, text_of
from fabexport.match_table import MatchTableParser
from fabexport.meta_classifier import classify_meta_items
from fabexport.models import EventRecord
from fabexport.rosters import KNOWN_HEROES, UNKNOWN_HERO

LOGGER = logging.getLogger(__name__)

EVENT_SELECTOR = "div.event"
TITLE_SELECTORS = ("h4.event__title", ".event__title")
WHEN_SELECTOR = ".event__when"
META_SELECTOR = ".event__meta-item > span, .event__meta-item span"
DETAILS_SELECTOR = "details.event__extra-details"
CARD_DECKLISTS_SELECTOR = ".event__decklists"
REPORT_LINK_SELECTOR = f'a[href*="{REPORT_PATH_MARKER}"]'
HERO_CANDIDATE_SELECTOR = "a, td, span, div, p"

ACTIVE_WHEN_CLASS = "event__when--active"
IN_PROGRESS_PATTERN = re.compile(r"in\s*progress", re.I)
HEADING_TAG = re.compile(r"^h[1-6]$")
DECKLISTS_HEADING = "Decklists"


def _utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def extract_hero_from_details(node: Optional[Node]) -> str:
    """Scan the elements after a "Decklists" heading for a known hero name."""
    if node is None:
        return UNKNOWN_HERO

    heading = next(
        (h for h in node.find_all(HEADING_TAG) if text_of(h) == DECKLISTS_HEADING),
        None,
    )
    if heading is None:
        return UNKNOWN_HERO

    for element in following_siblings(heading):
        for candidate in element.select(HERO_CANDIDATE_SELECTOR):
            text = text_of(candidate)
            if text in KNOWN_HEROES:
                return text
        if len(child_elements(element)) <= 1:
            text = text_of(element)
            if text in KNOWN_HEROES:
                return text

    return UNKNOWN_HERO


def extract_hero_from_event_card(event_el: Tag) -> str:
    """Hero from the compact decklist links shown on player-page cards."""
    decklists = event_el.select_one(CARD_DECKLISTS_SELECTOR)
    if decklists is None:
        return UNKNOWN_HERO
    for link in decklists.find_all("a"):
        text = text_of(link)
        if text in KNOWN_HEROES:
            return text
    return UNKNOWN_HERO


def is_in_progress(event_el: Tag) -> bool:
    when = event_el.select_one(WHEN_SELECTOR)
    if when is None:
        return False
    return has_class(when, ACTIVE_WHEN_CLASS) or bool(IN_PROGRESS_PATTERN.search(when.get_text()))


class EventExtractor:
    """Turn `div.event` cards into EventRecords, fetching report pages for live events."""

    def __init__(
        self,
        fetcher,
        table_parser: Optional[MatchTableParser] = None,
        today: Optional[Callable[[], str]] = None,
    ):
        self.fetcher = fetcher
        self.table_parser = table_parser or MatchTableParser()
        self.today = today or _utc_today

    async def parse_events(self, document: BeautifulSoup) -> List[EventRecord]:
        events: List[EventRecord] = []
        for event_el in document.select(EVENT_SELECTOR):
            record = await self.parse_event(event_el)
            if record is not None:
                events.append(record)
        return events

    async def parse_event(self, event_el: Tag) -> Optional[EventRecord]:
        event_id = event_el.get("id") or ""
        title_el = next(
            (el for el in (event_el.select_one(sel) for sel in TITLE_SELECTORS) if el is not None),
            None,
        )
        name = text_of(title_el)

        fragments = [text_of(span) for span in event_el.select(META_SELECTOR)]
        meta = classify_meta_items(
            [t for t in fragments if t],
            fallback_date=text_of(event_el.select_one(WHEN_SELECTOR)),
        )

        details = event_el.select_one(DETAILS_SELECTOR)
        if details is not None:
            matches = self.table_parser.parse(details)
            if not matches:
                LOGGER.debug("Dropping event %s (%s): no match rows", event_id, name)
                return None
            return EventRecord.from_meta(event_id, name, meta, extract_hero_from_details(details), matches)

        if not is_in_progress(event_el):
            return None

        report_link = event_el.select_one(REPORT_LINK_SELECTOR)
        if report_link is None:
            LOGGER.debug("Dropping in-progress event %s: no report link", event_id)
            return None

        report = await self.fetcher.fetch_report_page(report_link.get("href"))
        if not report.ok:
            LOGGER.debug("Dropping in-progress event %s: %s", event_id, report.error)
            return None

        report_body = body_of(report.document)
        matches = self.table_parser.parse(report_body)
        if not matches:
            LOGGER.debug("Dropping in-progress event %s: report has no match rows", event_id)
            return None

        hero = extract_hero_from_event_card(event_el)
        if hero == UNKNOWN_HERO:
            hero = extract_hero_from_details(report_body)

        return EventRecord.from_meta(
            event_id, name, meta, hero, matches,
            date=meta.date or self.today(),
        )
