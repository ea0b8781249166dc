# fabexport/scraper/__init__.py
"""
GEM history scraping: browser session, same-origin fetches, per-event
extraction and listing pagination.
"""

from .events import EventExtractor, extract_hero_from_details, extract_hero_from_event_card
from .fetcher import GemFetcher
from .pagination import HistoryFetchError, HistoryPaginator, count_matches
from .session import GemSession, SessionError, create_browser_context, save_storage_state

__all__ = [
    'EventExtractor',
    'extract_hero_from_details',
    'extract_hero_from_event_card',
    'GemFetcher',
    'HistoryFetchError',
    'HistoryPaginator',
    'count_matches',
    'GemSession',
    'SessionError',
    'create_browser_context',
    'save_storage_state',
]
