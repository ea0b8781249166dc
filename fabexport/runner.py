# fabexport/runner.py

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fabexport.config import DEFAULT_DOWNLOAD_DIR, NO_EVENTS_MESSAGE
from fabexport.csv_export import write_csv
from fabexport.exporter import DeliveryOutcome, build_export_payload, deliver_payload, fetch_user_id, save_download
from fabexport.preferences import Preferences
from fabexport.scraper.events import EventExtractor
from fabexport.scraper.pagination import HistoryPaginator, count_matches

LOGGER = logging.getLogger(__name__)


class ExportRunner:
    """
    Runs one export at a time and renders it through the UI.

    `running` plays the role of the disabled export buttons: a trigger that
    arrives while a run is in flight is ignored.
    """

    def __init__(
        self,
        fetcher,
        host,
        ui,
        preferences: Optional[Preferences] = None,
        active_view=None,
        download_dir: str = DEFAULT_DOWNLOAD_DIR,
        csv_path: Optional[str] = None,
        interactive: bool = True,
    ):
        self.fetcher = fetcher
        self.host = host
        self.ui = ui
        self.preferences = preferences or Preferences()
        self.active_view = active_view
        self.download_dir = download_dir
        self.csv_path = csv_path
        self.interactive = interactive
        self.running = False

    def _paginator(self) -> HistoryPaginator:
        extractor = EventExtractor(self.fetcher)
        return HistoryPaginator(self.fetcher, extractor, active_view=self.active_view)

    async def handle_export(self, quick_mode: bool) -> Optional[DeliveryOutcome]:
        """Full export (all pages) or Quick Sync (persisted page budget)."""
        if self.running:
            LOGGER.warning("Export already running, ignoring trigger")
            return None

        self.running = True
        status = "Quick Syncing..." if quick_mode else "Fetching match history..."
        try:
            self.ui.show_progress(status, "Reading page 1")

            def on_progress(current: int, total: int, match_count: int) -> None:
                self.ui.show_progress(status, f"Page {current} of {total}", match_count, (current, total))

            max_pages = self.preferences.quick_sync_pages if quick_mode else 0
            events, user_id = await asyncio.gather(
                self._paginator().fetch_all_pages(on_progress, max_pages),
                fetch_user_id(self.fetcher, self.active_view),
                return_exceptions=True,
            )
            if isinstance(events, BaseException):
                raise events
            if isinstance(user_id, BaseException):
                LOGGER.warning("Could not read GEM ID: %s", user_id)
                user_id = ""

            if not events:
                self.ui.show_error(NO_EVENTS_MESSAGE)
                return None

            total_matches = count_matches(events)
            self.ui.show_progress("Building export...", f"{len(events)} events, {total_matches} matches", total_matches)

            payload = build_export_payload(events, user_id)
            if self.csv_path:
                rows = write_csv(payload, self.csv_path)
                LOGGER.info("Wrote %s rows to %s", rows, self.csv_path)

            outcome = await deliver_payload(payload, self.host, quick_mode)
            if quick_mode:
                self.ui.show_quick_sync_opened(outcome)
            else:
                self._complete(outcome)
            return outcome

        except Exception as exc:
            LOGGER.exception("Export run failed")
            self.ui.show_error(str(exc) or exc.__class__.__name__)
            return None

        finally:
            self.running = False

    def _complete(self, outcome: DeliveryOutcome) -> None:
        self.ui.show_completion(outcome)
        if outcome.download_json is None:
            return
        if self.interactive and not self.ui.confirm_download(outcome.download_filename):
            return
        path = save_download(outcome, self.download_dir)
        self.ui.show_success(f"✅ Downloaded! Saved match data to {path}")
