# fabexport/exporter.py
"""
Export payload building and delivery to the FaB Stats importer.

Delivery channels, in order: best-effort clipboard copy, the payload embedded
in the import URL fragment, and (when the encoded payload is too large for a
URL) a JSON file the user uploads manually.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup

from fabexport.config import (
    AGENT_VERSION,
    FABSTATS_IMPORT_URL,
    FULL_EXPORT_HASH_KEY,
    MAX_ENCODED_URL_PAYLOAD,
    NO_MATCHES_MESSAGE,
    QUICK_SYNC_HASH_KEY,
    SCHEMA_VERSION,
)
from fabexport.dom import body_of
from fabexport.meta_classifier import event_tier
from fabexport.models import EventRecord, ExportMatchRow, ExportPayload

LOGGER = logging.getLogger(__name__)

USER_ID_PATTERN = re.compile(r"GEM\s*ID[:\s]*(\d+)", re.I)


class ExportError(Exception):
    """Base class for user-facing export failures."""


class NoMatchesError(ExportError):
    """Raised when there is nothing to deliver."""


@dataclass
class DeliveryOutcome:
    quick_mode:         bool
    match_count:        int
    import_url:         str
    embedded:           bool
    clipboard_ok:       bool
    download_json:      Optional[str] = None
    download_filename:  str = ""


def extract_user_id(document: Optional[BeautifulSoup]) -> str:
    if document is None:
        return ""
    match = USER_ID_PATTERN.search(body_of(document).get_text(" "))
    return match.group(1) if match else ""


async def fetch_user_id(fetcher, active_view=None) -> str:
    """GEM ID of the logged-in player, "" when the player page is unavailable."""
    if active_view is not None:
        document = await active_view.player_page_document()
        if document is not None:
            return extract_user_id(document)

    result = await fetcher.fetch_player_page()
    if not result.ok:
        LOGGER.info("Could not read GEM ID: %s", result.error)
        return ""
    return extract_user_id(result.document)


def build_export_rows(events: Iterable[EventRecord], agent_version: str = AGENT_VERSION) -> List[ExportMatchRow]:
    rows: List[ExportMatchRow] = []
    for event in events:
        tier = event_tier(event.event_type)
        for match in event.matches:
            rows.append(ExportMatchRow(
                event=event.name,
                date=event.date,
                venue=event.venue,
                event_type=event.event_type,
                event_tier=tier,
                format=event.format,
                rated=event.rated,
                hero=event.hero,
                round=match.round,
                round_label=match.round_label,
                opponent=match.opponent,
                opponent_id=match.opponent_id,
                result=match.result,
                event_id=event.event_id,
                xp_modifier=event.xp_modifier,
                agent_version=agent_version,
            ))
    return rows


def build_export_payload(
    events: Iterable[EventRecord],
    user_id: str,
    agent_version: str = AGENT_VERSION,
) -> ExportPayload:
    return ExportPayload(
        schema_version=SCHEMA_VERSION,
        user_id=user_id or "",
        matches=tuple(build_export_rows(events, agent_version)),
    )


def serialize_payload(payload: ExportPayload) -> str:
    return json.dumps(payload.to_dict(), separators=(",", ":"), ensure_ascii=False)


def encode_payload(serialized: str) -> str:
    """Base64 of the UTF-8 bytes, the form the importer decodes from the URL fragment."""
    return base64.b64encode(serialized.encode("utf-8")).decode("ascii")


def build_import_url(
    serialized: str,
    quick_mode: bool,
    base_url: str = FABSTATS_IMPORT_URL,
    max_encoded: int = MAX_ENCODED_URL_PAYLOAD,
) -> str:
    """Import URL with the payload in its fragment, or the bare URL if it will not fit."""
    try:
        encoded = encode_payload(serialized)
    except UnicodeEncodeError as exc:
        LOGGER.warning("Payload encoding failed, falling back to file download: %s", exc)
        return base_url

    if len(encoded) >= max_encoded:
        LOGGER.info("Encoded payload is %s chars, too large for the import URL", len(encoded))
        return base_url

    key = QUICK_SYNC_HASH_KEY if quick_mode else FULL_EXPORT_HASH_KEY
    return f"{base_url}#{key}={encoded}"


def download_filename(serialized: str) -> str:
    digest = hashlib.sha256(serialized.encode("utf-8", "surrogatepass")).hexdigest()
    return f"fab-stats-export-{digest[:12]}.json"


def save_download(outcome: DeliveryOutcome, directory: str) -> Path:
    """Write the raw payload offered by a completion view to `directory`."""
    if outcome.download_json is None:
        raise ExportError("Nothing to download: payload was embedded in the import URL")
    os.makedirs(directory, exist_ok=True)
    path = Path(directory) / outcome.download_filename
    path.write_text(outcome.download_json, encoding="utf-8", errors="surrogatepass")
    return path


async def deliver_payload(
    payload: ExportPayload,
    host,
    quick_mode: bool,
    base_url: str = FABSTATS_IMPORT_URL,
    max_encoded: int = MAX_ENCODED_URL_PAYLOAD,
) -> DeliveryOutcome:
    """
    Hand the payload to FaB Stats.

    Args:
        payload: Built export payload
        host: object providing write_clipboard(text) -> bool and open_url(url)
        quick_mode: Quick Sync opens the import URL right away

    Returns:
        DeliveryOutcome describing what the completion view should offer

    Raises:
        NoMatchesError: If the payload has no matches
    """
    if not payload.matches:
        raise NoMatchesError(NO_MATCHES_MESSAGE)

    serialized = serialize_payload(payload)

    # Backup channel only
    clipboard_ok = await host.write_clipboard(serialized)

    import_url = build_import_url(serialized, quick_mode, base_url=base_url, max_encoded=max_encoded)
    embedded = import_url != base_url

    if quick_mode:
        await host.open_url(import_url)
        return DeliveryOutcome(quick_mode, len(payload.matches), import_url, embedded, clipboard_ok)

    return DeliveryOutcome(
        quick_mode=False,
        match_count=len(payload.matches),
        import_url=import_url,
        embedded=embedded,
        clipboard_ok=clipboard_ok,
        download_json=None if embedded else serialized,
        download_filename="" if embedded else download_filename(serialized),
    )
