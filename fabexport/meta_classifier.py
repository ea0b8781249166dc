# fabexport/meta_classifier.py
"""
Classification of an event card's loose metadata fragments.

GEM renders date, venue, format, rated flag, XP modifier and event type as
unlabeled spans in no guaranteed order. Each fragment runs through an ordered
rule cascade; the first rule that matches consumes the fragment, and the
first value assigned to a field sticks.
"""

import re
from datetime import date as Date
from typing import Any, Callable, Iterable, List, Optional, Tuple

from fabexport.models import ClassifiedEventMeta
from fabexport.rosters import EVENT_TIERS, FORMAT_ALIASES, KNOWN_FORMATS

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

DATE_PATTERN = re.compile(
    r"\b(January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec)\.?\s+(\d{1,2}),?\s+(\d{4})",
    re.I,
)
ISO_DATE_PATTERN = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
XP_MODIFIER_PATTERN = re.compile(r"XP Modifier:\s*(\d+)", re.I)
RATED_PATTERN = re.compile(r"\s*Rated\s*", re.I)
UNRATED_PATTERN = re.compile(r"\s*(?:Not Rated|Unrated)\s*", re.I)

# Order encodes precedence: "Road to Nationals" must win over "Nationals".
EVENT_TYPE_RULES = (
    (re.compile(r"armory", re.I), "Armory"),
    (re.compile(r"pre.?release", re.I), "Pre-Release"),
    (re.compile(r"on demand", re.I), "On Demand"),
    (re.compile(r"skirmish", re.I), "Skirmish"),
    (re.compile(r"road to nationals?|\brtn\b", re.I), "Road to Nationals"),
    (re.compile(r"pro\s*quest|\bpq\b", re.I), "ProQuest"),
    (re.compile(r"battle hardened|\bbh\b", re.I), "Battle Hardened"),
    (re.compile(r"\bcalling\b", re.I), "The Calling"),
    (re.compile(r"\bnationals?\b", re.I), "Nationals"),
    (re.compile(r"pro tour", re.I), "Pro Tour"),
    (re.compile(r"\bpti\b|professional tournament invit", re.I), "PTI"),
    (re.compile(r"worlds|world championship", re.I), "Worlds"),
)

VENUE_MIN_LENGTH = 2
VENUE_MAX_LENGTH = 149

_NO_MATCH = object()


def parse_date(text: Optional[str]) -> str:
    """
    Normalize a GEM date string to YYYY-MM-DD.

    Accepts "January 5, 2024", "Jan. 5, 2024", "Sat, Jan 5, 2024, 11:00 AM"
    and ISO dates. Returns "" when nothing date-like (or an impossible
    calendar date) is found.
    """
    if not text:
        return ""

    match = DATE_PATTERN.search(text)
    if match:
        month = MONTHS[match.group(1)[:3].lower()]
        day, year = int(match.group(2)), int(match.group(3))
    else:
        match = ISO_DATE_PATTERN.search(text)
        if not match:
            return ""
        year, month, day = (int(g) for g in match.groups())

    try:
        return Date(year, month, day).isoformat()
    except ValueError:
        return ""


def guess_event_type(text: str) -> str:
    for pattern, event_type in EVENT_TYPE_RULES:
        if pattern.search(text):
            return event_type
    return ""


def event_tier(event_type: str) -> str:
    """casual / competitive / professional, or "" for unknown types."""
    return EVENT_TIERS.get(event_type, "")


def _match_date(text: str) -> Any:
    if not DATE_PATTERN.search(text):
        return _NO_MATCH
    return parse_date(text)


def _match_format(text: str) -> Any:
    lowered = text.strip().lower()
    for known in KNOWN_FORMATS:
        if known.lower() == lowered:
            return known
    return FORMAT_ALIASES.get(lowered, _NO_MATCH)


def _match_rated(text: str) -> Any:
    if RATED_PATTERN.fullmatch(text):
        return True
    if UNRATED_PATTERN.fullmatch(text):
        return False
    return _NO_MATCH


def _match_xp_modifier(text: str) -> Any:
    match = XP_MODIFIER_PATTERN.search(text)
    return int(match.group(1)) if match else _NO_MATCH


def _match_event_type(text: str) -> Any:
    return guess_event_type(text) or _NO_MATCH


FRAGMENT_RULES: Tuple[Tuple[str, Callable[[str], Any]], ...] = (
    ("date", _match_date),
    ("format", _match_format),
    ("rated", _match_rated),
    ("xp_modifier", _match_xp_modifier),
    ("event_type", _match_event_type),
)


def _is_venue(text: str) -> bool:
    return VENUE_MIN_LENGTH <= len(text) < VENUE_MAX_LENGTH and not text.isdigit()


def classify_meta_items(items: Iterable[str], fallback_date: str = "") -> ClassifiedEventMeta:
    """Classify metadata fragments into typed event fields (first match wins)."""
    meta = ClassifiedEventMeta()
    assigned = set()
    venue_candidates: List[str] = []

    for text in items:
        for field_name, matcher in FRAGMENT_RULES:
            value = matcher(text)
            if value is _NO_MATCH:
                continue
            # An unparsable date is consumed but does not claim the field
            if field_name not in assigned and value != "":
                setattr(meta, field_name, value)
                assigned.add(field_name)
            break
        else:
            venue_candidates.append(text.strip())

    meta.venue = next((t for t in venue_candidates if _is_venue(t)), "")

    if not meta.date and fallback_date:
        meta.date = parse_date(fallback_date)

    return meta
