# fabexport/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

MATCH_RESULTS = ("win", "loss", "draw", "bye")


@dataclass
class ClassifiedEventMeta:
    date:           str = ""
    venue:          str = ""
    event_type:     str = ""
    format:         str = ""
    rated:          bool = False
    xp_modifier:    int = 0


@dataclass(frozen=True)
class MatchRow:
    round:          int
    round_label:    str
    opponent:       str
    opponent_id:    str
    result:         str

    def __post_init__(self) -> None:
        if self.result not in MATCH_RESULTS:
            raise ValueError(f"Invalid match result '{self.result}'")


@dataclass
class EventRecord:
    event_id:       str
    name:           str
    date:           str
    venue:          str
    event_type:     str
    format:         str
    rated:          bool
    xp_modifier:    int
    hero:           str
    matches:        List[MatchRow] = field(default_factory=list)

    @classmethod
    def from_meta(
        cls,
        event_id: str,
        name: str,
        meta: ClassifiedEventMeta,
        hero: str,
        matches: List[MatchRow],
        date: Optional[str] = None,
    ) -> "EventRecord":
        return cls(
            event_id=event_id,
            name=name,
            date=meta.date if date is None else date,
            venue=meta.venue,
            event_type=meta.event_type,
            format=meta.format,
            rated=meta.rated,
            xp_modifier=meta.xp_modifier,
            hero=hero,
            matches=list(matches),
        )


@dataclass(frozen=True)
class ExportMatchRow:
    event:          str
    date:           str
    venue:          str
    event_type:     str
    event_tier:     str
    format:         str
    rated:          bool
    hero:           str
    round:          int
    round_label:    str
    opponent:       str
    opponent_id:    str
    result:         str
    event_id:       str
    xp_modifier:    int
    agent_version:  str

    def to_dict(self) -> Dict[str, Any]:
        """Row in the key layout the FaB Stats importer reads."""
        return {
            "event": self.event,
            "date": self.date,
            "venue": self.venue,
            "eventType": self.event_type,
            "eventTier": self.event_tier,
            "format": self.format,
            "rated": self.rated,
            "hero": self.hero,
            "round": self.round,
            "roundLabel": self.round_label,
            "opponent": self.opponent,
            "opponentGemId": self.opponent_id,
            "result": self.result,
            "gemEventId": self.event_id,
            "xpModifier": self.xp_modifier,
            "extensionVersion": self.agent_version,
        }


@dataclass(frozen=True)
class ExportPayload:
    schema_version: int
    user_id:        str
    matches:        tuple

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fabStatsVersion": self.schema_version,
            "userGemId": self.user_id,
            "matches": [row.to_dict() for row in self.matches],
        }


@dataclass
class FetchResult:
    """Outcome of one same-origin fetch; `document` is set only when `ok`."""

    url:            str
    ok:             bool
    document:       Optional[BeautifulSoup] = None
    status:         Optional[int] = None
    error:          str = ""

    @classmethod
    def success(cls, url: str, document: BeautifulSoup, status: int = 200) -> "FetchResult":
        return cls(url=url, ok=True, document=document, status=status)

    @classmethod
    def failure(cls, url: str, error: str, status: Optional[int] = None) -> "FetchResult":
        return cls(url=url, ok=False, status=status, error=error)
