# fabexport/match_table.py

import logging
import re
from typing import List, Optional, Sequence, Tuple

from bs4 import Tag

from fabexport.dom import Node, text_of
from fabexport.models import MatchRow

LOGGER = logging.getLogger(__name__)


class MatchTableParser:
    """
    Parse GEM match tables into MatchRow lists.

    GEM labels its columns inconsistently between event types ("Round",
    "Rnd", "#", "Playoff Round"; "Opponent", "Player", "Team"; "Result",
    "W/L" ...), so columns are located by synonym instead of position.
    """

    SUMMARY_MARKERS = ("total wins", "xp gained", "net rating")

    # (substring synonyms, exact-match synonyms)
    ROUND_COLUMN = (("round", "playoff"), ("rnd", "#"))
    OPPONENT_COLUMN = (("opponent", "player", "team"), ("name",))
    RESULT_COLUMN = (("result", "outcome"), ("w/l", "win/loss"))

    RESULT_ALIASES = {
        "win": "win", "w": "win",
        "loss": "loss", "l": "loss",
        "draw": "draw", "d": "draw",
    }

    BYE_OPPONENT = re.compile(r"^bye$", re.I)
    OPPONENT_ID = re.compile(r"\((\d+)\)\s*$")
    OPPONENT_ID_SUFFIX = re.compile(r"\s*\(\d+\)\s*$")
    LEADING_INT = re.compile(r"\s*[+-]?(\d+)")

    def parse(self, node: Optional[Node]) -> List[MatchRow]:
        """Parse every match table under `node`, skipping summary and unrecognized tables."""
        matches: List[MatchRow] = []
        if node is None:
            return matches

        for table in node.find_all("table"):
            matches.extend(self._parse_table(table))
        return matches

    @staticmethod
    def classify_playoff_round(round_text: str) -> str:
        lower = round_text.lower()
        if "final" in lower and "semi" not in lower and "quarter" not in lower:
            return "Finals"
        if "semi" in lower:
            return "Top 4"
        if "quarter" in lower:
            return "Top 8"
        if re.search(r"top\s*4", lower):
            return "Top 4"
        if re.search(r"top\s*8", lower):
            return "Top 8"
        return "Playoff"

    def _parse_table(self, table: Tag) -> List[MatchRow]:
        headers = [text_of(th).lower() for th in table.find_all("th")]

        if any(marker in h for h in headers for marker in self.SUMMARY_MARKERS):
            return []

        round_idx = self._find_column(headers, self.ROUND_COLUMN)
        opp_idx = self._find_column(headers, self.OPPONENT_COLUMN)
        result_idx = self._find_column(headers, self.RESULT_COLUMN)

        if opp_idx is None or result_idx is None:
            LOGGER.debug("Skipping table without opponent/result columns: %s", headers)
            return []

        is_playoff = any("playoff" in h or "top" in h for h in headers)

        rows = table.select("tbody tr") or table.find_all("tr")[1:]
        parsed: List[MatchRow] = []
        for row in rows:
            match = self._parse_row(row, round_idx, opp_idx, result_idx, is_playoff)
            if match is not None:
                parsed.append(match)
        return parsed

    @staticmethod
    def _find_column(headers: Sequence[str], synonyms: Tuple[Tuple[str, ...], Tuple[str, ...]]) -> Optional[int]:
        contains, exact = synonyms
        for idx, header in enumerate(headers):
            if any(word in header for word in contains) or header in exact:
                return idx
        return None

    def _parse_row(
        self,
        row: Tag,
        round_idx: Optional[int],
        opp_idx: int,
        result_idx: int,
        is_playoff: bool,
    ) -> Optional[MatchRow]:
        cells = row.find_all("td")
        if len(cells) <= max(opp_idx, result_idx):
            return None

        round_text = text_of(cells[round_idx]) if round_idx is not None and round_idx < len(cells) else "0"
        opp_raw = text_of(cells[opp_idx])
        result_text = text_of(cells[result_idx]).lower()

        round_number = self._parse_round_number(round_text)
        round_label = self.classify_playoff_round(round_text) if is_playoff else ""

        if self.BYE_OPPONENT.match(opp_raw) or "bye" in result_text:
            return MatchRow(round_number, round_label, "BYE", "", "bye")

        if len(opp_raw) < 2:
            return None

        result = self.RESULT_ALIASES.get(result_text)
        if result is None:
            return None

        id_match = self.OPPONENT_ID.search(opp_raw)
        opponent = self.OPPONENT_ID_SUFFIX.sub("", opp_raw).strip()
        return MatchRow(round_number, round_label, opponent, id_match.group(1) if id_match else "", result)

    def _parse_round_number(self, round_text: str) -> int:
        match = self.LEADING_INT.match(round_text)
        return int(match.group(1)) if match else 0


def parse_match_table(node: Optional[Node]) -> List[MatchRow]:
    return MatchTableParser().parse(node)
