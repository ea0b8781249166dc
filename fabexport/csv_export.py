# fabexport/csv_export.py
"""
Spreadsheet-friendly CSV export of the flattened match rows.

Written with a UTF-8 BOM so Excel picks up the encoding, preceded by `#`
comment lines carrying the player's GEM ID and the export timestamp.
"""

import csv
import os
from datetime import datetime, timezone
from typing import Optional

from fabexport.models import ExportPayload

CSV_COLUMNS = [
    "Event Name", "Event Date", "Event Type", "Format", "Rated", "Hero",
    "Round", "Round Label", "Opponent", "Opponent GEM ID", "Result",
]


def write_csv(payload: ExportPayload, path: str, exported_at: Optional[datetime] = None) -> int:
    """Write one CSV row per match and return the number of rows written."""
    exported_at = exported_at or datetime.now(timezone.utc)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        f.write(f"# GEM ID: {payload.user_id or 'Unknown'}\n")
        f.write(f"# Export Date: {exported_at.isoformat()}\n")
        writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for row in payload.matches:
            writer.writerow([
                row.event, row.date, row.event_type, row.format, row.rated, row.hero,
                row.round, row.round_label, row.opponent, row.opponent_id, row.result,
            ])

    return len(payload.matches)
