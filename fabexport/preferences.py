# fabexport/preferences.py

import json
import logging
import os
from typing import Any, Dict

from fabexport.config import DEFAULT_PREFERENCES_PATH, SYNC_OPTIONS

LOGGER = logging.getLogger(__name__)

QUICK_SYNC_KEY = "quick_sync_idx"


class Preferences:
    """Persisted user choices (currently the Quick Sync page budget)."""

    def __init__(self, path: str = DEFAULT_PREFERENCES_PATH):
        self.path = path
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def save(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)

    @property
    def quick_sync_index(self) -> int:
        try:
            idx = int(self._data.get(QUICK_SYNC_KEY, 0))
        except (TypeError, ValueError):
            return 0
        return idx if 0 <= idx < len(SYNC_OPTIONS) else 0

    def set_quick_sync_label(self, label: str) -> None:
        """Select a Quick Sync option by its label ("25", "50", "100", "All")."""
        for idx, option in enumerate(SYNC_OPTIONS):
            if option["label"].lower() == label.strip().lower():
                self._data[QUICK_SYNC_KEY] = idx
                self.save()
                return
        labels = ", ".join(o["label"] for o in SYNC_OPTIONS)
        raise ValueError(f"Unknown Quick Sync option '{label}' (choose one of: {labels})")

    @property
    def quick_sync_label(self) -> str:
        return SYNC_OPTIONS[self.quick_sync_index]["label"]

    @property
    def quick_sync_pages(self) -> int:
        return SYNC_OPTIONS[self.quick_sync_index]["pages"]
