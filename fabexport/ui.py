# fabexport/ui.py

from typing import Optional, Sequence

from fabexport.config import FABSTATS_IMPORT_URL, SYNC_OPTIONS
from fabexport.exporter import DeliveryOutcome


def _safe_print(message: str, end: str = "\n") -> None:
    """Print with Unicode fallback for restricted terminal encodings."""
    try:
        print(message, end=end, flush=True)
    except UnicodeEncodeError:
        fallback = (
            message.replace("✅", "[OK]")
            .replace("⚡", "[SYNC]")
            .replace("❌", "[ERROR]")
            .replace("⬇", "[DOWNLOAD]")
            .replace("→", "->")
        )
        print(fallback, end=end, flush=True)


class TerminalUI:
    """Terminal rendering of export progress, completion and errors."""

    BAR_WIDTH = 30

    def show_menu(self, quick_sync_label: str) -> str:
        """Show main menu and get validated user choice."""
        print("\n" + "=" * 50)
        print("FaB Stats Exporter - GEM Match History")
        print("=" * 50)
        print("1. Export to FaB Stats (all pages)")
        print(f"2. Quick Sync (events: {quick_sync_label})")
        print("3. Change Quick Sync event count")
        print("4. Exit")
        print("=" * 50)

        while True:
            choice = input("Choose an option (1-4): ").strip()
            if choice in ['1', '2', '3', '4']:
                return choice
            print("Error: Please enter a number between 1 and 4")

    def select_sync_option(self, current_label: str) -> Optional[str]:
        labels = [o["label"] for o in SYNC_OPTIONS]
        print(f"\nEvents per Quick Sync (current: {current_label})")
        for i, label in enumerate(labels, 1):
            print(f"{i}. {label}")
        choice = input(f"Choose an option (1-{len(labels)}), Enter to keep: ").strip()
        if not choice:
            return None
        if choice.isdigit() and 1 <= int(choice) <= len(labels):
            return labels[int(choice) - 1]
        self.show_error("Invalid option")
        return None

    def show_progress(
        self,
        status: str,
        detail: str,
        match_count: int = 0,
        progress: Optional[Sequence[int]] = None,
    ) -> None:
        line = f"{status} {detail}"
        if match_count > 0:
            line += f" | {match_count} matches found so far"
        if progress and progress[1] > 1:
            current, total = progress
            filled = int(self.BAR_WIDTH * current / total)
            line += f" [{'#' * filled}{'-' * (self.BAR_WIDTH - filled)}]"
        _safe_print(line)

    def show_completion(self, outcome: DeliveryOutcome) -> None:
        _safe_print("\n" + "=" * 50)
        _safe_print("✅ Export Complete!")
        _safe_print(f"{outcome.match_count} matches ready to import")
        _safe_print("=" * 50)
        if outcome.embedded:
            _safe_print("Open FaB Stats Import →")
            _safe_print(outcome.import_url)
        else:
            _safe_print("⬇ Large export - save the file, then upload it on the FaB Stats Import page:")
            _safe_print(FABSTATS_IMPORT_URL)
        if outcome.clipboard_ok:
            _safe_print("Also copied to clipboard as backup")

    def show_quick_sync_opened(self, outcome: DeliveryOutcome) -> None:
        _safe_print(f"⚡ Quick Sync: opened FaB Stats Import with {outcome.match_count} matches")

    def confirm_download(self, filename: str) -> bool:
        answer = input(f"Download match data as {filename}? [Y/n]: ").strip().lower()
        return answer in ("", "y", "yes")

    def show_error(self, message: str):
        """Display error message."""
        _safe_print(f"\n❌ Export Failed: {message}\n")

    def show_success(self, message: str):
        """Display success message."""
        _safe_print(f"\n{message}\n")
