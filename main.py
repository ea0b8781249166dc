#!/usr/bin/env python3
# main.py
"""
CLI for exporting GEM match history to FaB Stats.

Usage:
    python main.py login
    python main.py export
    python main.py quick-sync
    python main.py set-budget 50
    python main.py                  # interactive menu
"""

import argparse
import asyncio
import logging
import sys

from fabexport.config import (
    DEFAULT_DOWNLOAD_DIR,
    DEFAULT_PREFERENCES_PATH,
    DEFAULT_STORAGE_STATE_PATH,
    HISTORY_PATH,
    SYNC_OPTIONS,
)
from fabexport.preferences import Preferences
from fabexport.runner import ExportRunner
from fabexport.scraper import GemSession, SessionError
from fabexport.ui import TerminalUI


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Export your GEM match history to FaB Stats',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py login                 # log in to GEM once, cookies are saved
  python main.py export                # all history pages
  python main.py quick-sync            # page budget from set-budget
  python main.py export --csv data/history.csv --headless
        """
    )
    parser.add_argument(
        'command',
        nargs='?',
        choices=['login', 'export', 'quick-sync', 'set-budget'],
        help='Command to run (default: interactive menu)'
    )
    parser.add_argument(
        'budget',
        nargs='?',
        help='Quick Sync event count for set-budget: ' + ', '.join(o['label'] for o in SYNC_OPTIONS)
    )
    parser.add_argument(
        '--headless',
        action='store_true',
        default=False,
        help='Run the browser in headless mode'
    )
    parser.add_argument(
        '--storage-state',
        default=DEFAULT_STORAGE_STATE_PATH,
        help=f'Path to storage state file (default: {DEFAULT_STORAGE_STATE_PATH})'
    )
    parser.add_argument(
        '--preferences',
        default=DEFAULT_PREFERENCES_PATH,
        help=f'Path to preferences file (default: {DEFAULT_PREFERENCES_PATH})'
    )
    parser.add_argument(
        '--download-dir',
        default=DEFAULT_DOWNLOAD_DIR,
        help=f'Where oversized exports are saved (default: {DEFAULT_DOWNLOAD_DIR})'
    )
    parser.add_argument(
        '--csv',
        metavar='PATH',
        help='Also write the exported matches as CSV'
    )
    parser.add_argument(
        '--yes',
        action='store_true',
        help='Save oversized exports without asking'
    )
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')
    return parser


async def _login(session: GemSession) -> None:
    await session.open(HISTORY_PATH)
    input("Log in to GEM in the browser window, then press Enter to save the session...")


async def _interactive(runner: ExportRunner, ui: TerminalUI, preferences: Preferences) -> None:
    while True:
        choice = ui.show_menu(preferences.quick_sync_label)
        if choice == '1':
            await runner.handle_export(quick_mode=False)
        elif choice == '2':
            await runner.handle_export(quick_mode=True)
        elif choice == '3':
            label = ui.select_sync_option(preferences.quick_sync_label)
            if label:
                preferences.set_quick_sync_label(label)
                ui.show_success(f"Quick Sync will read {label} events")
        elif choice == '4':
            print("\nGoodbye!")
            break


async def _run(args: argparse.Namespace, ui: TerminalUI, preferences: Preferences) -> int:
    async with GemSession(headed=not args.headless, storage_state_path=args.storage_state) as session:
        if args.command == 'login':
            await _login(session)
            return 0

        await session.open(HISTORY_PATH)
        runner = ExportRunner(
            session.fetcher,
            session,
            ui,
            preferences=preferences,
            active_view=session,
            download_dir=args.download_dir,
            csv_path=args.csv,
            interactive=not args.yes,
        )

        if args.command is None:
            await _interactive(runner, ui, preferences)
            return 0

        outcome = await runner.handle_export(quick_mode=args.command == 'quick-sync')
        if outcome is not None and outcome.quick_mode and args.headless:
            # Headless tabs are invisible, print the link
            print(outcome.import_url)
        if outcome is not None and outcome.quick_mode and not args.headless:
            input("Press Enter to close the browser...")
        return 0 if outcome is not None else 1


def main() -> int:
    """Main CLI entrypoint."""
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ui = TerminalUI()
    preferences = Preferences(args.preferences)

    if args.command == 'set-budget':
        if not args.budget:
            ui.show_error("set-budget needs an event count: " + ', '.join(o['label'] for o in SYNC_OPTIONS))
            return 2
        try:
            preferences.set_quick_sync_label(args.budget)
        except ValueError as e:
            ui.show_error(str(e))
            return 2
        ui.show_success(f"Quick Sync will read {preferences.quick_sync_label} events")
        return 0

    try:
        return asyncio.run(_run(args, ui, preferences))
    except SessionError as e:
        ui.show_error(str(e))
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
