"""
Command line access to the MindReel store.

Usage:
    mindreel migrate
    mindreel settings
    mindreel weeks
    mindreel add "Reviewed the onboarding flow"

Configuration comes from the environment (and .env), see mindreel.config.
The scheduler and hotkey are not started; these commands only touch the
database.
"""
import argparse
import logging
import sys
from typing import List, Optional

from mindreel import __version__
from mindreel.config import Config
from mindreel.database import Database
from mindreel.errors import MindReelError
from mindreel.migrations import MigrationRunner
from mindreel.services import EntryStore, SettingsStore

logger = logging.getLogger(__name__)


def _runner(config: Config, database: Database) -> MigrationRunner:
    return MigrationRunner(
        database,
        settings_defaults={
            "popup_interval_minutes": config.default_popup_interval_minutes,
            "global_shortcut": config.default_global_shortcut,
        },
    )


def _prepare(config: Config, database: Database) -> None:
    database.check_connection()
    _runner(config, database).apply_pending()


def cmd_migrate(config: Config, args) -> int:
    database = Database(config)
    try:
        database.check_connection()
        runner = _runner(config, database)
        applied = runner.apply_pending()
        print(f"Applied {applied} migration(s); schema at revision {runner.latest_revision}")
        return 0
    finally:
        database.dispose()


def cmd_settings(config: Config, args) -> int:
    database = Database(config)
    try:
        _prepare(config, database)
        settings = SettingsStore(database, config).get()
        print(f"  Popup interval : {settings.popup_interval_minutes} min"
              f"{' (disabled)' if settings.popup_interval_minutes == 0 else ''}")
        print(f"  Shortcut       : {settings.global_shortcut or '(none)'}")
        print(f"  Onboarding     : {'done' if settings.onboarding_completed else 'pending'}")
        return 0
    finally:
        database.dispose()


def cmd_weeks(config: Config, args) -> int:
    database = Database(config)
    try:
        _prepare(config, database)
        entries = EntryStore(database)
        counts = entries.count_by_week()
        weeks = entries.iso_weeks_with_entries()
        if not weeks:
            print("No entries yet")
        for week in weeks:
            count = counts[(week.iso_year, week.week_of_year)]
            print(f"  {week.key}  {week.start_date} .. {week.end_date}  {count} entr{'y' if count == 1 else 'ies'}")
        return 0
    finally:
        database.dispose()


def cmd_add(config: Config, args) -> int:
    database = Database(config)
    try:
        _prepare(config, database)
        entry = EntryStore(database).create(args.content)
        print(f"Saved entry {entry.id} ({entry.iso_year}-W{entry.week_of_year:02d})")
        return 0
    finally:
        database.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mindreel",
        description="Work journal store: migrations, settings and entries.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate = subparsers.add_parser("migrate", help="Apply pending schema migrations")
    migrate.set_defaults(func=cmd_migrate)

    settings = subparsers.add_parser("settings", help="Show current settings")
    settings.set_defaults(func=cmd_settings)

    weeks = subparsers.add_parser("weeks", help="List ISO weeks that have entries")
    weeks.set_defaults(func=cmd_weeks)

    add = subparsers.add_parser("add", help="Log a note")
    add.add_argument("content", help="Note text")
    add.set_defaults(func=cmd_add)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config.from_env()
    except MindReelError as e:
        print(f"[mindreel] Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or config.debug else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(config, args)
    except MindReelError as e:
        logger.error(str(e))
        print(f"[mindreel] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
