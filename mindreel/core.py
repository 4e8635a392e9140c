"""
MindReel core

Wires configuration, storage, the prompt scheduler and the window controller
together, and exposes the boundary operations the presentation layer calls.
Store access is refused until startup() has brought the schema up to date.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler

from mindreel.config import Config
from mindreel.database import Database
from mindreel.errors import StorageError, ValidationError
from mindreel.hotkeys import HotkeyBinder, PynputHotkeyBinder
from mindreel.migrations import MigrationRunner
from mindreel.models import Entry, Settings, WeeklySummary
from mindreel.scheduler import PromptScheduler
from mindreel.services import (
    EntryStore,
    IsoWeek,
    SettingsStore,
    SettingsUpdate,
    SummaryStore,
    build_summary_payload,
)
from mindreel.window import PromptWindowController, WindowHost

logger = logging.getLogger(__name__)


class MindReelCore:
    # Boundary operation name -> method name
    OPERATIONS = {
        "db.getSettings": "get_settings",
        "db.updateSettings": "update_settings",
        "db.updatePopupInterval": "update_popup_interval",
        "db.updateGlobalShortcut": "update_global_shortcut",
        "db.resetSettings": "reset_settings",
        "db.completeOnboarding": "complete_onboarding",
        "db.createEntry": "create_entry",
        "db.getEntries": "get_entries",
        "db.updateEntry": "update_entry",
        "db.deleteEntry": "delete_entry",
        "db.getEntriesForIsoWeek": "get_entries_for_iso_week",
        "db.getIsoWeeksWithEntries": "get_iso_weeks_with_entries",
        "db.getSummaryInput": "get_summary_input",
        "db.upsertSummary": "upsert_summary",
        "db.getSummaryForIsoWeek": "get_summary_for_iso_week",
        "db.getAllSummaries": "get_all_summaries",
        "capture.openPopup": "open_popup",
        "capture.closePopup": "close_popup",
        "capture.save": "save_from_popup",
        "capture.closed": "popup_closed",
        "shortcut.isRegistered": "is_shortcut_registered",
        "shortcut.status": "shortcut_status",
        "shortcut.register": "register_shortcut",
    }

    def __init__(
        self,
        config: Config,
        host: WindowHost,
        hotkeys: Optional[HotkeyBinder] = None,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self.config = config
        self.database = Database(config)
        self.migrations = MigrationRunner(
            self.database,
            settings_defaults={
                "popup_interval_minutes": config.default_popup_interval_minutes,
                "global_shortcut": config.default_global_shortcut,
            },
        )
        self.settings = SettingsStore(self.database, config)
        self.entries = EntryStore(self.database)
        self.summaries = SummaryStore(self.database)
        self.scheduler = PromptScheduler(config, hotkeys or PynputHotkeyBinder(), scheduler=scheduler)
        self.window = PromptWindowController(host, self.entries, self.scheduler)
        self.settings.subscribe(self.scheduler.apply_settings)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def startup(self, run_dispatcher: bool = True) -> None:
        """Migrate, arm the scheduler and optionally raise the first prompt.

        StorageError and MigrationError propagate; the core stays closed.
        """
        logger.info(f"Starting MindReel core ({self.database.url})")
        self.database.check_connection()
        self.migrations.apply_pending()

        settings = self.settings.get()
        self.scheduler.apply_settings(settings)
        self.scheduler.start(run_dispatcher=run_dispatcher)
        self._started = True

        if self.config.open_on_start and settings.onboarding_completed:
            self.scheduler.open_now()
        logger.info("MindReel core started")

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.window.close()
        self.database.dispose()
        self._started = False
        logger.info("MindReel core stopped")

    def _require_started(self) -> None:
        if not self._started:
            raise StorageError("Store is not open; startup() has not completed")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> Settings:
        self._require_started()
        return self.settings.get()

    def update_settings(self, partial: Union[SettingsUpdate, Mapping[str, Any]]) -> Settings:
        self._require_started()
        return self.settings.update(partial)

    def update_popup_interval(self, minutes: int) -> Settings:
        self._require_started()
        return self.settings.update_popup_interval(minutes)

    def update_global_shortcut(self, shortcut: Optional[str]) -> Settings:
        self._require_started()
        return self.settings.update_global_shortcut(shortcut)

    def reset_settings(self) -> Settings:
        self._require_started()
        return self.settings.reset()

    def complete_onboarding(self) -> Settings:
        """Mark onboarding done and open the first prompt."""
        self._require_started()
        settings = self.settings.complete_onboarding()
        self.scheduler.open_now()
        return settings

    # ------------------------------------------------------------------
    # Entries and weeks
    # ------------------------------------------------------------------

    def create_entry(self, content: str) -> Entry:
        self._require_started()
        return self.entries.create(content)

    def get_entries(
        self,
        start: Union[date, datetime, None] = None,
        end: Union[date, datetime, None] = None,
    ) -> List[Entry]:
        self._require_started()
        return self.entries.list(start, end)

    def update_entry(self, entry_id: int, content: str) -> Entry:
        self._require_started()
        return self.entries.update(entry_id, content)

    def delete_entry(self, entry_id: int) -> None:
        self._require_started()
        self.entries.delete(entry_id)

    def get_entries_for_iso_week(self, iso_year: int, week_of_year: int) -> List[Entry]:
        self._require_started()
        return self.entries.list_for_iso_week(iso_year, week_of_year)

    def get_iso_weeks_with_entries(self) -> List[IsoWeek]:
        self._require_started()
        return self.entries.iso_weeks_with_entries()

    def get_summary_input(self, iso_year: int, week_of_year: int) -> List[Dict[str, str]]:
        """Entries of one ISO week in the form the summary generator takes."""
        return build_summary_payload(self.get_entries_for_iso_week(iso_year, week_of_year))

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def upsert_summary(self, iso_year: int, week_of_year: int, content: str) -> WeeklySummary:
        self._require_started()
        return self.summaries.upsert(iso_year, week_of_year, content)

    def get_summary_for_iso_week(self, iso_year: int, week_of_year: int) -> Optional[WeeklySummary]:
        self._require_started()
        return self.summaries.get_for_iso_week(iso_year, week_of_year)

    def get_all_summaries(self) -> List[WeeklySummary]:
        self._require_started()
        return self.summaries.list_all()

    # ------------------------------------------------------------------
    # Capture window and shortcut
    # ------------------------------------------------------------------

    def open_popup(self) -> bool:
        """Queue a programmatic open. False if the request queue is full."""
        self._require_started()
        return self.scheduler.open_now()

    def close_popup(self) -> None:
        self.window.close()

    def save_from_popup(self, content: str) -> Entry:
        self._require_started()
        return self.window.handle_save(content)

    def popup_closed(self) -> None:
        self.window.handle_close()

    def is_shortcut_registered(self) -> bool:
        return self.scheduler.is_shortcut_registered

    def shortcut_status(self) -> Dict[str, Any]:
        return {
            "is_registered": self.scheduler.is_shortcut_registered,
            "shortcut": self.scheduler.registered_shortcut,
        }

    def register_shortcut(self, accelerator: Optional[str]) -> bool:
        return self.scheduler.register_shortcut(accelerator)

    # ------------------------------------------------------------------
    # Boundary dispatch
    # ------------------------------------------------------------------

    def invoke(self, operation: str, *args, **kwargs) -> Any:
        """Call a boundary operation by name and return a plain-data result."""
        method_name = self.OPERATIONS.get(operation)
        if method_name is None:
            raise ValidationError(f"Unknown operation '{operation}'")
        result = getattr(self, method_name)(*args, **kwargs)
        return _to_plain(result)


def _to_plain(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value
