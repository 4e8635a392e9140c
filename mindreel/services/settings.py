"""
Settings Store

Read and update the singleton settings row. Updates are partial: only the
fields set on a SettingsUpdate change, and every call returns the full
resulting record.

Every successful write is pushed to the registered listeners (the prompt
scheduler) while the store lock is still held, so the in-memory timer and
hotkey state is updated in the same order the rows were written.
"""
import logging
import threading
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from mindreel.config import Config
from mindreel.database import Database
from mindreel.models import Settings, SETTINGS_ID
from mindreel.services.validators import (
    ValidationResult,
    validate_global_shortcut,
    validate_popup_interval,
)

logger = logging.getLogger(__name__)

SettingsListener = Callable[[Settings], None]


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class SettingsUpdate:
    """Explicit optional-field update. UNSET means 'leave unchanged'.

    global_shortcut=None is a real value (disable the shortcut), which is
    why a sentinel is used instead of Optional.
    """
    popup_interval_minutes: Union[int, _Unset] = UNSET
    global_shortcut: Union[str, None, _Unset] = UNSET
    onboarding_completed: Union[bool, _Unset] = UNSET

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SettingsUpdate":
        known = {f.name for f in fields(cls)}
        ignored = sorted(set(data) - known - {"id"})
        if ignored:
            logger.warning(f"Ignoring unknown settings fields: {ignored}")
        return cls(**{key: value for key, value in data.items() if key in known})

    def provided(self) -> Dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def validate(self) -> ValidationResult:
        result = ValidationResult()
        if self.popup_interval_minutes is not UNSET:
            result.errors.extend(validate_popup_interval(self.popup_interval_minutes).errors)
        if self.global_shortcut is not UNSET:
            result.errors.extend(validate_global_shortcut(self.global_shortcut).errors)
        if self.onboarding_completed is not UNSET and not isinstance(self.onboarding_completed, bool):
            result.add_error("onboarding_completed must be true or false")
        return result


class SettingsStore:
    """Exclusive owner of the settings row."""

    def __init__(self, database: Database, config: Config):
        self.database = database
        self.config = config
        self._lock = threading.RLock()
        self._listeners: List[SettingsListener] = []

    @property
    def defaults(self) -> Dict[str, Any]:
        return {
            "popup_interval_minutes": self.config.default_popup_interval_minutes,
            "global_shortcut": self.config.default_global_shortcut,
        }

    def subscribe(self, listener: SettingsListener) -> None:
        self._listeners.append(listener)

    def get(self) -> Settings:
        """Return the settings row, recreating it with defaults if it is missing."""
        with self._lock, self.database.session() as db:
            return self._load_or_create(db)

    def update(self, partial: Union[SettingsUpdate, Mapping[str, Any]]) -> Settings:
        if not isinstance(partial, SettingsUpdate):
            partial = SettingsUpdate.from_dict(partial)
        partial.validate().raise_if_invalid()
        changes = partial.provided()

        with self._lock:
            with self.database.session() as db:
                settings = self._load_or_create(db)
                for key, value in changes.items():
                    setattr(settings, key, value)
            logger.info(f"Settings updated: {changes}")
            self._notify(settings)
            return settings

    def update_popup_interval(self, minutes: int) -> Settings:
        return self.update(SettingsUpdate(popup_interval_minutes=minutes))

    def update_global_shortcut(self, shortcut: Optional[str]) -> Settings:
        return self.update(SettingsUpdate(global_shortcut=shortcut))

    def complete_onboarding(self) -> Settings:
        return self.update(SettingsUpdate(onboarding_completed=True))

    def reset(self) -> Settings:
        """Restore interval and shortcut defaults. Onboarding state is kept."""
        with self._lock:
            with self.database.session() as db:
                settings = self._load_or_create(db)
                settings.popup_interval_minutes = self.config.default_popup_interval_minutes
                settings.global_shortcut = self.config.default_global_shortcut
            logger.info("Settings reset to defaults")
            self._notify(settings)
            return settings

    def _load_or_create(self, db) -> Settings:
        settings = db.get(Settings, SETTINGS_ID)
        if settings is None:
            logger.warning("Settings row missing; recreating with defaults")
            settings = Settings(id=SETTINGS_ID, onboarding_completed=False, **self.defaults)
            db.add(settings)
            db.flush()
        return settings

    def _notify(self, settings: Settings) -> None:
        for listener in list(self._listeners):
            listener(settings)
