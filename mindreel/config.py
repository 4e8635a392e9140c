"""
Process-scoped configuration.

A single Config object is built at startup (usually with Config.from_env())
and handed to the database, the stores and the scheduler. Nothing in the core
reads environment variables after that point.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from mindreel.errors import ValidationError

DEFAULT_POPUP_INTERVAL_MINUTES = 60
DEFAULT_GLOBAL_SHORTCUT = "Option+Command+Space"
DEFAULT_REQUEST_QUEUE_SIZE = 8
DATABASE_FILENAME = "mindreel.db"


def default_data_dir() -> Path:
    return Path.home() / ".mindreel"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got '{value}'")


@dataclass
class Config:
    data_dir: Path = field(default_factory=default_data_dir)
    database_url: Optional[str] = None
    default_popup_interval_minutes: int = DEFAULT_POPUP_INTERVAL_MINUTES
    default_global_shortcut: Optional[str] = DEFAULT_GLOBAL_SHORTCUT
    request_queue_size: int = DEFAULT_REQUEST_QUEUE_SIZE
    open_on_start: bool = True
    debug: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        if self.default_popup_interval_minutes < 0:
            raise ValidationError("Default popup interval cannot be negative")
        if self.request_queue_size < 1:
            raise ValidationError("Request queue size must be at least 1")

    @property
    def resolved_database_url(self) -> str:
        """Database URL, defaulting to a SQLite file inside data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_dir / DATABASE_FILENAME}"

    @classmethod
    def from_env(cls) -> "Config":
        """Build configuration from the environment (and a .env file if present)."""
        load_dotenv()

        data_dir = os.getenv("MINDREEL_DATA_DIR")
        shortcut = os.getenv("MINDREEL_DEFAULT_SHORTCUT", DEFAULT_GLOBAL_SHORTCUT)
        return cls(
            data_dir=Path(data_dir).expanduser() if data_dir else default_data_dir(),
            database_url=os.getenv("MINDREEL_DATABASE_URL") or None,
            default_popup_interval_minutes=_env_int(
                "MINDREEL_DEFAULT_POPUP_INTERVAL", DEFAULT_POPUP_INTERVAL_MINUTES
            ),
            default_global_shortcut=shortcut or None,
            request_queue_size=_env_int("MINDREEL_REQUEST_QUEUE_SIZE", DEFAULT_REQUEST_QUEUE_SIZE),
            open_on_start=_env_flag("MINDREEL_OPEN_ON_START", True),
            debug=_env_flag("MINDREEL_DEBUG", False),
            log_level=os.getenv("MINDREEL_LOG_LEVEL", "INFO").upper(),
        )
