from mindreel.models.entry import Entry
from mindreel.models.settings import Settings, SETTINGS_ID
from mindreel.models.weekly_summary import WeeklySummary
from mindreel.models.migration import Migration

__all__ = [
    "Entry",
    "Settings",
    "SETTINGS_ID",
    "WeeklySummary",
    "Migration",
]
