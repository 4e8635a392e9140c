from mindreel.services.entries import EntryStore
from mindreel.services.settings import SettingsStore, SettingsUpdate, UNSET
from mindreel.services.summaries import SummaryStore
from mindreel.services.weeks import (
    IsoWeek,
    iso_week_of,
    week_range,
    current_week,
    week_key,
    parse_week_key,
    week_start_monday,
    group_by_week,
    build_summary_payload,
)

__all__ = [
    'EntryStore',
    'SettingsStore',
    'SettingsUpdate',
    'UNSET',
    'SummaryStore',
    'IsoWeek',
    'iso_week_of',
    'week_range',
    'current_week',
    'week_key',
    'parse_week_key',
    'week_start_monday',
    'group_by_week',
    'build_summary_payload',
]
