"""
Week Aggregator

Pure helpers for ISO-8601 week numbering: weeks run Monday to Sunday and
week 1 is the week containing the year's first Thursday. The ISO year can
differ from the calendar year near January 1st, e.g. 2025-12-29 through
2026-01-04 all belong to 2026-W01.

Nothing here touches the database.
"""

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, Union

from mindreel.database import as_utc, utcnow
from mindreel.errors import ValidationError

WeekId = Tuple[int, int]


@dataclass(frozen=True)
class IsoWeek:
    iso_year: int
    week_of_year: int
    start_date: date
    end_date: date

    @property
    def key(self) -> str:
        return week_key(self.iso_year, self.week_of_year)

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self):
        return {
            "iso_year": self.iso_year,
            "week_of_year": self.week_of_year,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        return as_utc(value).date()
    return value


def week_start_monday(for_date: Union[date, datetime]) -> date:
    """Get the Monday of the week containing the given date."""
    target = _as_date(for_date)
    # weekday() returns 0 for Monday, 6 for Sunday
    return target - timedelta(days=target.weekday())


def weeks_in_year(iso_year: int) -> int:
    # December 28th always falls in the last ISO week of its year
    return date(iso_year, 12, 28).isocalendar()[1]


def week_range(iso_year: int, week_of_year: int) -> IsoWeek:
    """Monday and Sunday of the given ISO week."""
    if week_of_year < 1 or week_of_year > weeks_in_year(iso_year):
        raise ValidationError(f"{iso_year} has no ISO week {week_of_year}")
    monday = date.fromisocalendar(iso_year, week_of_year, 1)
    return IsoWeek(
        iso_year=iso_year,
        week_of_year=week_of_year,
        start_date=monday,
        end_date=monday + timedelta(days=6),
    )


def iso_week_of(timestamp: Union[date, datetime]) -> IsoWeek:
    """ISO year, week number, Monday and Sunday for a timestamp.

    Aware datetimes are converted to UTC first; naive ones are taken as UTC.
    """
    day = _as_date(timestamp)
    iso_year, week_of_year, _ = day.isocalendar()
    return week_range(iso_year, week_of_year)


def current_week(now: Optional[datetime] = None) -> IsoWeek:
    return iso_week_of(now or utcnow())


def week_key(iso_year: int, week_of_year: int) -> str:
    return f"{iso_year}-W{week_of_year:02d}"


def parse_week_key(key: str) -> WeekId:
    """Inverse of week_key: '2026-W01' -> (2026, 1)."""
    try:
        year_part, week_part = key.split("-W")
        iso_year, week_of_year = int(year_part), int(week_part)
    except ValueError:
        raise ValidationError(f"Invalid week key '{key}'")
    week_range(iso_year, week_of_year)
    return iso_year, week_of_year


def group_by_week(entries: Iterable) -> Dict[WeekId, List]:
    """Group entries by (iso_year, week_of_year) of their created_at.

    Weeks are ordered oldest first and entries inside each week oldest first.
    """
    grouped: Dict[WeekId, List] = {}
    for entry in entries:
        week = iso_week_of(entry.created_at)
        grouped.setdefault((week.iso_year, week.week_of_year), []).append(entry)

    ordered = OrderedDict()
    for week_id in sorted(grouped):
        ordered[week_id] = sorted(grouped[week_id], key=lambda e: (e.created_at, e.id or 0))
    return ordered


def build_summary_payload(entries: Iterable) -> List[Dict[str, str]]:
    """Entries in the shape the summary generator expects: timestamp + text."""
    ordered = sorted(entries, key=lambda e: (e.created_at, e.id or 0))
    return [
        {"timestamp": entry.created_at.isoformat(), "text": entry.content}
        for entry in ordered
    ]
