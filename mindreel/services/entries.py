"""
Entry Store

Append, edit and delete timestamped notes, plus the range and ISO-week
queries used by history views and the summary generator.

Deleting or updating a missing id raises NotFoundError; see
EntryStore.DELETE_MISSING_RAISES.
"""
import logging
import threading
from datetime import date, datetime, time
from typing import Callable, Dict, List, Optional, Union

from sqlalchemy import func

from mindreel.database import Database, as_utc, utcnow
from mindreel.errors import NotFoundError
from mindreel.models import Entry
from mindreel.services.validators import validate_entry_content
from mindreel.services.weeks import IsoWeek, WeekId, current_week, iso_week_of, week_range

logger = logging.getLogger(__name__)

Bound = Union[date, datetime, None]


def _lower_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return datetime.combine(value, time.min)


def _upper_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    # A bare date includes the whole day
    return datetime.combine(value, time.max)


class EntryStore:
    """Owns all writes to the entries table."""

    # Contract decision: delete(id) on a missing id is an error, like update(id).
    DELETE_MISSING_RAISES = True

    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self._clock = clock
        self._lock = threading.Lock()

    def create(self, content: str, timestamp: Optional[datetime] = None) -> Entry:
        """Store a new note. Content is trimmed; empty content is rejected."""
        validate_entry_content(content).raise_if_invalid()

        created_at = as_utc(timestamp) if timestamp is not None else self._clock()
        week = iso_week_of(created_at)
        entry = Entry(
            content=content.strip(),
            date=created_at.date().isoformat(),
            week_of_year=week.week_of_year,
            iso_year=week.iso_year,
            created_at=created_at,
        )

        with self._lock, self.database.session() as db:
            db.add(entry)
            db.flush()

        logger.info(f"Created entry {entry.id} for {week.key}")
        return entry

    def get(self, entry_id: int) -> Optional[Entry]:
        with self.database.session() as db:
            return db.get(Entry, entry_id)

    def list(self, start: Bound = None, end: Bound = None) -> List[Entry]:
        """Entries with start <= created_at <= end, oldest first.

        Either bound may be omitted. A date bound covers the whole day.
        """
        lower = _lower_bound(start)
        upper = _upper_bound(end)
        with self.database.session() as db:
            query = db.query(Entry)
            if lower is not None:
                query = query.filter(Entry.created_at >= lower)
            if upper is not None:
                query = query.filter(Entry.created_at <= upper)
            return query.order_by(Entry.created_at, Entry.id).all()

    def list_for_date(self, day: date) -> List[Entry]:
        with self.database.session() as db:
            return (
                db.query(Entry)
                .filter(Entry.date == day.isoformat())
                .order_by(Entry.created_at, Entry.id)
                .all()
            )

    def list_for_iso_week(self, iso_year: int, week_of_year: int) -> List[Entry]:
        week_range(iso_year, week_of_year)
        with self.database.session() as db:
            return (
                db.query(Entry)
                .filter(Entry.iso_year == iso_year, Entry.week_of_year == week_of_year)
                .order_by(Entry.created_at, Entry.id)
                .all()
            )

    def list_current_week(self) -> List[Entry]:
        week = current_week(self._clock())
        return self.list_for_iso_week(week.iso_year, week.week_of_year)

    def update(self, entry_id: int, content: str) -> Entry:
        """Replace an entry's content. The timestamp is left unchanged."""
        validate_entry_content(content).raise_if_invalid()

        with self._lock, self.database.session() as db:
            entry = db.get(Entry, entry_id)
            if entry is None:
                raise NotFoundError("Entry", entry_id)
            entry.content = content.strip()

        logger.info(f"Updated entry {entry_id}")
        return entry

    def delete(self, entry_id: int) -> None:
        with self._lock, self.database.session() as db:
            entry = db.get(Entry, entry_id)
            if entry is None:
                raise NotFoundError("Entry", entry_id)
            db.delete(entry)

        logger.info(f"Deleted entry {entry_id}")

    def count_for_date(self, day: date) -> int:
        with self.database.session() as db:
            return db.query(func.count(Entry.id)).filter(Entry.date == day.isoformat()).scalar() or 0

    def dates_with_entries(self) -> List[str]:
        """Distinct YYYY-MM-DD dates that have entries, newest first."""
        with self.database.session() as db:
            rows = db.query(Entry.date).distinct().order_by(Entry.date.desc()).all()
        return [row[0] for row in rows]

    def count_by_week(self) -> Dict[WeekId, int]:
        with self.database.session() as db:
            rows = (
                db.query(Entry.iso_year, Entry.week_of_year, func.count(Entry.id))
                .group_by(Entry.iso_year, Entry.week_of_year)
                .all()
            )
        return {(int(iso_year), int(week)): int(count) for iso_year, week, count in rows}

    def iso_weeks_with_entries(self) -> List[IsoWeek]:
        """ISO weeks that have at least one entry, newest first."""
        return [
            week_range(iso_year, week_of_year)
            for iso_year, week_of_year in sorted(self.count_by_week(), reverse=True)
        ]
