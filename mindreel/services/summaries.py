"""
Summary Store

Persists the text returned by the external summary generator, one record per
ISO week. Content is stored verbatim; writing a week that already has a
summary replaces its content.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from mindreel.database import Database, utcnow
from mindreel.errors import NotFoundError
from mindreel.models import WeeklySummary
from mindreel.services.validators import validate_summary_content
from mindreel.services.weeks import current_week, week_range

logger = logging.getLogger(__name__)


class SummaryStore:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self._clock = clock
        self._lock = threading.Lock()

    def upsert(self, iso_year: int, week_of_year: int, content: str) -> WeeklySummary:
        """Create or replace the summary for an ISO week."""
        validate_summary_content(content).raise_if_invalid()
        week = week_range(iso_year, week_of_year)

        with self._lock, self.database.session() as db:
            summary = (
                db.query(WeeklySummary)
                .filter(
                    WeeklySummary.iso_year == iso_year,
                    WeeklySummary.week_of_year == week_of_year,
                )
                .first()
            )
            if summary:
                summary.content = content
                summary.updated_at = self._clock()
                action = "Replaced"
            else:
                now = self._clock()
                summary = WeeklySummary(
                    iso_year=iso_year,
                    week_of_year=week_of_year,
                    start_date=week.start_date.isoformat(),
                    end_date=week.end_date.isoformat(),
                    content=content,
                    created_at=now,
                    updated_at=now,
                )
                db.add(summary)
                action = "Created"
            db.flush()

        logger.info(f"{action} summary for {week.key}")
        return summary

    def upsert_current_week(self, content: str) -> WeeklySummary:
        week = current_week(self._clock())
        return self.upsert(week.iso_year, week.week_of_year, content)

    def get_for_iso_week(self, iso_year: int, week_of_year: int) -> Optional[WeeklySummary]:
        with self.database.session() as db:
            return (
                db.query(WeeklySummary)
                .filter(
                    WeeklySummary.iso_year == iso_year,
                    WeeklySummary.week_of_year == week_of_year,
                )
                .first()
            )

    def exists_for_iso_week(self, iso_year: int, week_of_year: int) -> bool:
        return self.get_for_iso_week(iso_year, week_of_year) is not None

    def list_all(self) -> List[WeeklySummary]:
        """All summaries, newest week first."""
        with self.database.session() as db:
            return (
                db.query(WeeklySummary)
                .order_by(WeeklySummary.iso_year.desc(), WeeklySummary.week_of_year.desc())
                .all()
            )

    def list_for_year(self, iso_year: int) -> List[WeeklySummary]:
        with self.database.session() as db:
            return (
                db.query(WeeklySummary)
                .filter(WeeklySummary.iso_year == iso_year)
                .order_by(WeeklySummary.week_of_year.desc())
                .all()
            )

    def latest(self) -> Optional[WeeklySummary]:
        with self.database.session() as db:
            return (
                db.query(WeeklySummary)
                .order_by(WeeklySummary.updated_at.desc(), WeeklySummary.id.desc())
                .first()
            )

    def delete(self, summary_id: int) -> None:
        with self._lock, self.database.session() as db:
            summary = db.get(WeeklySummary, summary_id)
            if summary is None:
                raise NotFoundError("Summary", summary_id)
            db.delete(summary)
        logger.info(f"Deleted summary {summary_id}")
