"""
Tests for the entry store.
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from mindreel.database import utcnow
from mindreel.errors import NotFoundError, ValidationError
from mindreel.services import EntryStore


@pytest.fixture
def store(database):
    return EntryStore(database)


class TestCreate:
    """Tests for creating entries."""

    def test_round_trip(self, store):
        """A created entry is listed with a timestamp from now."""
        before = utcnow()
        created = store.create("Reviewed pull requests")
        after = utcnow()

        entries = store.list()
        assert [e.content for e in entries] == ["Reviewed pull requests"]
        assert entries[0].id == created.id
        assert before <= entries[0].created_at <= after

    def test_content_is_trimmed(self, store):
        """Surrounding whitespace is stripped before saving."""
        assert store.create("  standup notes \n").content == "standup notes"

    def test_blank_content_is_rejected(self, store):
        """Whitespace-only content is rejected and nothing is stored."""
        with pytest.raises(ValidationError):
            store.create("   ")
        assert store.list() == []

    def test_none_content_is_rejected(self, store):
        """Missing content is rejected."""
        with pytest.raises(ValidationError):
            store.create(None)

    def test_week_columns_follow_iso_calendar(self, store):
        """New Year's Eve 2025 is stored in ISO week 2026-W01."""
        entry = store.create("Year-end cleanup", timestamp=datetime(2025, 12, 31, 10, 0))
        assert entry.date == "2025-12-31"
        assert entry.iso_year == 2026
        assert entry.week_of_year == 1

    def test_aware_timestamp_is_stored_as_utc(self, store):
        """An aware timestamp is converted to naive UTC first."""
        plus_two = timezone(timedelta(hours=2))
        entry = store.create("Early start", timestamp=datetime(2026, 1, 1, 0, 30, tzinfo=plus_two))
        assert entry.created_at == datetime(2025, 12, 31, 22, 30)
        assert entry.date == "2025-12-31"
        assert (entry.iso_year, entry.week_of_year) == (2026, 1)

    def test_injected_clock(self, database):
        """The store clock decides the timestamp when none is given."""
        store = EntryStore(database, clock=lambda: datetime(2021, 1, 1, 9, 0))
        entry = store.create("Holiday on-call")
        assert (entry.iso_year, entry.week_of_year) == (2020, 53)


class TestList:
    """Tests for range queries."""

    @pytest.fixture
    def week(self, store):
        return [
            store.create("monday", timestamp=datetime(2026, 1, 5, 9)),
            store.create("tuesday", timestamp=datetime(2026, 1, 6, 23, 59)),
            store.create("wednesday", timestamp=datetime(2026, 1, 7, 8)),
        ]

    def test_ordered_oldest_first(self, store, week):
        """Entries are listed oldest first."""
        assert [e.content for e in store.list()] == ["monday", "tuesday", "wednesday"]

    def test_date_bounds_cover_whole_days(self, store, week):
        """Date bounds include the whole day."""
        entries = store.list(date(2026, 1, 6), date(2026, 1, 6))
        assert [e.content for e in entries] == ["tuesday"]

    def test_datetime_bounds_are_inclusive(self, store, week):
        """Datetime bounds include both ends."""
        entries = store.list(datetime(2026, 1, 5, 9), datetime(2026, 1, 6, 23, 59))
        assert [e.content for e in entries] == ["monday", "tuesday"]

    def test_open_ended_bounds(self, store, week):
        """Either bound may be left open."""
        assert [e.content for e in store.list(start=date(2026, 1, 7))] == ["wednesday"]
        assert [e.content for e in store.list(end=date(2026, 1, 5))] == ["monday"]

    def test_list_for_date_and_count(self, store, week):
        """Listing and counting by a single date."""
        assert [e.content for e in store.list_for_date(date(2026, 1, 5))] == ["monday"]
        assert store.count_for_date(date(2026, 1, 6)) == 1
        assert store.count_for_date(date(2026, 1, 8)) == 0

    def test_dates_with_entries_newest_first(self, store, week):
        """Dates that have entries come newest first."""
        assert store.dates_with_entries() == ["2026-01-07", "2026-01-06", "2026-01-05"]


class TestUpdateAndDelete:
    """Tests for editing and removing entries."""

    def test_update_replaces_content_only(self, store):
        """Updating keeps the original timestamp."""
        entry = store.create("draft", timestamp=datetime(2026, 2, 3, 10))
        updated = store.update(entry.id, "final")
        assert updated.content == "final"
        assert store.get(entry.id).created_at == datetime(2026, 2, 3, 10)

    def test_update_missing_entry(self, store):
        """Updating an unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            store.update(404, "anything")

    def test_update_with_blank_content_keeps_original(self, store):
        """A blank update is rejected and the old content stays."""
        entry = store.create("keep me")
        with pytest.raises(ValidationError):
            store.update(entry.id, "")
        assert store.get(entry.id).content == "keep me"

    def test_delete(self, store):
        """A deleted entry is gone from get and list."""
        entry = store.create("temporary")
        store.delete(entry.id)
        assert store.get(entry.id) is None
        assert store.list() == []

    def test_delete_missing_entry(self, store):
        """Deleting an unknown id raises NotFoundError with the id."""
        with pytest.raises(NotFoundError) as excinfo:
            store.delete(404)
        assert excinfo.value.record_id == 404


class TestIsoWeekQueries:
    """Tests for week-based queries."""

    def test_list_for_iso_week_crosses_calendar_year(self, store):
        """ISO week 2026-W01 includes the last days of 2025."""
        store.create("old year", timestamp=datetime(2025, 12, 29, 9))
        store.create("new year", timestamp=datetime(2026, 1, 4, 18))
        store.create("next week", timestamp=datetime(2026, 1, 5, 9))

        entries = store.list_for_iso_week(2026, 1)
        assert [e.content for e in entries] == ["old year", "new year"]

    def test_invalid_week_is_rejected(self, store):
        """2025 has no week 53."""
        with pytest.raises(ValidationError):
            store.list_for_iso_week(2025, 53)

    def test_weeks_with_entries_newest_first(self, store):
        """Weeks that have entries come newest first."""
        store.create("a", timestamp=datetime(2025, 12, 31, 9))
        store.create("b", timestamp=datetime(2026, 1, 13, 9))
        store.create("c", timestamp=datetime(2026, 1, 14, 9))

        weeks = store.iso_weeks_with_entries()
        assert [w.key for w in weeks] == ["2026-W03", "2026-W01"]
        assert weeks[1].start_date == date(2025, 12, 29)
        assert store.count_by_week() == {(2026, 1): 1, (2026, 3): 2}

    def test_current_week(self, database):
        """Only this week's entries are listed for the current week."""
        now = datetime(2026, 3, 4, 12)
        store = EntryStore(database, clock=lambda: now)
        store.create("this week")
        store.create("last week", timestamp=now - timedelta(days=7))
        assert [e.content for e in store.list_current_week()] == ["this week"]
