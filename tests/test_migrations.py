"""
Tests for the migration runner.

Rules:
1. Missing migrations apply in ascending order and are recorded once
2. Re-running is a no-op
3. A failing migration rolls back its own schema changes, keeps earlier ones
   and raises MigrationError
4. Unknown or missing ledger ids are startup errors
"""
import pytest
import sqlalchemy as sa
from alembic import op
from sqlalchemy import inspect, insert

from mindreel.errors import MigrationError
from mindreel.migrations import MigrationRunner, MigrationScript, load_migrations, validate_sequence
from mindreel.models import Migration
from mindreel.services import SettingsStore


def _create_notes():
    op.create_table(
        'notes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def _create_tags():
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def _explode():
    raise RuntimeError("disk full")


def _record(database, *ids):
    runner = MigrationRunner(database)
    runner.ensure_ledger()
    with database.engine.begin() as conn:
        for revision in ids:
            conn.execute(insert(Migration.__table__).values(id=revision, name=f"m{revision}"))


class TestLoadMigrations:
    """Tests for discovering the bundled version modules."""

    def test_bundled_migrations_are_contiguous(self):
        """The shipped versions are numbered from 1 without gaps."""
        scripts = load_migrations()
        assert [s.revision for s in scripts] == list(range(1, len(scripts) + 1))
        assert scripts[0].name == "create_entries_table"

    def test_sequence_with_gap_is_rejected(self):
        """A missing revision number is rejected."""
        scripts = [
            MigrationScript(1, "one", _create_notes),
            MigrationScript(3, "three", _create_tags),
        ]
        with pytest.raises(MigrationError):
            validate_sequence(scripts)

    def test_duplicate_revision_is_rejected(self):
        """Two scripts with one revision are rejected."""
        with pytest.raises(MigrationError):
            validate_sequence([
                MigrationScript(1, "one", _create_notes),
                MigrationScript(1, "again", _create_tags),
            ])


class TestApplyPending:
    """Tests for applying the bundled migrations to a fresh database."""

    def test_fresh_database_gets_every_migration(self, raw_database):
        """An empty database is brought to the latest revision."""
        runner = MigrationRunner(raw_database)
        applied = runner.apply_pending()

        assert applied == runner.latest_revision
        assert runner.applied_ids() == list(range(1, runner.latest_revision + 1))
        tables = set(inspect(raw_database.engine).get_table_names())
        assert {"entries", "settings", "weekly_summaries", "migrations"} <= tables

    def test_second_run_is_a_no_op(self, raw_database):
        """Running again applies nothing and keeps the ledger."""
        runner = MigrationRunner(raw_database)
        runner.apply_pending()
        first_history = [(m.id, m.applied_at) for m in runner.history()]

        assert runner.apply_pending() == 0
        assert [(m.id, m.applied_at) for m in runner.history()] == first_history

    def test_settings_row_is_seeded_with_configured_defaults(self, raw_database, config):
        """The settings row is seeded from the configured defaults."""
        MigrationRunner(
            raw_database,
            settings_defaults={"popup_interval_minutes": 25, "global_shortcut": "Ctrl+Shift+J"},
        ).apply_pending()

        settings = SettingsStore(raw_database, config).get()
        assert settings.popup_interval_minutes == 25
        assert settings.global_shortcut == "Ctrl+Shift+J"
        assert settings.onboarding_completed is False

    def test_ledger_records_names(self, raw_database):
        """Each ledger row has a name and an applied time."""
        runner = MigrationRunner(raw_database)
        runner.apply_pending()
        history = runner.history()
        assert history[1].name == "create_settings_table"
        assert all(m.applied_at is not None for m in history)

    def test_only_missing_migrations_run(self, raw_database):
        """A newly added script is the only one applied."""
        scripts = [MigrationScript(1, "notes", _create_notes)]
        MigrationRunner(raw_database, migrations=scripts).apply_pending()

        scripts.append(MigrationScript(2, "tags", _create_tags))
        runner = MigrationRunner(raw_database, migrations=scripts)
        assert [s.revision for s in runner.pending()] == [2]
        assert runner.apply_pending() == 1
        assert runner.applied_ids() == [1, 2]


class TestFailures:
    """Tests for failure handling at startup."""

    def test_failure_keeps_earlier_migrations(self, raw_database):
        """A failing step keeps the steps before it."""
        runner = MigrationRunner(raw_database, migrations=[
            MigrationScript(1, "notes", _create_notes),
            MigrationScript(2, "explode", _explode),
            MigrationScript(3, "tags", _create_tags),
        ])

        with pytest.raises(MigrationError) as excinfo:
            runner.apply_pending()

        assert "explode" in str(excinfo.value)
        assert runner.applied_ids() == [1]
        tables = set(inspect(raw_database.engine).get_table_names())
        assert "notes" in tables
        assert "tags" not in tables

    def test_failed_migration_leaves_no_partial_schema(self, raw_database):
        """A migration that creates a table and then fails leaves nothing behind."""
        def create_notes_then_explode():
            _create_notes()
            _explode()

        runner = MigrationRunner(raw_database, migrations=[
            MigrationScript(1, "notes", create_notes_then_explode),
        ])
        with pytest.raises(MigrationError):
            runner.apply_pending()

        assert "notes" not in inspect(raw_database.engine).get_table_names()
        assert runner.applied_ids() == []

        fixed = MigrationRunner(raw_database, migrations=[MigrationScript(1, "notes", _create_notes)])
        assert fixed.apply_pending() == 1
        assert "notes" in inspect(raw_database.engine).get_table_names()
        assert fixed.applied_ids() == [1]

    def test_unknown_applied_id_is_an_error(self, raw_database):
        """A recorded revision this version does not ship is an error."""
        _record(raw_database, 1, 99)
        runner = MigrationRunner(raw_database, migrations=[MigrationScript(1, "notes", _create_notes)])
        with pytest.raises(MigrationError):
            runner.pending()

    def test_hole_in_ledger_is_an_error(self, raw_database):
        """A gap below the highest recorded revision is an error."""
        _record(raw_database, 1, 3)
        runner = MigrationRunner(raw_database, migrations=[
            MigrationScript(1, "notes", _create_notes),
            MigrationScript(2, "tags", _create_tags),
            MigrationScript(3, "more", _create_notes),
        ])
        with pytest.raises(MigrationError) as excinfo:
            runner.apply_pending()
        assert "[2]" in str(excinfo.value)
