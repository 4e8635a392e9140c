"""
Migration Runner

Applies the versioned schema changes under mindreel/migrations/versions in
ascending revision order. Each version module declares an integer `revision`,
a human `name` and an `upgrade()` written with alembic `op.*` calls; the
runner executes it inside an alembic Operations context bound to our own
connection and records it in the `migrations` ledger.

Each migration runs in its own transaction, schema changes included, so a
failure leaves no partial tables behind. Everything applied before it is kept
and MigrationError is raised. Callers must treat that as fatal and not open
the stores.
"""
import importlib
import logging
import pkgutil
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from mindreel.database import Database, utcnow
from mindreel.errors import MigrationError
from mindreel.models import Migration

logger = logging.getLogger(__name__)

VERSIONS_PACKAGE = "mindreel.migrations.versions"


@dataclass(frozen=True)
class MigrationScript:
    revision: int
    name: str
    upgrade: Callable[[], None]


def validate_sequence(scripts: Sequence[MigrationScript]) -> None:
    """Known revisions must run 1, 2, 3, ... with no gaps or duplicates."""
    for expected, script in enumerate(scripts, start=1):
        if script.revision != expected:
            raise MigrationError(
                f"Migration sequence broken: expected revision {expected}, "
                f"found {script.revision} ({script.name})"
            )


def load_migrations(package: str = VERSIONS_PACKAGE) -> List[MigrationScript]:
    """Import every version module in `package`, sorted by revision."""
    pkg = importlib.import_module(package)
    scripts = []
    for module_info in pkgutil.iter_modules(pkg.__path__):
        module = importlib.import_module(f"{package}.{module_info.name}")
        scripts.append(
            MigrationScript(
                revision=int(module.revision),
                name=str(module.name),
                upgrade=module.upgrade,
            )
        )
    scripts.sort(key=lambda s: s.revision)
    validate_sequence(scripts)
    return scripts


class MigrationRunner:
    """Brings the database schema to the latest known revision."""

    def __init__(
        self,
        database: Database,
        migrations: Optional[Sequence[MigrationScript]] = None,
        settings_defaults: Optional[Dict[str, object]] = None,
    ):
        self.database = database
        if migrations is None:
            migrations = load_migrations()
        else:
            migrations = sorted(migrations, key=lambda s: s.revision)
            validate_sequence(migrations)
        self.migrations = list(migrations)
        self.settings_defaults = dict(settings_defaults or {})

    @property
    def latest_revision(self) -> int:
        return self.migrations[-1].revision if self.migrations else 0

    def ensure_ledger(self) -> None:
        try:
            Migration.__table__.create(bind=self.database.engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise MigrationError(f"Could not create migration ledger: {e}") from e

    def applied_ids(self) -> List[int]:
        self.ensure_ledger()
        try:
            with self.database.engine.connect() as conn:
                rows = conn.execute(
                    select(Migration.__table__.c.id).order_by(Migration.__table__.c.id)
                ).all()
        except SQLAlchemyError as e:
            raise MigrationError(f"Could not read migration ledger: {e}") from e
        return [int(row[0]) for row in rows]

    def history(self) -> List[Migration]:
        """Ledger rows, oldest first."""
        self.ensure_ledger()
        with self.database.session() as db:
            return db.query(Migration).order_by(Migration.id).all()

    def pending(self) -> List[MigrationScript]:
        """Migrations not yet recorded, after checking the ledger is consistent."""
        applied = self.applied_ids()
        known = {script.revision for script in self.migrations}

        unknown = [revision for revision in applied if revision not in known]
        if unknown:
            raise MigrationError(
                f"Database has migrations this version does not know about: {unknown}"
            )

        if applied:
            missing = sorted(set(range(1, max(applied) + 1)) - set(applied))
            if missing:
                raise MigrationError(
                    f"Migration ledger has gaps; revisions {missing} were never applied"
                )

        applied_set = set(applied)
        return [script for script in self.migrations if script.revision not in applied_set]

    def apply_pending(self) -> int:
        """Apply missing migrations in ascending order. Returns how many ran."""
        pending = self.pending()
        if not pending:
            logger.info("No pending migrations")
            return 0

        logger.info(f"Running {len(pending)} pending migration(s)...")
        for script in pending:
            self._apply(script)

        logger.info(f"Schema is at revision {self.latest_revision}")
        return len(pending)

    def _apply(self, script: MigrationScript) -> None:
        logger.info(f"Running migration {script.revision}: {script.name}")
        try:
            with self.database.engine.begin() as conn:
                context = MigrationContext.configure(
                    connection=conn,
                    opts={"settings_defaults": self.settings_defaults},
                )
                with Operations.context(context):
                    script.upgrade()
                conn.execute(
                    insert(Migration.__table__).values(
                        id=script.revision,
                        name=script.name,
                        applied_at=utcnow(),
                    )
                )
        except Exception as e:
            logger.error(f"Migration {script.revision} ({script.name}) failed: {e}")
            raise MigrationError(
                f"Migration {script.revision} ({script.name}) failed: {e}"
            ) from e
        logger.info(f"Migration {script.revision} completed")
