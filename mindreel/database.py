import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from mindreel.config import Config
from mindreel.errors import StorageError

logger = logging.getLogger(__name__)

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values are taken as UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def get_engine(url: str, echo: bool = False):
    """Create an engine, preparing the SQLite file location when needed."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(url, echo=echo)

    if parsed.get_backend_name() == "sqlite":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            # pysqlite commits implicitly before DDL; transactions are begun explicitly below
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _begin_sqlite_transaction(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


class Database:
    """Owns the engine and session factory for one process."""

    def __init__(self, config: Config):
        self.url = config.resolved_database_url
        self.engine = get_engine(self.url, echo=config.debug)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    @contextmanager
    def session(self):
        """Transactional session: commit on success, roll back and wrap on failure."""
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Database operation failed: {e}")
            raise StorageError(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def check_connection(self) -> None:
        """Raise StorageError if the database cannot be reached."""
        try:
            with self.engine.connect():
                pass
        except SQLAlchemyError as e:
            raise StorageError(f"Database unavailable at {self.url}: {e}") from e

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")
