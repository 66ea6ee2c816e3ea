import os
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.dialects.sqlite import DATETIME
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from algotracker.config import LOG_LEVEL, SQL_ECHO
from algotracker.errors import StorageError

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

Base = declarative_base()

# Stored as ISO-8601 text so created_at compares lexically with date strings
Timestamp = DATETIME(
    storage_format=(
        "%(year)04d-%(month)02d-%(day)02dT"
        "%(hour)02d:%(minute)02d:%(second)02d.%(microsecond)06d"
    ),
    regexp=r"(\d+)-(\d+)-(\d+)[T ](\d+):(\d+):(\d+)(?:\.(\d{6}))?",
)

# Columns introduced after the first schema; the ALTER fails once they exist.
ADDITIVE_COLUMNS = [
    ("problems", "link", "TEXT DEFAULT ''"),
]


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every stored timestamp takes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def _run_migrations(engine) -> None:
    for table, column, ddl in ADDITIVE_COLUMNS:
        try:
            with engine.begin() as conn:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
            logger.info(f"Added column {table}.{column}")
        except OperationalError as e:
            logger.debug(f"Skipped migration {table}.{column}: {e.orig}")


class Database:
    """
    Owns the engine and its single SQLite connection.

    One instance per database file. Services never hold on to it; they get a
    Session from session() and receive it as their first argument.
    """

    def __init__(self):
        self.path: Optional[str] = None
        self.engine = None
        self._session_factory = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def initialize(self, path: str) -> None:
        """Open (or create) the database file and make sure the schema exists."""
        if self.is_open:
            self.close()

        engine = None
        try:
            if path != ":memory:":
                os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)

            engine = create_engine(
                f"sqlite:///{path}",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=SQL_ECHO,
            )
            event.listen(engine, "connect", _enable_foreign_keys)

            # Import models so they register with Base.metadata
            from algotracker.models import Problem, Tag, problem_tags  # noqa: F401

            Base.metadata.create_all(bind=engine)
            _run_migrations(engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize database at {path}: {e}")
            if engine is not None:
                engine.dispose()
            raise StorageError(f"Failed to initialize database: {e}") from e

        self.path = path
        self.engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info(f"Database initialized at {path}")

    def close(self) -> None:
        """Release the connection. initialize() may be called again afterwards."""
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info(f"Database closed: {self.path}")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a Session bound to the open connection and close it after use."""
        if self._session_factory is None:
            raise StorageError("Database is not initialized")
        db = self._session_factory()
        try:
            yield db
        finally:
            db.close()
