"""Database connection manager for the student record store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from student_records.logging import get_logger, redact_url
from student_records.store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = get_logger("store")

MEMORY = ":memory:"


def to_url(location: str) -> str:
    """Turn a database location into a SQLAlchemy URL.

    Anything containing "://" is already a URL; everything else is treated
    as a SQLite file path (or ":memory:").
    """
    if "://" in location:
        return location
    return f"sqlite:///{location}"


class Database:
    """Database connection manager.

    Manages the engine and session factory for the configured database.
    SQLite files run with WAL mode and foreign keys enabled.
    """

    def __init__(self, location: str = "students.db", echo: bool = False) -> None:
        """Initialize database connection.

        Args:
            location: SQLite file path, ":memory:" for an in-memory DB,
                or a full SQLAlchemy URL (e.g. "mysql+pymysql://...").
            echo: Log every SQL statement through SQLAlchemy.
        """
        self.location = location
        self.url = to_url(location)
        self.echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    def is_sqlite(self) -> bool:
        """Check if the database is SQLite."""
        return self.url.startswith("sqlite")

    def is_memory(self) -> bool:
        """Check if the database lives in memory."""
        return self.location == MEMORY

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.is_memory():
                # All sessions share the single in-memory connection
                self._engine = create_engine(
                    self.url,
                    echo=self.echo,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            elif self.is_sqlite():
                # Create parent directory if it doesn't exist
                db_file = make_url(self.url).database
                if db_file and db_file != MEMORY:
                    Path(db_file).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(self.url, echo=self.echo)
            else:
                self._engine = create_engine(self.url, echo=self.echo, pool_pre_ping=True)

            if self.is_sqlite():

                @event.listens_for(self._engine, "connect")
                def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                    if not self.is_memory():
                        cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA foreign_keys=ON")
                    cursor.close()

            logger.info("Created database engine for %s", redact_url(self.url))

        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        """Get or create the session factory."""
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                expire_on_commit=False,
            )
        return self._session_factory

    def create_tables(self) -> None:
        """Create all tables if they don't exist."""
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        """Drop all tables. Use with caution!"""
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
