"""Database connection manager for the course store."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from coursegate.store.exceptions import StorageBusyError
from coursegate.store.models import Base

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 5.0


class Database:
    """Database connection manager.

    Manages SQLite database connections with WAL mode enabled. File databases
    give every thread its own connection and let SQLite serialize writers.
    An in-memory database lives on one shared connection, and ending a session
    rolls that connection back, so sessions on it are serialized by a storage
    guard.
    """

    def __init__(
        self, db_path: str = "coursegate.db", busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    ) -> None:
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            busy_timeout: Seconds to wait for the database before failing.
        """
        self.db_path = db_path
        self.busy_timeout = busy_timeout
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._memory_guard = threading.RLock()

    @property
    def is_memory(self) -> bool:
        return self.db_path == ":memory:"

    @property
    def engine(self) -> Engine:
        """Get or create the database engine."""
        if self._engine is None:
            if self.is_memory:
                self._engine = create_engine(
                    "sqlite:///:memory:",
                    echo=False,
                    poolclass=StaticPool,
                    connect_args={"check_same_thread": False},
                )
            else:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._engine = create_engine(
                    f"sqlite:///{self.db_path}",
                    echo=False,
                    connect_args={"timeout": self.busy_timeout, "check_same_thread": False},
                )

            # Enable WAL mode for concurrent reads
            @event.listens_for(self._engine, "connect")
            def set_sqlite_pragma(dbapi_connection: object, _connection_record: object) -> None:
                cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

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
        """Get a new, unguarded database session.

        Returns:
            A new SQLAlchemy session.
        """
        return self.session_factory()

    @contextmanager
    def _guarded(self) -> Iterator[None]:
        if not self.is_memory:
            yield
            return
        if not self._memory_guard.acquire(timeout=self.busy_timeout):
            raise StorageBusyError(
                f"In-memory database busy for more than {self.busy_timeout:.2f}s"
            )
        try:
            yield
        finally:
            self._memory_guard.release()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Open a read session, closed when the block exits."""
        with self._guarded():
            session = self.session_factory()
            try:
                yield session
            finally:
                session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Open a session whose writes commit together or not at all.

        Commits when the block exits normally and rolls back on any exception.

        Raises:
            StorageBusyError: If the database stays locked past the busy timeout.
        """
        with self._guarded():
            session = self.session_factory()
            try:
                yield session
                session.commit()
            except OperationalError as e:
                session.rollback()
                if "locked" in str(e) or "busy" in str(e):
                    logger.warning("Database busy, transaction rolled back: %s", e.orig)
                    raise StorageBusyError("Database is locked, retry later") from e
                raise
            except BaseException:
                session.rollback()
                raise
            finally:
                session.close()

    def is_wal_mode(self) -> bool:
        """Check if WAL mode is enabled.

        Returns:
            True if WAL mode is enabled.
        """
        with self.engine.connect() as conn:
            result = conn.execute(text("PRAGMA journal_mode"))
            mode = result.scalar()
            return mode == "wal"

    def close(self) -> None:
        """Close the database connection."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
