"""EnrollmentEngine - wires the store, graph, evaluator, ledger and statistics."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from coursegate.eligibility import EligibilityEvaluator
from coursegate.ledger import EnrollmentLedger
from coursegate.locks import DEFAULT_LOCK_TIMEOUT, CourseLocks
from coursegate.prerequisites import PrerequisiteGraph
from coursegate.statistics import StaticCreditSource, StatisticsAggregator
from coursegate.store import CourseCatalog, Database
from coursegate.store.database import DEFAULT_BUSY_TIMEOUT

if TYPE_CHECKING:
    from coursegate.config import Settings
    from coursegate.statistics import CreditSource

logger = logging.getLogger(__name__)


class EnrollmentEngine:
    """One database, one lock registry, and every component built on them.

    The catalog and the ledger share the lock registry so that capacity
    edits and seat allocation exclude each other per course.
    """

    def __init__(
        self,
        db_path: str = "coursegate.db",
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
        credits: CreditSource | None = None,
    ) -> None:
        """Initialize the engine, creating tables if they don't exist.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for in-memory DB.
            lock_timeout: Seconds to wait for a course's critical section.
            busy_timeout: Seconds to wait for the database.
            credits: Source of course credit weights for statistics.
        """
        self.database = Database(db_path, busy_timeout=busy_timeout)
        self.database.create_tables()
        self.locks = CourseLocks(timeout=lock_timeout)
        self.catalog = CourseCatalog(self.database, self.locks)
        self.prerequisites = PrerequisiteGraph(self.database)
        self.evaluator = EligibilityEvaluator(self.database)
        self.ledger = EnrollmentLedger(self.database, self.locks)
        self.statistics = StatisticsAggregator(self.database, credits)
        logger.debug("Enrollment engine ready (db=%s)", db_path)

    @classmethod
    def from_settings(cls, settings: Settings) -> EnrollmentEngine:
        """Build an engine from loaded settings."""
        return cls(
            db_path=settings.db_path,
            lock_timeout=settings.lock_timeout,
            busy_timeout=settings.busy_timeout,
            credits=StaticCreditSource(settings.credits),
        )

    def close(self) -> None:
        """Close the database connection."""
        self.database.close()
        logger.debug("Enrollment engine closed (db=%s)", self.database.db_path)
