"""Shared pytest fixtures and configuration."""

import pytest

from coursegate.eligibility import EligibilityEvaluator
from coursegate.engine import EnrollmentEngine
from coursegate.ledger import EnrollmentLedger
from coursegate.locks import CourseLocks
from coursegate.prerequisites import PrerequisiteGraph
from coursegate.statistics import StatisticsAggregator
from coursegate.store import CourseCatalog, Database


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def database():
    """Create an in-memory database with tables."""
    db = Database(":memory:")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def locks() -> CourseLocks:
    """Lock registry with a short timeout."""
    return CourseLocks(timeout=1.0)


@pytest.fixture
def catalog(database: Database, locks: CourseLocks) -> CourseCatalog:
    return CourseCatalog(database, locks)


@pytest.fixture
def graph(database: Database) -> PrerequisiteGraph:
    return PrerequisiteGraph(database)


@pytest.fixture
def evaluator(database: Database) -> EligibilityEvaluator:
    return EligibilityEvaluator(database)


@pytest.fixture
def ledger(database: Database, locks: CourseLocks) -> EnrollmentLedger:
    return EnrollmentLedger(database, locks)


@pytest.fixture
def aggregator(database: Database) -> StatisticsAggregator:
    return StatisticsAggregator(database)


@pytest.fixture
def engine():
    """Create a fully wired in-memory EnrollmentEngine."""
    e = EnrollmentEngine(":memory:", lock_timeout=1.0, busy_timeout=1.0)
    yield e
    e.close()
