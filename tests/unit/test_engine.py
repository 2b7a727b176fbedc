"""Unit tests for EnrollmentEngine wiring."""

import pytest

from coursegate.config import Settings
from coursegate.engine import EnrollmentEngine


@pytest.mark.unit
class TestEnrollmentEngine:
    """Tests for EnrollmentEngine."""

    def test_catalog_and_ledger_share_locks(self, engine: EnrollmentEngine) -> None:
        """Capacity edits and enrollments exclude each other per course."""
        assert engine.ledger.locks is engine.locks

    def test_from_settings_uses_credit_weights(self) -> None:
        settings = Settings(db_path=":memory:", lock_timeout=0.5, credits={"C": 4})
        engine = EnrollmentEngine.from_settings(settings)
        try:
            engine.catalog.create_course(title="Calculus", capacity=1, owner_id="p", course_id="C")
            engine.ledger.enroll("s1", "C")
            engine.ledger.complete("s1", "C")

            assert engine.locks.timeout == 0.5
            assert engine.statistics.get_statistics("s1").total_credits == 4.0
        finally:
            engine.close()
