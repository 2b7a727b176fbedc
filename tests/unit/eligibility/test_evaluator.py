"""Unit tests for EligibilityEvaluator."""

import pytest

from coursegate.eligibility import EligibilityEvaluator, IneligibilityReason
from coursegate.exceptions import CourseNotFoundError, ValidationError
from coursegate.ledger import EnrollmentLedger
from coursegate.prerequisites import CourseRef, PrerequisiteGraph
from coursegate.store import CourseCatalog


@pytest.fixture
def course_id(catalog: CourseCatalog) -> str:
    return catalog.create_course(title="Calculus", capacity=2, owner_id="p", course_id="C").id


@pytest.mark.unit
class TestCheckEligibility:
    """Tests for check_eligibility."""

    def test_eligible(self, evaluator: EligibilityEvaluator, course_id: str) -> None:
        """Open course with seats and no prerequisites."""
        decision = evaluator.check_eligibility("s1", course_id)

        assert decision.can_enroll
        assert decision.reasons == []
        assert decision.missing_prerequisites == []

    def test_closed_short_circuits(
        self,
        evaluator: EligibilityEvaluator,
        catalog: CourseCatalog,
        graph: PrerequisiteGraph,
        course_id: str,
    ) -> None:
        """A closed course reports only the closed reason."""
        catalog.create_course(title="Algebra", capacity=2, owner_id="p", course_id="A")
        graph.set_prerequisites(course_id, ["A"])
        catalog.close_enrollment(course_id)

        decision = evaluator.check_eligibility("s1", course_id)

        assert not decision.can_enroll
        assert decision.reasons == [IneligibilityReason.COURSE_CLOSED]
        assert decision.missing_prerequisites == []

    def test_already_enrolled(
        self, evaluator: EligibilityEvaluator, ledger: EnrollmentLedger, course_id: str
    ) -> None:
        ledger.enroll("s1", course_id)

        decision = evaluator.check_eligibility("s1", course_id)

        assert decision.reasons == [IneligibilityReason.ALREADY_ENROLLED]

    def test_full(
        self, evaluator: EligibilityEvaluator, ledger: EnrollmentLedger, course_id: str
    ) -> None:
        ledger.enroll("s1", course_id)
        ledger.enroll("s2", course_id)

        decision = evaluator.check_eligibility("s3", course_id)

        assert not decision.can_enroll
        assert decision.reasons == [IneligibilityReason.COURSE_FULL]

    def test_missing_prerequisites(
        self,
        evaluator: EligibilityEvaluator,
        catalog: CourseCatalog,
        graph: PrerequisiteGraph,
        course_id: str,
    ) -> None:
        """Missing courses are listed with their titles."""
        catalog.create_course(title="Algebra", capacity=2, owner_id="p", course_id="A")
        graph.set_prerequisites(course_id, ["A"])

        decision = evaluator.check_eligibility("s1", course_id)

        assert decision.reasons == [IneligibilityReason.MISSING_PREREQUISITES]
        assert decision.missing_prerequisites == [CourseRef(id="A", title="Algebra")]

    def test_every_failing_rule_reported(
        self,
        evaluator: EligibilityEvaluator,
        catalog: CourseCatalog,
        graph: PrerequisiteGraph,
        ledger: EnrollmentLedger,
        course_id: str,
    ) -> None:
        """Duplicate, full and prerequisites accumulate in order."""
        ledger.enroll("s1", course_id)
        ledger.enroll("s2", course_id)
        catalog.create_course(title="Algebra", capacity=2, owner_id="p", course_id="A")
        graph.set_prerequisites(course_id, ["A"])

        decision = evaluator.check_eligibility("s1", course_id)

        assert decision.reasons == [
            IneligibilityReason.ALREADY_ENROLLED,
            IneligibilityReason.COURSE_FULL,
            IneligibilityReason.MISSING_PREREQUISITES,
        ]

    def test_unknown_course(self, evaluator: EligibilityEvaluator) -> None:
        with pytest.raises(CourseNotFoundError):
            evaluator.check_eligibility("s1", "missing")

    def test_empty_student(self, evaluator: EligibilityEvaluator, course_id: str) -> None:
        with pytest.raises(ValidationError):
            evaluator.check_eligibility("", course_id)

    def test_has_no_side_effects(
        self, evaluator: EligibilityEvaluator, catalog: CourseCatalog, course_id: str
    ) -> None:
        """Checking never takes a seat."""
        evaluator.check_eligibility("s1", course_id)
        evaluator.check_eligibility("s1", course_id)

        assert catalog.get_course(course_id).active_enrollment_count == 0
