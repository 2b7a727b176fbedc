"""Unit tests for store models."""

import pytest

from coursegate.exceptions import InvalidStateTransitionError
from coursegate.store import Course, Enrollment, EnrollmentStatus


@pytest.mark.unit
class TestEnrollmentStatus:
    """Tests for EnrollmentStatus transitions."""

    def test_values(self) -> None:
        """Statuses are stored as lowercase strings."""
        assert EnrollmentStatus.ACTIVE == "active"
        assert EnrollmentStatus.COMPLETED == "completed"
        assert EnrollmentStatus.DROPPED == "dropped"

    def test_active_can_complete_or_drop(self) -> None:
        """Active moves to either terminal state."""
        assert EnrollmentStatus.ACTIVE.can_transition_to(EnrollmentStatus.COMPLETED)
        assert EnrollmentStatus.ACTIVE.can_transition_to(EnrollmentStatus.DROPPED)
        assert not EnrollmentStatus.ACTIVE.can_transition_to(EnrollmentStatus.ACTIVE)

    @pytest.mark.parametrize("status", [EnrollmentStatus.COMPLETED, EnrollmentStatus.DROPPED])
    def test_terminal_states(self, status: EnrollmentStatus) -> None:
        """Completed and dropped allow no transition."""
        assert status.is_terminal
        for target in EnrollmentStatus:
            assert not status.can_transition_to(target)

    def test_active_is_not_terminal(self) -> None:
        assert not EnrollmentStatus.ACTIVE.is_terminal


@pytest.mark.unit
class TestCourse:
    """Tests for the Course model."""

    def test_defaults(self) -> None:
        """New course is open with no seats taken."""
        course = Course(title="Algebra", capacity=3, owner_id="prof-1")

        assert course.id is not None
        assert course.is_open_for_enrollment is True
        assert course.active_enrollment_count == 0
        assert course.seats_available == 3
        assert not course.is_full

    def test_full_course(self) -> None:
        course = Course(title="Algebra", capacity=2, owner_id="prof-1", active_enrollment_count=2)

        assert course.is_full
        assert course.seats_available == 0

    def test_explicit_id(self) -> None:
        course = Course(id="MATH101", title="Algebra", capacity=2, owner_id="prof-1")
        assert course.id == "MATH101"


@pytest.mark.unit
class TestEnrollment:
    """Tests for the Enrollment model."""

    def test_defaults(self) -> None:
        """New enrollment is active at 0%."""
        enrollment = Enrollment(student_id="s1", course_id="c1")

        assert enrollment.enrollment_status == EnrollmentStatus.ACTIVE
        assert enrollment.is_active
        assert enrollment.completion_percentage == 0
        assert enrollment.enrolled_at is not None
        assert enrollment.created_at is not None
        assert enrollment.completed_at is None
        assert enrollment.dropped_at is None

    def test_transition_to_completed(self) -> None:
        """Completing stamps completed_at and sets 100%."""
        enrollment = Enrollment(student_id="s1", course_id="c1")

        enrollment.transition_to(EnrollmentStatus.COMPLETED)

        assert enrollment.status == "completed"
        assert enrollment.completed_at is not None
        assert enrollment.completion_percentage == 100
        assert not enrollment.is_active

    def test_transition_to_dropped(self) -> None:
        """Dropping stamps dropped_at and keeps progress."""
        enrollment = Enrollment(student_id="s1", course_id="c1", completion_percentage=40)

        enrollment.transition_to(EnrollmentStatus.DROPPED)

        assert enrollment.status == "dropped"
        assert enrollment.dropped_at is not None
        assert enrollment.completion_percentage == 40

    def test_transition_from_terminal_raises(self) -> None:
        """InvalidStateTransitionError leaving a terminal state."""
        enrollment = Enrollment(student_id="s1", course_id="c1")
        enrollment.transition_to(EnrollmentStatus.DROPPED)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            enrollment.transition_to(EnrollmentStatus.COMPLETED)

        assert exc_info.value.current == "dropped"
        assert exc_info.value.target == "completed"
