"""Exceptions raised by the enrollment ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

from coursegate.exceptions import (
    ConcurrencyError,
    ConflictError,
    NotFoundError,
    PreconditionError,
)

if TYPE_CHECKING:
    from coursegate.prerequisites import CourseRef


class EnrollmentNotFoundError(NotFoundError):
    """Enrollment with given ID does not exist."""

    code = "enrollment_not_found"


class AlreadyEnrolledError(ConflictError):
    """Student already holds an active seat in the course."""

    code = "already_enrolled"

    def __init__(self, student_id: str, course_id: str) -> None:
        self.student_id = student_id
        self.course_id = course_id
        super().__init__(f"Student '{student_id}' is already enrolled in course '{course_id}'")


class CapacityExceededError(ConflictError):
    """Every seat in the course is taken.

    Callers may see this right after an eligibility check said a seat was
    free: another student took the last seat in between.
    """

    code = "capacity_exceeded"

    def __init__(self, course_id: str, capacity: int | None = None) -> None:
        self.course_id = course_id
        self.capacity = capacity
        super().__init__(f"Course '{course_id}' is full: another student took the last seat")


class NotEnrolledError(ConflictError):
    """Student has no active enrollment in the course."""

    code = "not_enrolled"

    def __init__(self, student_id: str, course_id: str) -> None:
        self.student_id = student_id
        self.course_id = course_id
        super().__init__(f"Student '{student_id}' is not enrolled in course '{course_id}'")


class PrerequisitesNotMetError(PreconditionError):
    """Student has not completed every direct prerequisite."""

    code = "prerequisites_not_met"

    def __init__(self, course_id: str, missing: list[CourseRef]) -> None:
        self.course_id = course_id
        self.missing = missing
        titles = ", ".join(ref.title for ref in missing)
        super().__init__(
            f"Prerequisites not met for course '{course_id}'. Complete first: {titles}"
        )

    @property
    def course_ids(self) -> list[str]:
        return [ref.id for ref in self.missing]


class EnrollmentChangedError(ConcurrencyError):
    """Another writer changed the enrollment between read and write. Safe to retry."""

    code = "enrollment_changed"
