"""Data models for the ledger module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coursegate.store import Course, Enrollment


@dataclass
class EnrollmentView:
    """An enrollment together with the course it belongs to."""

    enrollment: Enrollment
    course: Course


@dataclass
class SeatAudit:
    """Comparison of a course's cached seat counter with its enrollment rows.

    Attributes:
        course_id: The course's unique ID.
        capacity: Seats the course offers.
        cached_count: The stored active_enrollment_count.
        active_records: Enrollment rows with status=active.
    """

    course_id: str
    capacity: int
    cached_count: int
    active_records: int

    @property
    def consistent(self) -> bool:
        return self.cached_count == self.active_records <= self.capacity
