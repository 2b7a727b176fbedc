"""CourseCatalog - course rows the ledger counts seats against."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError

from coursegate.exceptions import CourseNotFoundError, ValidationError
from coursegate.locks import CourseLocks
from coursegate.store.exceptions import (
    CapacityBelowEnrollmentError,
    CourseExistsError,
    CourseHasActiveEnrollmentsError,
)
from coursegate.store.models import Course, Enrollment, EnrollmentStatus, PrerequisiteEdge

if TYPE_CHECKING:
    from coursegate.store.database import Database

logger = logging.getLogger(__name__)


def _require_text(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    return value.strip()


def _require_capacity(capacity: int) -> int:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValidationError(f"capacity must be a positive integer, got {capacity!r}")
    return capacity


class CourseCatalog:
    """Create, read, update and delete courses.

    Capacity changes take the same per-course lock as enrollment, so a
    course can never be shrunk underneath an in-flight enroll.
    """

    def __init__(self, database: Database, locks: CourseLocks | None = None) -> None:
        """Initialize the catalog.

        Args:
            database: Database holding the course table.
            locks: Per-course lock registry shared with the ledger.
        """
        self._db = database
        self._locks = locks if locks is not None else CourseLocks()

    def create_course(
        self,
        title: str,
        capacity: int,
        owner_id: str,
        is_open_for_enrollment: bool = True,
        course_id: str | None = None,
    ) -> Course:
        """Create a new course with no active enrollments.

        Args:
            title: Display title
            capacity: Number of seats, at least 1
            owner_id: Instructor that owns the course
            is_open_for_enrollment: Whether students may enroll right away
            course_id: Explicit ID (generated when omitted)

        Returns:
            Created Course object

        Raises:
            ValidationError: If title, owner or capacity is invalid
            CourseExistsError: If a course with the same ID already exists
        """
        title = _require_text(title, "title")
        owner_id = _require_text(owner_id, "owner_id")
        capacity = _require_capacity(capacity)
        if course_id is not None:
            course_id = _require_text(course_id, "course_id")

        with self._db.transaction() as session:
            if course_id is not None and session.get(Course, course_id) is not None:
                raise CourseExistsError(f"Course with id '{course_id}' already exists")
            course = Course(
                id=course_id,
                title=title,
                capacity=capacity,
                owner_id=owner_id,
                is_open_for_enrollment=is_open_for_enrollment,
            )
            session.add(course)
            session.flush()
            session.refresh(course)

        logger.info("Created course %s (%s, capacity=%d)", course.id, course.title, capacity)
        return course

    def get_course(self, course_id: str) -> Course:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(course_id)
            return course

    def list_courses(
        self,
        is_open: bool | None = None,
        owner_id: str | None = None,
    ) -> list[Course]:
        """List courses with optional filters.

        Args:
            is_open: Filter by open/closed status (optional)
            owner_id: Filter by owning instructor (optional)

        Returns:
            List of courses, ordered by title
        """
        with self._db.session() as session:
            stmt = select(Course)
            if is_open is not None:
                stmt = stmt.where(Course.is_open_for_enrollment == is_open)
            if owner_id is not None:
                stmt = stmt.where(Course.owner_id == owner_id)
            stmt = stmt.order_by(Course.title, Course.id)
            return list(session.execute(stmt).scalars().all())

    def update_course(
        self,
        course_id: str,
        title: str | None = None,
        capacity: int | None = None,
        is_open_for_enrollment: bool | None = None,
    ) -> Course:
        """Update course fields. Only provided fields are updated.

        Raises:
            CourseNotFoundError: If course doesn't exist
            ValidationError: If a new value is invalid
            CapacityBelowEnrollmentError: If capacity would drop below the
                number of active enrollments
            CourseBusyError: If the course lock is not acquired in time
        """
        if title is not None:
            title = _require_text(title, "title")
        if capacity is not None:
            capacity = _require_capacity(capacity)

        try:
            with self._locks.hold(course_id), self._db.transaction() as session:
                course = session.get(Course, course_id)
                if course is None:
                    raise CourseNotFoundError(course_id)

                if capacity is not None:
                    if capacity < course.active_enrollment_count:
                        raise CapacityBelowEnrollmentError(
                            f"Capacity {capacity} is below the {course.active_enrollment_count} "
                            f"active enrollments of course '{course_id}'"
                        )
                    course.capacity = capacity
                if title is not None:
                    course.title = title
                if is_open_for_enrollment is not None:
                    course.is_open_for_enrollment = is_open_for_enrollment

                session.flush()
                session.refresh(course)
        except IntegrityError as e:
            # Seats taken by another process after the count above was read
            if "ck_courses_count_within_capacity" not in str(e.orig):
                raise
            raise CapacityBelowEnrollmentError(
                f"Capacity {capacity} is below the active enrollments of course '{course_id}'"
            ) from e

        logger.info("Updated course %s", course_id)
        return course

    def delete_course(self, course_id: str) -> None:
        """Delete a course. Fails while any student holds a seat in it.

        Prerequisite edges from and to the course are removed, and so are its
        completed and dropped enrollment records.

        Args:
            course_id: The course's unique ID

        Raises:
            CourseNotFoundError: If course doesn't exist
            CourseHasActiveEnrollmentsError: If the course has active enrollments
            CourseBusyError: If the course lock is not acquired in time
        """
        with self._locks.hold(course_id), self._db.transaction() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(course_id)

            # First write takes the database write lock, so the count below
            # cannot be raced by another process
            session.execute(
                delete(PrerequisiteEdge).where(
                    or_(
                        PrerequisiteEdge.course_id == course_id,
                        PrerequisiteEdge.required_course_id == course_id,
                    )
                )
            )
            active = session.execute(
                select(func.count(Enrollment.id)).where(
                    Enrollment.course_id == course_id,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                )
            ).scalar_one()
            if active:
                raise CourseHasActiveEnrollmentsError(
                    f"Course '{course_id}' has {active} active enrollments"
                )

            history = session.execute(delete(Enrollment).where(Enrollment.course_id == course_id))
            session.delete(course)

        logger.info(
            "Deleted course %s and %d historical enrollments", course_id, history.rowcount
        )

    def open_for_enrollment(self, course_id: str) -> Course:
        """Open a course for enrollment. Opening an open course is a no-op."""
        return self.update_course(course_id, is_open_for_enrollment=True)

    def close_enrollment(self, course_id: str) -> Course:
        """Close a course to new enrollments. Existing seats are untouched."""
        return self.update_course(course_id, is_open_for_enrollment=False)
