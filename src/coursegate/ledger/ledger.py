"""EnrollmentLedger - authoritative enroll/drop/complete operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from coursegate.eligibility import (
    IneligibilityReason,
    evaluate_enrollment,
    find_active_enrollment,
)
from coursegate.exceptions import (
    CourseClosedError,
    CourseNotFoundError,
    CoursegateError,
    InvalidStateTransitionError,
    ValidationError,
)
from coursegate.ledger.exceptions import (
    AlreadyEnrolledError,
    CapacityExceededError,
    EnrollmentChangedError,
    EnrollmentNotFoundError,
    NotEnrolledError,
    PrerequisitesNotMetError,
)
from coursegate.ledger.models import EnrollmentView, SeatAudit
from coursegate.locks import CourseLocks
from coursegate.store.models import Course, Enrollment, EnrollmentStatus

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coursegate.eligibility import EligibilityDecision
    from coursegate.store.database import Database

logger = logging.getLogger(__name__)


def _require_id(value: str, field: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} must be a non-empty string")


def _rejection(
    student_id: str, course: Course, decision: EligibilityDecision
) -> CoursegateError:
    """Typed error for the first failing rule, in evaluation order."""
    reason = decision.reasons[0]
    if reason is IneligibilityReason.COURSE_CLOSED:
        return CourseClosedError(course.id)
    if reason is IneligibilityReason.ALREADY_ENROLLED:
        return AlreadyEnrolledError(student_id, course.id)
    if reason is IneligibilityReason.COURSE_FULL:
        return CapacityExceededError(course.id, course.capacity)
    return PrerequisitesNotMetError(course.id, decision.missing_prerequisites)


def _translate_integrity_error(
    e: IntegrityError, student_id: str, course_id: str
) -> CoursegateError | None:
    """Map a constraint violation to the ledger error it stands for."""
    message = str(e.orig)
    if "uq_enrollments_active_pair" in message or "UNIQUE constraint failed" in message:
        return AlreadyEnrolledError(student_id, course_id)
    if "ck_courses_count_within_capacity" in message:
        return CapacityExceededError(course_id)
    return None


def _adjust_seats(session: Session, course_id: str, delta: int) -> None:
    # Relative update so a writer outside this process cannot be overwritten
    session.execute(
        update(Course)
        .where(Course.id == course_id)
        .values(active_enrollment_count=Course.active_enrollment_count + delta)
    )


class EnrollmentLedger:
    """The only component that writes enrollments and seat counters.

    Every capacity-affecting operation runs in two nested scopes: the
    course's lock (bounded wait) and a single database transaction. Inside,
    the current state is re-read and re-validated with the same rules the
    eligibility evaluator uses, then written and committed together. A failing
    check rolls the transaction back, so no partial state is ever visible.
    The lock covers only this read-validate-write sequence.
    """

    def __init__(self, database: Database, locks: CourseLocks | None = None) -> None:
        """Initialize the ledger.

        Args:
            database: Database holding courses and enrollments.
            locks: Per-course lock registry. Share it with the CourseCatalog
                so capacity edits and enrollments exclude each other.
        """
        self._db = database
        self._locks = locks if locks is not None else CourseLocks()

    @property
    def locks(self) -> CourseLocks:
        return self._locks

    # --- Mutations ---

    def enroll(self, student_id: str, course_id: str) -> Enrollment:
        """Enroll a student, taking one seat.

        Args:
            student_id: The student's external ID
            course_id: The course's unique ID

        Returns:
            The new active Enrollment

        Raises:
            ValidationError: If an ID is empty
            CourseNotFoundError: If the course doesn't exist
            CourseClosedError: If the course is not open for enrollment
            AlreadyEnrolledError: If the student already holds a seat
            CapacityExceededError: If no seat is left
            PrerequisitesNotMetError: If a direct prerequisite is not completed
            ConcurrencyError: If the course or database stays busy too long
        """
        _require_id(student_id, "student_id")
        _require_id(course_id, "course_id")

        with self._locks.hold(course_id):
            try:
                with self._db.transaction() as session:
                    course = session.get(Course, course_id)
                    if course is None:
                        raise CourseNotFoundError(course_id)

                    decision = evaluate_enrollment(session, student_id, course)
                    if not decision.can_enroll:
                        logger.info(
                            "Enrollment of %s in %s rejected: %s",
                            student_id,
                            course_id,
                            ", ".join(reason.value for reason in decision.reasons),
                        )
                        raise _rejection(student_id, course, decision)

                    enrollment = Enrollment(student_id=student_id, course_id=course_id)
                    session.add(enrollment)
                    _adjust_seats(session, course_id, +1)
                    session.flush()
            except IntegrityError as e:
                error = _translate_integrity_error(e, student_id, course_id)
                if error is None:
                    raise
                raise error from e

        logger.info("Enrolled %s in %s (enrollment %s)", student_id, course_id, enrollment.id)
        return enrollment

    def drop(self, student_id: str, course_id: str) -> Enrollment:
        """Drop a student's active enrollment, releasing its seat.

        Returns:
            The enrollment, now dropped

        Raises:
            ValidationError: If an ID is empty
            NotEnrolledError: If the student has no active enrollment in the course
            ConcurrencyError: If the course or database stays busy too long
            EnrollmentChangedError: If another process changed the record first
        """
        return self._finish(student_id, course_id, EnrollmentStatus.DROPPED)

    def complete(self, student_id: str, course_id: str) -> Enrollment:
        """Mark one student's active enrollment completed, releasing its seat.

        The completed record then satisfies prerequisites of other courses.

        Raises:
            ValidationError: If an ID is empty
            NotEnrolledError: If the student has no active enrollment in the course
            ConcurrencyError: If the course or database stays busy too long
            EnrollmentChangedError: If another process changed the record first
        """
        return self._finish(student_id, course_id, EnrollmentStatus.COMPLETED)

    def _finish(self, student_id: str, course_id: str, target: EnrollmentStatus) -> Enrollment:
        _require_id(student_id, "student_id")
        _require_id(course_id, "course_id")

        try:
            with self._locks.hold(course_id), self._db.transaction() as session:
                enrollment = find_active_enrollment(session, student_id, course_id)
                if enrollment is None:
                    raise NotEnrolledError(student_id, course_id)
                enrollment.transition_to(target)
                session.flush()
                _adjust_seats(session, course_id, -1)
        except StaleDataError as e:
            # Another process finished or updated the record after we read it
            if self._has_active(student_id, course_id):
                raise EnrollmentChangedError(
                    f"Enrollment of '{student_id}' in '{course_id}' changed concurrently, "
                    "retry later"
                ) from e
            raise NotEnrolledError(student_id, course_id) from e

        logger.info("Enrollment %s of %s in %s is %s", enrollment.id, student_id, course_id, target)
        return enrollment

    def _has_active(self, student_id: str, course_id: str) -> bool:
        with self._db.session() as session:
            return find_active_enrollment(session, student_id, course_id) is not None

    def transition_to_completed(self, course_id: str) -> list[Enrollment]:
        """Complete every active enrollment of a course, e.g. at term close.

        The seat counter drops by the number of enrollments completed here.

        Returns:
            The enrollments that were completed

        Raises:
            CourseNotFoundError: If the course doesn't exist
            ConcurrencyError: If the course or database stays busy too long
            EnrollmentChangedError: If another process changed an enrollment first
        """
        _require_id(course_id, "course_id")

        try:
            with self._locks.hold(course_id), self._db.transaction() as session:
                if session.get(Course, course_id) is None:
                    raise CourseNotFoundError(course_id)

                stmt = select(Enrollment).where(
                    Enrollment.course_id == course_id,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                )
                completed = list(session.execute(stmt).scalars().all())
                for enrollment in completed:
                    enrollment.transition_to(EnrollmentStatus.COMPLETED)
                session.flush()
                # Only the seats released here; enrollments committed since the
                # SELECT keep theirs
                if completed:
                    _adjust_seats(session, course_id, -len(completed))
        except StaleDataError as e:
            raise EnrollmentChangedError(
                f"Enrollments of course '{course_id}' changed concurrently, retry later"
            ) from e

        logger.info("Completed %d enrollments in course %s", len(completed), course_id)
        return completed

    def update_progress(self, enrollment_id: str, completion_percentage: int) -> Enrollment:
        """Record progress on an active enrollment.

        Reaching 100 completes the enrollment and releases its seat.

        Raises:
            ValidationError: If the percentage is outside 0..100
            EnrollmentNotFoundError: If the enrollment doesn't exist
            InvalidStateTransitionError: If the enrollment is completed or dropped
            ConcurrencyError: If the course or database stays busy too long
            EnrollmentChangedError: If another process changed the record first
        """
        if (
            isinstance(completion_percentage, bool)
            or not isinstance(completion_percentage, int)
            or not 0 <= completion_percentage <= 100
        ):
            raise ValidationError(
                f"Completion percentage must be between 0 and 100, got {completion_percentage!r}"
            )

        course_id = self.get_enrollment(enrollment_id).course_id

        try:
            with self._locks.hold(course_id), self._db.transaction() as session:
                enrollment = session.get(Enrollment, enrollment_id)
                if enrollment is None:
                    raise EnrollmentNotFoundError(
                        f"Enrollment with id '{enrollment_id}' not found"
                    )

                if completion_percentage == 100:
                    enrollment.transition_to(EnrollmentStatus.COMPLETED)
                    session.flush()
                    _adjust_seats(session, course_id, -1)
                elif not enrollment.is_active:
                    raise InvalidStateTransitionError(
                        enrollment.status,
                        enrollment.status,
                        f"Enrollment '{enrollment_id}' is {enrollment.status}; "
                        "progress can only change while it is active",
                    )
                else:
                    enrollment.completion_percentage = completion_percentage
                    session.flush()
        except StaleDataError as e:
            raise EnrollmentChangedError(
                f"Enrollment '{enrollment_id}' changed concurrently, retry later"
            ) from e

        logger.info("Progress of enrollment %s set to %d%%", enrollment_id, completion_percentage)
        return enrollment

    # --- Queries ---

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If enrollment doesn't exist
        """
        with self._db.session() as session:
            enrollment = session.get(Enrollment, enrollment_id)
            if enrollment is None:
                raise EnrollmentNotFoundError(f"Enrollment with id '{enrollment_id}' not found")
            return enrollment

    def my_enrollments(
        self,
        student_id: str,
        status: EnrollmentStatus | None = None,
    ) -> list[EnrollmentView]:
        """List a student's enrollments with their courses.

        Args:
            student_id: The student's external ID
            status: Filter by enrollment status (optional)

        Returns:
            Enrollment views, most recent first
        """
        with self._db.session() as session:
            stmt = (
                select(Enrollment, Course)
                .join(Course, Course.id == Enrollment.course_id)
                .where(Enrollment.student_id == student_id)
            )
            if status is not None:
                stmt = stmt.where(Enrollment.status == status.value)
            stmt = stmt.order_by(Enrollment.created_at.desc())
            return [
                EnrollmentView(enrollment=enrollment, course=course)
                for enrollment, course in session.execute(stmt).all()
            ]

    def course_enrollments(
        self,
        course_id: str,
        status: EnrollmentStatus | None = EnrollmentStatus.ACTIVE,
    ) -> list[Enrollment]:
        """List the enrollments of a course, active ones by default.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.session() as session:
            if session.get(Course, course_id) is None:
                raise CourseNotFoundError(course_id)
            stmt = select(Enrollment).where(Enrollment.course_id == course_id)
            if status is not None:
                stmt = stmt.where(Enrollment.status == status.value)
            stmt = stmt.order_by(Enrollment.enrolled_at)
            return list(session.execute(stmt).scalars().all())

    def audit_seats(self, course_id: str) -> SeatAudit:
        """Compare a course's seat counter with its active enrollment rows.

        Raises:
            CourseNotFoundError: If course doesn't exist
        """
        with self._db.session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(course_id)
            active = session.execute(
                select(func.count(Enrollment.id)).where(
                    Enrollment.course_id == course_id,
                    Enrollment.status == EnrollmentStatus.ACTIVE.value,
                )
            ).scalar_one()
            return SeatAudit(
                course_id=course_id,
                capacity=course.capacity,
                cached_count=course.active_enrollment_count,
                active_records=active,
            )
