"""Enrollment rules shared by the advisory check and the ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from coursegate.eligibility.models import EligibilityDecision, IneligibilityReason
from coursegate.prerequisites import missing_prerequisites
from coursegate.store.models import Enrollment, EnrollmentStatus

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from coursegate.store.models import Course


def find_active_enrollment(session: Session, student_id: str, course_id: str) -> Enrollment | None:
    """The student's active enrollment in a course, if any."""
    stmt = select(Enrollment).where(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
        Enrollment.status == EnrollmentStatus.ACTIVE.value,
    )
    return session.execute(stmt).scalar_one_or_none()


def evaluate_enrollment(session: Session, student_id: str, course: Course) -> EligibilityDecision:
    """Evaluate every enrollment rule for ``student_id`` against ``course``.

    A closed course short-circuits. Otherwise duplicate enrollment, capacity
    and prerequisites are all checked and every failing rule is reported.
    Reads only; the caller decides whether the result is advisory or
    authoritative.
    """
    if not course.is_open_for_enrollment:
        return EligibilityDecision(can_enroll=False, reasons=[IneligibilityReason.COURSE_CLOSED])

    reasons: list[IneligibilityReason] = []

    if find_active_enrollment(session, student_id, course.id) is not None:
        reasons.append(IneligibilityReason.ALREADY_ENROLLED)

    if course.active_enrollment_count >= course.capacity:
        reasons.append(IneligibilityReason.COURSE_FULL)

    missing = missing_prerequisites(session, student_id, course.id)
    if missing:
        reasons.append(IneligibilityReason.MISSING_PREREQUISITES)

    return EligibilityDecision(
        can_enroll=not reasons,
        reasons=reasons,
        missing_prerequisites=missing,
    )
