"""StatisticsAggregator - read-only per-student enrollment statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import case, func, select

from coursegate.statistics.credits import NoCredits
from coursegate.statistics.models import StudentStatistics
from coursegate.store.models import Enrollment, EnrollmentStatus

if TYPE_CHECKING:
    from coursegate.statistics.credits import CreditSource
    from coursegate.store.database import Database


def _count_status(status: EnrollmentStatus):  # noqa: ANN202
    return func.sum(case((Enrollment.status == status.value, 1), else_=0))


class StatisticsAggregator:
    """Derives per-student counts from the enrollment records.

    Takes no course locks: the figures may trail an in-flight enrollment,
    which is fine for reporting but never for seat decisions.
    """

    def __init__(self, database: Database, credits: CreditSource | None = None) -> None:
        """Initialize the aggregator.

        Args:
            database: Database holding enrollments.
            credits: Source of course credit weights (defaults to 0 credits).
        """
        self._db = database
        self._credits = credits if credits is not None else NoCredits()

    def get_statistics(self, student_id: str) -> StudentStatistics:
        """Count a student's enrollment records by status.

        Args:
            student_id: The student's external ID.

        Returns:
            StudentStatistics; all zero for an unknown student.
        """
        with self._db.session() as session:
            counts = session.execute(
                select(
                    func.count(Enrollment.id).label("total"),
                    _count_status(EnrollmentStatus.ACTIVE).label("active"),
                    _count_status(EnrollmentStatus.COMPLETED).label("completed"),
                    _count_status(EnrollmentStatus.DROPPED).label("dropped"),
                    func.avg(Enrollment.completion_percentage).label("avg_completion"),
                ).where(Enrollment.student_id == student_id)
            ).one()

            completed_course_ids = (
                session.execute(
                    select(Enrollment.course_id)
                    .where(
                        Enrollment.student_id == student_id,
                        Enrollment.status == EnrollmentStatus.COMPLETED.value,
                    )
                    .distinct()
                )
                .scalars()
                .all()
            )

        total_credits = sum(
            self._credits.credits_for(course_id) for course_id in completed_course_ids
        )

        return StudentStatistics(
            student_id=student_id,
            active_courses=counts.active or 0,
            completed_courses=counts.completed or 0,
            dropped_courses=counts.dropped or 0,
            total_enrollments=counts.total or 0,
            total_credits=float(total_credits),
            average_completion=round(float(counts.avg_completion or 0.0)),
        )
