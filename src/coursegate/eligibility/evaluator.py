"""EligibilityEvaluator - advisory, side-effect-free enrollment checks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from coursegate.eligibility.rules import evaluate_enrollment
from coursegate.exceptions import CourseNotFoundError, ValidationError
from coursegate.store.models import Course

if TYPE_CHECKING:
    from coursegate.eligibility.models import EligibilityDecision
    from coursegate.store.database import Database

logger = logging.getLogger(__name__)


class EligibilityEvaluator:
    """Tells a caller whether enrolling looks permissible right now.

    The answer is advisory: it takes no course lock, and a seat reported as
    free may be gone by the time the caller enrolls. Business-rule failures
    are reported in the decision, never raised.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def check_eligibility(self, student_id: str, course_id: str) -> EligibilityDecision:
        """Evaluate whether a student may enroll in a course.

        Args:
            student_id: The student's external ID.
            course_id: The course's unique ID.

        Returns:
            EligibilityDecision listing every blocking reason.

        Raises:
            ValidationError: If the student ID is empty.
            CourseNotFoundError: If the course doesn't exist.
        """
        if not student_id:
            raise ValidationError("student_id must be a non-empty string")

        with self._db.session() as session:
            course = session.get(Course, course_id)
            if course is None:
                raise CourseNotFoundError(course_id)
            decision = evaluate_enrollment(session, student_id, course)

        logger.debug(
            "Eligibility of %s for %s: can_enroll=%s reasons=%s",
            student_id,
            course_id,
            decision.can_enroll,
            [reason.value for reason in decision.reasons],
        )
        return decision
