"""Student-facing read endpoints: enrollments, eligibility and statistics."""

from fastapi import APIRouter, Query

from coursegate.api.dependencies import EngineDep
from coursegate.api.models import (
    APIResponse,
    EligibilityResponse,
    EnrollmentWithCourseResponse,
    StatisticsResponse,
    eligibility_to_response,
    enrollment_view_to_response,
    statistics_to_response,
)
from coursegate.store import EnrollmentStatus

router = APIRouter(prefix="/students", tags=["students"])


@router.get(
    "/{student_id}/enrollments",
    response_model=APIResponse[list[EnrollmentWithCourseResponse]],
)
def list_my_enrollments(
    student_id: str,
    engine: EngineDep,
    status: EnrollmentStatus | None = Query(default=None, description="Filter by status"),
) -> APIResponse[list[EnrollmentWithCourseResponse]]:
    """List a student's enrollments with their courses, most recent first."""
    views = engine.ledger.my_enrollments(student_id, status=status)
    return APIResponse(data=[enrollment_view_to_response(v) for v in views])


@router.get(
    "/{student_id}/eligibility/{course_id}",
    response_model=APIResponse[EligibilityResponse],
)
def check_eligibility(
    student_id: str, course_id: str, engine: EngineDep
) -> APIResponse[EligibilityResponse]:
    """Advisory check of whether a student may enroll in a course."""
    decision = engine.evaluator.check_eligibility(student_id, course_id)
    return APIResponse(data=eligibility_to_response(decision))


@router.get("/{student_id}/statistics", response_model=APIResponse[StatisticsResponse])
def get_statistics(student_id: str, engine: EngineDep) -> APIResponse[StatisticsResponse]:
    """Get a student's enrollment statistics."""
    stats = engine.statistics.get_statistics(student_id)
    return APIResponse(data=statistics_to_response(stats))
