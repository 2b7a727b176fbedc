"""Enrollment endpoints: enroll, drop and progress."""

from fastapi import APIRouter, status

from coursegate.api.dependencies import EngineDep
from coursegate.api.models import (
    APIResponse,
    EnrollmentRequest,
    EnrollmentResponse,
    ProgressUpdate,
    enrollment_to_response,
)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post(
    "",
    response_model=APIResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def enroll(request: EnrollmentRequest, engine: EngineDep) -> APIResponse[EnrollmentResponse]:
    """Enroll a student in a course, taking a seat."""
    enrollment = engine.ledger.enroll(request.student_id, request.course_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.post("/drop", status_code=status.HTTP_204_NO_CONTENT)
def drop(request: EnrollmentRequest, engine: EngineDep) -> None:
    """Drop a student's active enrollment, releasing the seat."""
    engine.ledger.drop(request.student_id, request.course_id)


@router.get("/{enrollment_id}", response_model=APIResponse[EnrollmentResponse])
def get_enrollment(enrollment_id: str, engine: EngineDep) -> APIResponse[EnrollmentResponse]:
    """Get an enrollment by ID."""
    enrollment = engine.ledger.get_enrollment(enrollment_id)
    return APIResponse(data=enrollment_to_response(enrollment))


@router.patch("/{enrollment_id}/progress", response_model=APIResponse[EnrollmentResponse])
def update_progress(
    enrollment_id: str, body: ProgressUpdate, engine: EngineDep
) -> APIResponse[EnrollmentResponse]:
    """Record progress; 100 completes the enrollment."""
    enrollment = engine.ledger.update_progress(enrollment_id, body.completion_percentage)
    return APIResponse(data=enrollment_to_response(enrollment))
