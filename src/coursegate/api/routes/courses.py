"""Course, prerequisite and roster endpoints."""

from fastapi import APIRouter, Query, status

from coursegate.api.dependencies import EngineDep
from coursegate.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EnrollmentResponse,
    PrerequisitesResponse,
    PrerequisitesUpdate,
    SeatAuditResponse,
    course_to_response,
    enrollment_to_response,
)
from coursegate.store import EnrollmentStatus

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(
    engine: EngineDep,
    is_open: bool | None = Query(default=None, description="Filter by open status"),
    owner_id: str | None = Query(default=None, description="Filter by owning instructor"),
) -> APIResponse[list[CourseResponse]]:
    """List courses."""
    courses = engine.catalog.list_courses(is_open=is_open, owner_id=owner_id)
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, engine: EngineDep) -> APIResponse[CourseResponse]:
    """Create a new course."""
    created = engine.catalog.create_course(
        title=course.title,
        capacity=course.capacity,
        owner_id=course.owner_id,
        is_open_for_enrollment=course.is_open_for_enrollment,
        course_id=course.id,
    )
    return APIResponse(data=course_to_response(created))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: str, engine: EngineDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    course = engine.catalog.get_course(course_id)
    return APIResponse(data=course_to_response(course))


@router.patch("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: str, course: CourseUpdate, engine: EngineDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = engine.catalog.update_course(
        course_id,
        title=course.title,
        capacity=course.capacity,
        is_open_for_enrollment=course.is_open_for_enrollment,
    )
    return APIResponse(data=course_to_response(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: str, engine: EngineDep) -> None:
    """Delete a course. Fails while students hold seats in it."""
    engine.catalog.delete_course(course_id)


@router.get("/{course_id}/prerequisites", response_model=APIResponse[PrerequisitesResponse])
def get_prerequisites(course_id: str, engine: EngineDep) -> APIResponse[PrerequisitesResponse]:
    """Get the IDs of the courses a course directly requires."""
    required = engine.prerequisites.get_prerequisites(course_id)
    return APIResponse(
        data=PrerequisitesResponse(course_id=course_id, required_ids=sorted(required))
    )


@router.put("/{course_id}/prerequisites", response_model=APIResponse[PrerequisitesResponse])
def set_prerequisites(
    course_id: str, body: PrerequisitesUpdate, engine: EngineDep
) -> APIResponse[PrerequisitesResponse]:
    """Replace a course's prerequisites. Rejected if it would create a cycle."""
    committed = engine.prerequisites.set_prerequisites(course_id, body.required_ids)
    return APIResponse(
        data=PrerequisitesResponse(course_id=course_id, required_ids=sorted(committed))
    )


@router.post("/{course_id}/complete", response_model=APIResponse[list[EnrollmentResponse]])
def complete_course(course_id: str, engine: EngineDep) -> APIResponse[list[EnrollmentResponse]]:
    """Complete every active enrollment of a course (e.g. at term close)."""
    completed = engine.ledger.transition_to_completed(course_id)
    return APIResponse(data=[enrollment_to_response(e) for e in completed])


@router.get("/{course_id}/enrollments", response_model=APIResponse[list[EnrollmentResponse]])
def list_course_enrollments(
    course_id: str,
    engine: EngineDep,
    include_history: bool = Query(
        default=False, description="Include completed and dropped enrollments"
    ),
) -> APIResponse[list[EnrollmentResponse]]:
    """List a course's enrollments, active ones only unless history is requested."""
    status_filter = None if include_history else EnrollmentStatus.ACTIVE
    found = engine.ledger.course_enrollments(course_id, status=status_filter)
    return APIResponse(data=[enrollment_to_response(e) for e in found])


@router.get("/{course_id}/seats", response_model=APIResponse[SeatAuditResponse])
def audit_seats(course_id: str, engine: EngineDep) -> APIResponse[SeatAuditResponse]:
    """Compare a course's seat counter with its active enrollment records."""
    audit = engine.ledger.audit_seats(course_id)
    return APIResponse(data=SeatAuditResponse.model_validate(audit))
