"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None
    code: str | None = None


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    id: str | None = Field(default=None, min_length=1, max_length=36)
    title: str = Field(..., min_length=1, max_length=255)
    capacity: int = Field(..., ge=1)
    owner_id: str = Field(..., min_length=1, max_length=36)
    is_open_for_enrollment: bool = True


class CourseUpdate(BaseModel):
    """Request model for updating a course (partial update)."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    capacity: int | None = Field(default=None, ge=1)
    is_open_for_enrollment: bool | None = None


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    owner_id: str
    capacity: int
    active_enrollment_count: int
    seats_available: int
    is_open_for_enrollment: bool
    created_at: datetime
    updated_at: datetime


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


class CourseRefResponse(BaseModel):
    """Response model for a course reference."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str


class SeatAuditResponse(BaseModel):
    """Response model for a seat counter audit."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    capacity: int
    cached_count: int
    active_records: int
    consistent: bool


# Prerequisite models


class PrerequisitesUpdate(BaseModel):
    """Request model for replacing a course's prerequisites."""

    required_ids: list[str] = Field(default_factory=list)


class PrerequisitesResponse(BaseModel):
    """Response model for a course's prerequisites."""

    course_id: str
    required_ids: list[str]


# Enrollment models


class EnrollmentRequest(BaseModel):
    """Request model for enrolling in or dropping a course."""

    student_id: str = Field(..., min_length=1, max_length=36)
    course_id: str = Field(..., min_length=1, max_length=36)


class ProgressUpdate(BaseModel):
    """Request model for updating enrollment progress."""

    completion_percentage: int = Field(..., ge=0, le=100)


class EnrollmentResponse(BaseModel):
    """Response model for an enrollment."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    status: str
    completion_percentage: int
    enrolled_at: datetime
    completed_at: datetime | None
    dropped_at: datetime | None


def enrollment_to_response(enrollment: Any) -> EnrollmentResponse:
    """Convert an Enrollment model to EnrollmentResponse."""
    return EnrollmentResponse.model_validate(enrollment)


class EnrollmentWithCourseResponse(BaseModel):
    """Response model for an enrollment together with its course."""

    model_config = ConfigDict(from_attributes=True)

    enrollment: EnrollmentResponse
    course: CourseResponse


def enrollment_view_to_response(view: Any) -> EnrollmentWithCourseResponse:
    """Convert an EnrollmentView to EnrollmentWithCourseResponse."""
    return EnrollmentWithCourseResponse.model_validate(view)


# Eligibility and statistics models


class EligibilityResponse(BaseModel):
    """Response model for an eligibility decision."""

    model_config = ConfigDict(from_attributes=True)

    can_enroll: bool
    reasons: list[str]
    missing_prerequisites: list[CourseRefResponse]


def eligibility_to_response(decision: Any) -> EligibilityResponse:
    """Convert an EligibilityDecision to EligibilityResponse."""
    return EligibilityResponse.model_validate(decision)


class StatisticsResponse(BaseModel):
    """Response model for student statistics."""

    model_config = ConfigDict(from_attributes=True)

    student_id: str
    active_courses: int
    completed_courses: int
    dropped_courses: int
    total_enrollments: int
    total_credits: float
    average_completion: int


def statistics_to_response(stats: Any) -> StatisticsResponse:
    """Convert a StudentStatistics to StatisticsResponse."""
    return StatisticsResponse.model_validate(stats)
