"""REST API for coursegate."""

from coursegate.api.app import app, create_app
from coursegate.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EnrollmentRequest,
    EnrollmentResponse,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseUpdate",
    "EnrollmentRequest",
    "EnrollmentResponse",
    "app",
    "create_app",
]
