"""Store - Persistent storage for courses, prerequisite edges and enrollments."""

from coursegate.store.catalog import CourseCatalog
from coursegate.store.database import Database
from coursegate.store.exceptions import (
    CapacityBelowEnrollmentError,
    CourseExistsError,
    CourseHasActiveEnrollmentsError,
    StorageBusyError,
)
from coursegate.store.models import (
    Course,
    Enrollment,
    EnrollmentStatus,
    PrerequisiteEdge,
)

__all__ = [
    "CapacityBelowEnrollmentError",
    "Course",
    "CourseCatalog",
    "CourseExistsError",
    "CourseHasActiveEnrollmentsError",
    "Database",
    "Enrollment",
    "EnrollmentStatus",
    "PrerequisiteEdge",
    "StorageBusyError",
]
