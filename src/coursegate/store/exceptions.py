"""Custom exceptions for the course store."""

from coursegate.exceptions import ConcurrencyError, ConflictError


class CourseExistsError(ConflictError):
    """Course with given ID already exists."""

    code = "course_exists"


class CapacityBelowEnrollmentError(ConflictError):
    """Capacity cannot be lowered below the number of active enrollments."""

    code = "capacity_below_enrollment"


class StorageBusyError(ConcurrencyError):
    """The database did not grant a write transaction in time."""

    code = "storage_busy"


class CourseHasActiveEnrollmentsError(ConflictError):
    """Cannot delete a course while students hold seats in it."""

    code = "course_has_active_enrollments"
