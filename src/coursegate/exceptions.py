"""Error taxonomy for coursegate.

Every error carries a stable ``code`` so that the API and CLI can report
failures without parsing messages.
"""


class CoursegateError(Exception):
    """Base exception for coursegate errors."""

    code = "error"


class ValidationError(CoursegateError):
    """Input is malformed."""

    code = "validation_error"


class NotFoundError(CoursegateError):
    """A referenced course or enrollment does not exist."""

    code = "not_found"


class ConflictError(CoursegateError):
    """Request conflicts with the current state of the ledger."""

    code = "conflict"


class PreconditionError(CoursegateError):
    """A business precondition for the request does not hold."""

    code = "precondition_failed"


class ConcurrencyError(CoursegateError):
    """A lock or transaction could not be acquired in time. Safe to retry."""

    code = "busy"
    retryable = True


class CourseNotFoundError(NotFoundError):
    """Course with given ID does not exist."""

    code = "course_not_found"

    def __init__(self, course_id: str, message: str | None = None) -> None:
        self.course_id = course_id
        super().__init__(message or f"Course with id '{course_id}' not found")


class CourseClosedError(CourseNotFoundError):
    """Course exists but is not open for enrollment."""

    code = "course_closed"

    def __init__(self, course_id: str) -> None:
        super().__init__(course_id, f"Course '{course_id}' is not open for enrollment")


class InvalidStateTransitionError(ConflictError):
    """Enrollment cannot move from its current status to the requested one."""

    code = "invalid_state_transition"

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(
            message or f"Cannot transition enrollment from '{current}' to '{target}'"
        )
