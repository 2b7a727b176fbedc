"""Exceptions for the prerequisites module."""

from __future__ import annotations

from coursegate.exceptions import PreconditionError


class CycleDetectedError(PreconditionError):
    """Prerequisite edit would make a course require itself."""

    code = "cycle_detected"

    def __init__(self, course_id: str, cycle: list[str]) -> None:
        self.course_id = course_id
        self.cycle = cycle
        super().__init__(
            f"Prerequisites for course '{course_id}' would create a cycle: {' -> '.join(cycle)}"
        )
