"""Data models for the prerequisites module."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CourseRef:
    """Lightweight reference to a course, safe to hand out of a session.

    Attributes:
        id: The course's unique ID.
        title: The course's display title.
    """

    id: str
    title: str
