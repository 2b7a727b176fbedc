"""SQLAlchemy models for the course and enrollment store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from coursegate.exceptions import InvalidStateTransitionError


class EnrollmentStatus(StrEnum):
    """Enrollment status enum.

    ``active`` is the only non-terminal state.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed from this status."""
        return not _TRANSITIONS[self]

    def can_transition_to(self, target: EnrollmentStatus) -> bool:
        """Check the transition table for ``self -> target``."""
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.ACTIVE: frozenset({EnrollmentStatus.COMPLETED, EnrollmentStatus.DROPPED}),
    EnrollmentStatus.COMPLETED: frozenset(),
    EnrollmentStatus.DROPPED: frozenset(),
}


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form SQLite stores."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course aggregate - capacity and the cached active seat counter."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_courses_capacity_positive"),
        CheckConstraint("active_enrollment_count >= 0", name="ck_courses_count_non_negative"),
        CheckConstraint(
            "active_enrollment_count <= capacity", name="ck_courses_count_within_capacity"
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    active_enrollment_count: Mapped[int] = mapped_column(Integer, nullable=False)
    is_open_for_enrollment: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __init__(
        self,
        title: str,
        capacity: int,
        owner_id: str,
        id: str | None = None,
        is_open_for_enrollment: bool = True,
        active_enrollment_count: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.title = title
        self.capacity = capacity
        self.owner_id = owner_id
        self.is_open_for_enrollment = is_open_for_enrollment
        self.active_enrollment_count = active_enrollment_count

    @property
    def seats_available(self) -> int:
        """Number of seats not held by an active enrollment."""
        return max(0, self.capacity - self.active_enrollment_count)

    @property
    def is_full(self) -> bool:
        return self.active_enrollment_count >= self.capacity

    def __repr__(self) -> str:
        return (
            f"<Course(id={self.id!r}, title={self.title!r}, "
            f"seats={self.active_enrollment_count}/{self.capacity})>"
        )


class PrerequisiteEdge(Base):
    """Directed edge: ``course_id`` requires ``required_course_id``."""

    __tablename__ = "course_prerequisites"

    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True
    )
    required_course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True
    )

    def __init__(self, course_id: str, required_course_id: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.course_id = course_id
        self.required_course_id = required_course_id

    def __repr__(self) -> str:
        return f"<PrerequisiteEdge({self.course_id!r} -> {self.required_course_id!r})>"


class Enrollment(Base):
    """Enrollment record. Historical rows are kept after completion or drop."""

    __tablename__ = "enrollments"
    __table_args__ = (
        # At most one active enrollment per (student, course)
        Index(
            "uq_enrollments_active_pair",
            "student_id",
            "course_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
        Index("ix_enrollments_pair_created", "student_id", "course_id", "created_at"),
        CheckConstraint(
            "completion_percentage >= 0 AND completion_percentage <= 100",
            name="ck_enrollments_completion_range",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    completion_percentage: Mapped[int] = mapped_column(Integer, nullable=False)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    dropped_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    # Bumped on every UPDATE; a row changed by another writer fails the flush
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def __init__(
        self,
        student_id: str,
        course_id: str,
        id: str | None = None,
        status: str | None = None,
        completion_percentage: int = 0,
        enrolled_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        now = utcnow()
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.status = status if status is not None else EnrollmentStatus.ACTIVE.value
        self.completion_percentage = completion_percentage
        self.enrolled_at = enrolled_at if enrolled_at is not None else now
        self.created_at = now

    @property
    def enrollment_status(self) -> EnrollmentStatus:
        """Get status as EnrollmentStatus enum."""
        return EnrollmentStatus(self.status)

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE.value

    def transition_to(self, target: EnrollmentStatus) -> None:
        """Move to ``target``, stamping the matching timestamp.

        Raises:
            InvalidStateTransitionError: If the transition table forbids it.
        """
        current = self.enrollment_status
        if not current.can_transition_to(target):
            raise InvalidStateTransitionError(current.value, target.value)

        self.status = target.value
        if target is EnrollmentStatus.COMPLETED:
            self.completed_at = utcnow()
            self.completion_percentage = 100
        elif target is EnrollmentStatus.DROPPED:
            self.dropped_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id!r}, student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, status={self.status!r})>"
        )
