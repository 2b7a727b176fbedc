"""Data models for the eligibility module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from coursegate.prerequisites import CourseRef


class IneligibilityReason(StrEnum):
    """Why a student cannot currently enroll in a course."""

    COURSE_CLOSED = "course is closed"
    ALREADY_ENROLLED = "already enrolled"
    COURSE_FULL = "course is full"
    MISSING_PREREQUISITES = "missing prerequisites"


@dataclass
class EligibilityDecision:
    """Outcome of an eligibility evaluation.

    Attributes:
        can_enroll: True iff no blocking reason was found.
        reasons: Every blocking reason, in evaluation order.
        missing_prerequisites: Direct prerequisites not yet completed.
    """

    can_enroll: bool
    reasons: list[IneligibilityReason] = field(default_factory=list)
    missing_prerequisites: list[CourseRef] = field(default_factory=list)
