"""Credit weights supplied by the external course catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Mapping


class CreditSource(Protocol):
    """Interface for whatever knows how many credits a course is worth."""

    def credits_for(self, course_id: str) -> float:
        """Credit weight of a course."""
        ...


class NoCredits:
    """Credit source for deployments without credit weights."""

    def credits_for(self, course_id: str) -> float:
        return 0.0


class StaticCreditSource:
    """Credit weights from a fixed mapping; unknown courses are worth 0."""

    def __init__(self, credits: Mapping[str, float]) -> None:
        self._credits = dict(credits)

    def credits_for(self, course_id: str) -> float:
        return float(self._credits.get(course_id, 0.0))
