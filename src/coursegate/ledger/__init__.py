"""Ledger - Authoritative enrollment records and seat counters."""

from coursegate.ledger.exceptions import (
    AlreadyEnrolledError,
    CapacityExceededError,
    EnrollmentChangedError,
    EnrollmentNotFoundError,
    NotEnrolledError,
    PrerequisitesNotMetError,
)
from coursegate.ledger.ledger import EnrollmentLedger
from coursegate.ledger.models import EnrollmentView, SeatAudit

__all__ = [
    "AlreadyEnrolledError",
    "CapacityExceededError",
    "EnrollmentChangedError",
    "EnrollmentLedger",
    "EnrollmentNotFoundError",
    "EnrollmentView",
    "NotEnrolledError",
    "PrerequisitesNotMetError",
    "SeatAudit",
]
