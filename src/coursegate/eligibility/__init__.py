"""Eligibility - Structured, side-effect-free enrollment decisions."""

from coursegate.eligibility.evaluator import EligibilityEvaluator
from coursegate.eligibility.models import EligibilityDecision, IneligibilityReason
from coursegate.eligibility.rules import evaluate_enrollment, find_active_enrollment

__all__ = [
    "EligibilityDecision",
    "EligibilityEvaluator",
    "IneligibilityReason",
    "evaluate_enrollment",
    "find_active_enrollment",
]
