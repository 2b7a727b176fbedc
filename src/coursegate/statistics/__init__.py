"""Statistics - Read-only per-student enrollment statistics."""

from coursegate.statistics.aggregator import StatisticsAggregator
from coursegate.statistics.credits import CreditSource, NoCredits, StaticCreditSource
from coursegate.statistics.models import StudentStatistics

__all__ = [
    "CreditSource",
    "NoCredits",
    "StaticCreditSource",
    "StatisticsAggregator",
    "StudentStatistics",
]
