"""Interval policy shared by both schedulers.

Session performance ratios map to whole days, single-card grades map to
minutes. Both tables are fixed at import time.
"""

from datetime import timedelta
from enum import Enum

from scheduling.errors import InvalidGrade

# (minimum ratio, days); checked top-down, thresholds are inclusive
PERFORMANCE_THRESHOLDS = (
    (0.8, 7),
    (0.5, 3),
)
FALLBACK_DAYS = 1


class PerformanceGrade(str, Enum):
    """Self-assessed recall for a single card, weakest first."""
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(g.value for g in cls)
            raise InvalidGrade(f"performance must be one of: {allowed} (got {value!r})") from None


GRADE_INTERVAL_MINUTES = {
    PerformanceGrade.AGAIN: 1,
    PerformanceGrade.HARD: 10,
    PerformanceGrade.GOOD: 1440,   # 1 day
    PerformanceGrade.EASY: 4320,   # 3 days
}


def interval_days_for_performance(performance: float) -> int:
    for minimum, days in PERFORMANCE_THRESHOLDS:
        if performance >= minimum:
            return days
    return FALLBACK_DAYS


def interval_for_grade(grade) -> timedelta:
    grade = PerformanceGrade.parse(grade)
    return timedelta(minutes=GRADE_INTERVAL_MINUTES[grade])
