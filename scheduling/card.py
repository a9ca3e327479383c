"""Per-card scheduling from a single performance grade."""

from dataclasses import dataclass
from datetime import datetime

from scheduling.policy import PerformanceGrade, interval_for_grade


@dataclass(frozen=True)
class CardSchedulingDirective:
    last_reviewed: datetime
    next_review: datetime
    grade: PerformanceGrade


def compute_card_directive(grade, now: datetime) -> CardSchedulingDirective:
    """Schedule one card. Accepts a PerformanceGrade or its string value.

    Raises InvalidGrade for anything outside the four grades. The review
    counter is left alone here; only session scheduling increments it.
    """
    grade = PerformanceGrade.parse(grade)
    return CardSchedulingDirective(
        last_reviewed=now,
        next_review=now + interval_for_grade(grade),
        grade=grade,
    )
