"""Session-aggregate scheduling.

A study session reports only how many answers were right and wrong. The
ratio picks one interval, and the resulting directive is applied in bulk to
every due card of the session's subject.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from scheduling.errors import InvalidOutcomeBatch
from scheduling.policy import interval_days_for_performance


def _check_count(name, value):
    # bool is an int subclass but never a meaningful tally
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidOutcomeBatch(f"{name} must be an integer (got {value!r})")
    if value < 0:
        raise InvalidOutcomeBatch(f"{name} must be >= 0 (got {value})")


@dataclass(frozen=True)
class ReviewOutcomeBatch:
    correct_count: int
    incorrect_count: int

    def __post_init__(self):
        _check_count("correct_count", self.correct_count)
        _check_count("incorrect_count", self.incorrect_count)

    @property
    def total(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def performance(self) -> float | None:
        """Correct share in [0, 1], or None when nothing was graded."""
        if self.total == 0:
            return None
        return self.correct_count / self.total


@dataclass(frozen=True)
class SchedulingDirective:
    next_review_date: datetime
    last_reviewed: datetime
    review_count_delta: int = 1
    interval_days: int = 0


def compute_session_directive(outcome: ReviewOutcomeBatch, now: datetime) -> SchedulingDirective | None:
    """Return the directive for a finished session, or None when there is nothing to apply.

    None means the session carried no graded answers; callers must leave every
    card untouched in that case.
    """
    if not isinstance(outcome, ReviewOutcomeBatch):
        raise InvalidOutcomeBatch(f"expected a ReviewOutcomeBatch (got {type(outcome).__name__})")
    performance = outcome.performance
    if performance is None:
        return None

    days = interval_days_for_performance(performance)
    return SchedulingDirective(
        next_review_date=now + timedelta(days=days),
        last_reviewed=now,
        review_count_delta=1,
        interval_days=days,
    )
