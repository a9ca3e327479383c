"""Spaced-repetition scheduling.

Two independent schedulers share the interval policy, the due predicate and
the clock:

    from scheduling import compute_session_directive, compute_card_directive

    directive = compute_session_directive(ReviewOutcomeBatch(18, 2), clock.now())
    if directive is not None:
        store.apply_directive_to_due_cards(subject_id, now, directive)
"""

from scheduling.card import CardSchedulingDirective, compute_card_directive
from scheduling.clock import Clock, FixedClock, SystemClock
from scheduling.due import SchedulableCard, due_sort_key, is_due
from scheduling.errors import InvalidGrade, InvalidOutcomeBatch, SchedulingError
from scheduling.policy import PerformanceGrade
from scheduling.session import (
    ReviewOutcomeBatch,
    SchedulingDirective,
    compute_session_directive,
)

__all__ = [
    "CardSchedulingDirective",
    "Clock",
    "FixedClock",
    "InvalidGrade",
    "InvalidOutcomeBatch",
    "PerformanceGrade",
    "ReviewOutcomeBatch",
    "SchedulableCard",
    "SchedulingDirective",
    "SchedulingError",
    "SystemClock",
    "compute_card_directive",
    "compute_session_directive",
    "due_sort_key",
    "is_due",
]
