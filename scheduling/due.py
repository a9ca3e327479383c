"""Due-card predicate and ordering."""

from dataclasses import dataclass
from datetime import datetime

from scheduling.clock import to_naive_utc


@dataclass(frozen=True)
class SchedulableCard:
    id: int
    last_reviewed: datetime | None = None
    next_review: datetime | None = None
    review_count: int = 0


def is_due(card, now: datetime) -> bool:
    """A card never scheduled, or scheduled at or before now, is due."""
    return card.next_review is None or card.next_review <= now


def due_sort_key(card):
    """Sort key for in-memory due lists; the card store applies the same order in SQL.

    Unscheduled cards are the most urgent, then earliest next_review, then id.
    """
    if card.next_review is None:
        return (0, datetime.min, card.id)
    return (1, to_naive_utc(card.next_review), card.id)
