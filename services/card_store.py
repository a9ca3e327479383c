"""SQLAlchemy-backed card store.

Applies scheduler directives to stored flashcards. Methods only stage
changes on the session they were given; the caller owns the commit, so a
study session row and its bulk reschedule land in one transaction.
"""

import logging

from sqlalchemy import or_, select, update

from models.flashcard import Flashcard
from scheduling.clock import to_naive_utc

logger = logging.getLogger(__name__)


def due_filter(as_of):
    return or_(Flashcard.next_review.is_(None), Flashcard.next_review <= to_naive_utc(as_of))


def due_order():
    return (Flashcard.next_review.asc().nulls_first(), Flashcard.id.asc())


class SqlAlchemyCardStore:
    def __init__(self, session):
        self.session = session

    def due_cards_query(self, user_id, as_of, subject_id=None, deck_id=None):
        """Select statement for a user's due flashcards, most urgent first."""
        stmt = select(Flashcard).where(Flashcard.user_id == user_id, due_filter(as_of))
        if subject_id is not None:
            stmt = stmt.where(Flashcard.subject_id == subject_id)
        if deck_id is not None:
            stmt = stmt.where(Flashcard.deck_id == deck_id)
        return stmt.order_by(*due_order())

    def find_due_cards(self, subject_id, as_of):
        """Due cards of a subject as SchedulableCard values, in due_sort_key order."""
        stmt = (select(Flashcard)
                .where(Flashcard.subject_id == subject_id, due_filter(as_of))
                .order_by(*due_order()))
        return [card.to_schedulable() for card in self.session.scalars(stmt)]

    def apply_directive_to_due_cards(self, subject_id, as_of, directive, card_ids=None):
        """Reschedule every due card of the subject with one UPDATE; returns the row count.

        card_ids narrows the update to those cards (still only the due ones).
        An empty card_ids list matches nothing.
        """
        stmt = update(Flashcard).where(Flashcard.subject_id == subject_id, due_filter(as_of))
        if card_ids is not None:
            if not card_ids:
                return 0
            stmt = stmt.where(Flashcard.id.in_(card_ids))
        stmt = stmt.values(
            next_review=to_naive_utc(directive.next_review_date),
            last_reviewed=to_naive_utc(directive.last_reviewed),
            review_count=Flashcard.review_count + directive.review_count_delta,
        )

        result = self.session.execute(stmt)
        logger.debug("Bulk reschedule of subject %s matched %s cards", subject_id, result.rowcount)
        return result.rowcount

    def apply_card_directive(self, card_id, directive):
        """Write one card's new schedule. Returns the card, or None if it does not exist."""
        card = self.session.get(Flashcard, card_id)
        if card is None:
            return None
        card.last_reviewed = to_naive_utc(directive.last_reviewed)
        card.next_review = to_naive_utc(directive.next_review)
        return card
