import logging

from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from sqlalchemy import func, select, update

from extensions import db
from models.deck import Deck
from models.flashcard import Flashcard
from scheduling.clock import isoformat
from .common import get_owned_deck, get_owned_subject, is_id, json_body
from .flashcard import serialize_card
from .subject import clean_name_fields

decks_bp = Blueprint("decks", __name__, url_prefix="/decks")
logger = logging.getLogger(__name__)


def serialize_deck(deck, flashcard_count=0):
    return {
        "id": deck.id,
        "subject_id": deck.subject_id,
        "name": deck.name,
        "description": deck.description or "",
        "flashcard_count": flashcard_count,
        "created_at": isoformat(deck.created_at),
        "updated_at": isoformat(deck.updated_at),
    }


def _card_count(deck_id):
    return db.session.scalar(select(func.count(Flashcard.id)).where(Flashcard.deck_id == deck_id))


def _name_taken(subject_id, name, exclude_id=None):
    stmt = select(Deck.id).where(Deck.subject_id == subject_id, Deck.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Deck.id != exclude_id)
    return db.session.scalars(stmt).first() is not None


@decks_bp.post("")
@login_required
def create_deck():
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    subject = get_owned_subject(data.get("subject_id"))
    if not subject:
        return jsonify({"error": "Subject not found"}), 404
    fields, error = clean_name_fields(data, partial=False)
    if error:
        return jsonify({"error": error}), 400
    if _name_taken(subject.id, fields["name"]):
        return jsonify({"error": f"Deck {fields['name']!r} already exists in this subject"}), 400

    deck = Deck(user_id=current_user.id, subject_id=subject.id, **fields)
    db.session.add(deck)
    db.session.commit()
    return jsonify(serialize_deck(deck)), 201


@decks_bp.get("/subject/<int:subject_id>")
@login_required
def list_decks(subject_id):
    subject = get_owned_subject(subject_id)
    if not subject:
        return jsonify({"error": "Subject not found"}), 404

    counts = (select(Flashcard.deck_id, func.count(Flashcard.id).label("n"))
              .where(Flashcard.deck_id.is_not(None))
              .group_by(Flashcard.deck_id)
              .subquery())
    rows = db.session.execute(
        select(Deck, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.deck_id == Deck.id)
        .where(Deck.subject_id == subject.id, Deck.user_id == current_user.id)
        .order_by(Deck.created_at.desc(), Deck.id.desc())
    ).all()
    return jsonify({"items": [serialize_deck(deck, n) for deck, n in rows]})


@decks_bp.get("/<int:deck_id>")
@login_required
def get_deck(deck_id):
    """A deck with its flashcards, newest first."""
    deck = get_owned_deck(deck_id)
    if not deck:
        return jsonify({"error": "Deck not found"}), 404
    cards = db.session.scalars(
        select(Flashcard)
        .where(Flashcard.deck_id == deck.id, Flashcard.user_id == current_user.id)
        .order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
    ).all()
    body = serialize_deck(deck, len(cards))
    body["flashcards"] = [serialize_card(c) for c in cards]
    return jsonify(body)


@decks_bp.put("/<int:deck_id>")
@login_required
def update_deck(deck_id):
    deck = get_owned_deck(deck_id)
    if not deck:
        return jsonify({"error": "Deck not found"}), 404
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    fields, error = clean_name_fields(data, partial=True)
    if error:
        return jsonify({"error": error}), 400
    if "name" in fields and _name_taken(deck.subject_id, fields["name"], exclude_id=deck.id):
        return jsonify({"error": f"Deck {fields['name']!r} already exists in this subject"}), 400

    for key, value in fields.items():
        setattr(deck, key, value)
    db.session.commit()
    return jsonify(serialize_deck(deck, _card_count(deck.id)))


@decks_bp.delete("/<int:deck_id>")
@login_required
def delete_deck(deck_id):
    """Delete a deck; its flashcards stay in the subject without a deck."""
    deck = get_owned_deck(deck_id)
    if not deck:
        return jsonify({"error": "Deck not found"}), 404

    db.session.execute(update(Flashcard).where(Flashcard.deck_id == deck.id).values(deck_id=None))
    db.session.delete(deck)
    db.session.commit()
    return jsonify({"ok": True})


@decks_bp.post("/<int:deck_id>/move-flashcards")
@login_required
def move_flashcards(deck_id):
    """
    Move flashcards into a deck.

    Body: { flashcard_ids: [...] }. Every card must belong to the user and to
    the deck's subject; otherwise nothing moves.
    """
    deck = get_owned_deck(deck_id)
    if not deck:
        return jsonify({"error": "Deck not found"}), 404
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    card_ids = data.get("flashcard_ids")
    if not isinstance(card_ids, list) or not card_ids or not all(is_id(c) for c in card_ids):
        return jsonify({"error": "flashcard_ids must be a non-empty list of card ids"}), 400
    card_ids = set(card_ids)

    cards = db.session.scalars(
        select(Flashcard).where(Flashcard.id.in_(card_ids), Flashcard.user_id == current_user.id)
    ).all()
    if len(cards) != len(card_ids):
        return jsonify({"error": "Some flashcards were not found"}), 404
    if any(card.subject_id != deck.subject_id for card in cards):
        return jsonify({"error": "Some flashcards belong to another subject"}), 400

    for card in cards:
        card.deck_id = deck.id
    db.session.commit()
    logger.info("Moved %s flashcards into deck %s", len(cards), deck.id)
    return jsonify({"moved": len(cards), "deck": serialize_deck(deck, _card_count(deck.id))})
