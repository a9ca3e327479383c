import logging

from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from sqlalchemy import String, cast, or_, select

from extensions import db
from models.flashcard import DIFFICULTIES, Flashcard, ReviewLog
from scheduling import compute_card_directive, is_due
from scheduling.clock import isoformat, to_naive_utc
from .common import (card_store, clock_now, get_owned_deck, get_owned_subject, json_body,
                     page_args, paginated, query_int)

flashcards_bp = Blueprint("flashcards", __name__, url_prefix="/flashcards")
logger = logging.getLogger(__name__)

NOT_AN_OBJECT = "Request body must be a JSON object"


def serialize_card(card: Flashcard):
    if not card:
        return None
    return {
        "id": card.id,
        "subject_id": card.subject_id,
        "deck_id": card.deck_id,
        "question": card.question,
        "answer": card.answer,
        "explanation": card.explanation,
        "difficulty": card.difficulty or "medium",
        "tags": card.tags or [],
        "last_reviewed": isoformat(card.last_reviewed),
        "next_review": isoformat(card.next_review),
        "review_count": card.review_count or 0,
        "due": is_due(card.to_schedulable(), clock_now()),
        "created_at": isoformat(card.created_at),
        "updated_at": isoformat(card.updated_at),
    }


def _owned_card(card_id):
    return Flashcard.query.filter_by(id=card_id, user_id=current_user.id).first()


def _text(data, key):
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(key)
    return value.strip()


def _clean_fields(data, partial):
    """Validate card fields from a request body. Returns (fields, error)."""
    fields = {}
    try:
        for key in ("question", "answer"):
            if key in data or not partial:
                value = _text(data, key)
                if not value:
                    return None, f"{key} is required"
                fields[key] = value
        if "explanation" in data:
            fields["explanation"] = _text(data, "explanation") or None
    except TypeError as err:
        return None, f"{err} must be a string"
    if "difficulty" in data or not partial:
        difficulty = data.get("difficulty") or "medium"
        if difficulty not in DIFFICULTIES:
            return None, f"difficulty must be one of: {', '.join(DIFFICULTIES)}"
        fields["difficulty"] = difficulty
    if "tags" in data:
        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) and t.strip() for t in tags):
            return None, "tags must be a list of non-empty strings"
        fields["tags"] = [t.strip() for t in tags]
    return fields, None


def _resolve_deck(deck_id, subject_id):
    """Deck for a card in subject_id. Returns (deck_id, error, status); None unsets the deck."""
    if deck_id is None:
        return None, None, None
    deck = get_owned_deck(deck_id)
    if not deck:
        return None, "Deck not found", 404
    if deck.subject_id != subject_id:
        return None, "Deck belongs to another subject", 400
    return deck.id, None, None


def _filter_args():
    """subject_id/deck_id listing filters. Returns (subject_id, deck_id, error, status)."""
    subject_id, error = query_int("subject_id")
    if error:
        return None, None, error, 400
    deck_id, error = query_int("deck_id")
    if error:
        return None, None, error, 400
    if subject_id is not None and not get_owned_subject(subject_id):
        return None, None, "Subject not found", 404
    if deck_id is not None and not get_owned_deck(deck_id):
        return None, None, "Deck not found", 404
    return subject_id, deck_id, None, None


def _next_due_card(subject_id=None):
    stmt = card_store().due_cards_query(current_user.id, clock_now(), subject_id=subject_id)
    return db.session.scalars(stmt.limit(1)).first()


@flashcards_bp.get("")
@login_required
def list_cards():
    page, limit, error = page_args()
    if error:
        return jsonify({"error": error}), 400
    subject_id, deck_id, error, status = _filter_args()
    if error:
        return jsonify({"error": error}), status

    stmt = select(Flashcard).where(Flashcard.user_id == current_user.id)
    if subject_id is not None:
        stmt = stmt.where(Flashcard.subject_id == subject_id)
    if deck_id is not None:
        stmt = stmt.where(Flashcard.deck_id == deck_id)
    difficulty = request.args.get("difficulty")
    if difficulty:
        if difficulty not in DIFFICULTIES:
            return jsonify({"error": f"difficulty must be one of: {', '.join(DIFFICULTIES)}"}), 400
        stmt = stmt.where(Flashcard.difficulty == difficulty)
    tag = (request.args.get("tag") or "").strip()
    if tag:
        # tags are stored as a JSON list, so match the quoted element
        stmt = stmt.where(cast(Flashcard.tags, String).contains(f'"{tag}"', autoescape=True))

    stmt = stmt.order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
    return jsonify(paginated(stmt, page, limit, serialize_card))


@flashcards_bp.get("/due")
@login_required
def due_cards():
    """
    Cards whose next review is unset or already passed, most urgent first.
    Optional ?subject_id= and ?deck_id= narrow the listing.
    """
    page, limit, error = page_args()
    if error:
        return jsonify({"error": error}), 400
    subject_id, deck_id, error, status = _filter_args()
    if error:
        return jsonify({"error": error}), status

    stmt = card_store().due_cards_query(current_user.id, clock_now(), subject_id=subject_id, deck_id=deck_id)
    return jsonify(paginated(stmt, page, limit, serialize_card))


@flashcards_bp.get("/search")
@login_required
def search_cards():
    q = (request.args.get("q") or "").strip()
    if not q:
        return jsonify({"error": 'Query parameter "q" is required'}), 400
    page, limit, error = page_args()
    if error:
        return jsonify({"error": error}), 400
    subject_id, deck_id, error, status = _filter_args()
    if error:
        return jsonify({"error": error}), status

    stmt = select(Flashcard).where(
        Flashcard.user_id == current_user.id,
        or_(
            Flashcard.question.icontains(q, autoescape=True),
            Flashcard.answer.icontains(q, autoescape=True),
            cast(Flashcard.tags, String).icontains(q, autoescape=True),
        ),
    )
    if subject_id is not None:
        stmt = stmt.where(Flashcard.subject_id == subject_id)
    if deck_id is not None:
        stmt = stmt.where(Flashcard.deck_id == deck_id)
    stmt = stmt.order_by(Flashcard.created_at.desc(), Flashcard.id.desc())
    return jsonify(paginated(stmt, page, limit, serialize_card))


@flashcards_bp.post("")
@login_required
def create_card():
    data = json_body()
    if data is None:
        return jsonify({"error": NOT_AN_OBJECT}), 400
    subject = get_owned_subject(data.get("subject_id"))
    if not subject:
        return jsonify({"error": "Subject not found"}), 404
    fields, error = _clean_fields(data, partial=False)
    if error:
        return jsonify({"error": error}), 400
    deck_id, error, status = _resolve_deck(data.get("deck_id"), subject.id)
    if error:
        return jsonify({"error": error}), status

    card = Flashcard(user_id=current_user.id, subject_id=subject.id, deck_id=deck_id, review_count=0, **fields)
    db.session.add(card)
    db.session.commit()
    return jsonify(serialize_card(card)), 201


@flashcards_bp.get("/<int:card_id>")
@login_required
def get_card(card_id):
    card = _owned_card(card_id)
    if not card:
        return jsonify({"error": "Card not found"}), 404
    return jsonify(serialize_card(card))


@flashcards_bp.put("/<int:card_id>")
@login_required
def update_card(card_id):
    card = _owned_card(card_id)
    if not card:
        return jsonify({"error": "Card not found"}), 404
    data = json_body()
    if data is None:
        return jsonify({"error": NOT_AN_OBJECT}), 400
    fields, error = _clean_fields(data, partial=True)
    if error:
        return jsonify({"error": error}), 400
    if "subject_id" in data:
        subject = get_owned_subject(data.get("subject_id"))
        if not subject:
            return jsonify({"error": "Subject not found"}), 404
        fields["subject_id"] = subject.id
    subject_id = fields.get("subject_id", card.subject_id)
    if "deck_id" in data:
        fields["deck_id"], error, status = _resolve_deck(data.get("deck_id"), subject_id)
        if error:
            return jsonify({"error": error}), status
    elif subject_id != card.subject_id:
        # a deck never spans subjects
        fields["deck_id"] = None

    for key, value in fields.items():
        setattr(card, key, value)
    db.session.commit()
    return jsonify(serialize_card(card))


@flashcards_bp.delete("/<int:card_id>")
@login_required
def delete_card(card_id):
    card = _owned_card(card_id)
    if not card:
        return jsonify({"error": "Card not found"}), 404

    ReviewLog.query.filter_by(card_id=card.id, user_id=current_user.id).delete()
    db.session.delete(card)
    db.session.commit()
    return jsonify({"ok": True})


@flashcards_bp.post("/<int:card_id>/review")
@login_required
def review_card(card_id):
    card = _owned_card(card_id)
    if not card:
        return jsonify({"error": "Card not found"}), 404
    data = json_body()
    if data is None:
        return jsonify({"error": NOT_AN_OBJECT}), 400

    # InvalidGrade propagates to the app's 400 handler
    directive = compute_card_directive(data.get("performance"), clock_now())
    card = card_store().apply_card_directive(card.id, directive)
    db.session.add(ReviewLog(
        card_id=card.id, user_id=current_user.id, grade=directive.grade.value,
        reviewed_at=to_naive_utc(directive.last_reviewed),
        next_review_after=to_naive_utc(directive.next_review),
    ))
    db.session.commit()
    logger.info("Card %s graded %s, next review %s", card.id, directive.grade.value,
                isoformat(directive.next_review))

    # Return the next due card of the same subject so the client can move on
    next_card = _next_due_card(card.subject_id)
    return jsonify({
        "card": serialize_card(card),
        "next": {
            "has_card": bool(next_card),
            "card": serialize_card(next_card),
        },
    })
