from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from sqlalchemy import func, select

from extensions import db
from models.deck import Deck
from models.flashcard import Flashcard, ReviewLog
from models.study_session import StudySession
from models.subject import Subject
from scheduling.clock import isoformat
from .common import card_store, clock_now, get_owned_subject, json_body

subjects_bp = Blueprint("subjects", __name__, url_prefix="/subjects")

MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


def serialize_subject(subject):
    return {
        "id": subject.id,
        "name": subject.name,
        "description": subject.description or "",
        "created_at": isoformat(subject.created_at),
        "updated_at": isoformat(subject.updated_at),
    }


def clean_name_fields(data, partial):
    """Validate name/description from a request body. Returns (fields, error).

    Shared by subjects and decks, which use the same limits.
    """
    fields = {}
    for key in ("name", "description"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            return None, f"{key} must be a string"
    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            return None, "name is required"
        if len(name) > MAX_NAME_LENGTH:
            return None, f"name must be at most {MAX_NAME_LENGTH} characters"
        fields["name"] = name
    if "description" in data or not partial:
        description = (data.get("description") or "").strip()
        if len(description) > MAX_DESCRIPTION_LENGTH:
            return None, f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        fields["description"] = description
    return fields, None


def _name_taken(name, exclude_id=None):
    stmt = select(Subject.id).where(Subject.user_id == current_user.id, Subject.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Subject.id != exclude_id)
    return db.session.scalars(stmt).first() is not None


@subjects_bp.get("")
@login_required
def list_subjects():
    subjects = Subject.query.filter_by(user_id=current_user.id).order_by(Subject.name.asc()).all()
    return jsonify({"items": [serialize_subject(s) for s in subjects]})


@subjects_bp.post("")
@login_required
def create_subject():
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    fields, error = clean_name_fields(data, partial=False)
    if error:
        return jsonify({"error": error}), 400
    if _name_taken(fields["name"]):
        return jsonify({"error": f"Subject {fields['name']!r} already exists"}), 400

    subject = Subject(user_id=current_user.id, **fields)
    db.session.add(subject)
    db.session.commit()
    return jsonify(serialize_subject(subject)), 201


@subjects_bp.get("/<int:subject_id>")
@login_required
def get_subject(subject_id):
    subject = get_owned_subject(subject_id)
    if not subject:
        return jsonify({"error": "Subject not found"}), 404
    return jsonify(serialize_subject(subject))


@subjects_bp.put("/<int:subject_id>")
@login_required
def update_subject(subject_id):
    subject = get_owned_subject(subject_id)
    if not subject:
        return jsonify({"error": "Subject not found"}), 404
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    fields, error = clean_name_fields(data, partial=True)
    if error:
        return jsonify({"error": error}), 400
    if "name" in fields and _name_taken(fields["name"], exclude_id=subject.id):
        return jsonify({"error": f"Subject {fields['name']!r} already exists"}), 400

    for key, value in fields.items():
        setattr(subject, key, value)
    db.session.commit()
    return jsonify(serialize_subject(subject))


@subjects_bp.get("/<int:subject_id>/stats")
@login_required
def subject_stats(subject_id):
    """Card and study progress for one subject."""
    subject = get_owned_subject(subject_id)
    if not subject:
        return jsonify({"error": "Subject not found"}), 404

    total_cards, reviewed_cards = db.session.execute(
        select(func.count(Flashcard.id), func.count(Flashcard.last_reviewed))
        .where(Flashcard.subject_id == subject.id)
    ).one()
    deck_count = db.session.scalar(select(func.count(Deck.id)).where(Deck.subject_id == subject.id))
    sessions, correct, incorrect = db.session.execute(
        select(
            func.count(StudySession.id),
            func.coalesce(func.sum(StudySession.correct_answers), 0),
            func.coalesce(func.sum(StudySession.incorrect_answers), 0),
        ).where(StudySession.subject_id == subject.id)
    ).one()
    due = card_store().find_due_cards(subject.id, clock_now())
    answered = correct + incorrect

    return jsonify({
        "subject": serialize_subject(subject),
        "total_cards": total_cards,
        "reviewed_cards": reviewed_cards,
        "due_cards": len(due),
        "next_due_card_id": due[0].id if due else None,
        "deck_count": deck_count,
        "sessions": sessions,
        "correct_answers": correct,
        "incorrect_answers": incorrect,
        "success_rate": (correct / answered * 100) if answered else 0,
    })


@subjects_bp.delete("/<int:subject_id>")
@login_required
def delete_subject(subject_id):
    subject = get_owned_subject(subject_id)
    if not subject:
        return jsonify({"error": "Subject not found"}), 404

    card_ids = select(Flashcard.id).where(Flashcard.subject_id == subject.id)
    ReviewLog.query.filter(ReviewLog.card_id.in_(card_ids)).delete(synchronize_session=False)
    Flashcard.query.filter_by(subject_id=subject.id).delete()
    Deck.query.filter_by(subject_id=subject.id).delete()
    StudySession.query.filter_by(subject_id=subject.id).delete()
    db.session.delete(subject)
    db.session.commit()
    return jsonify({"ok": True})
