import logging

from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user
from sqlalchemy import and_, case, func, select

from extensions import db
from models.study_session import StudySession
from models.subject import Subject
from scheduling import ReviewOutcomeBatch, compute_session_directive
from scheduling.clock import isoformat
from .common import MAX_INT, card_store, clock_now, get_owned_subject, is_id, json_body, query_int

study_sessions_bp = Blueprint("study_sessions", __name__, url_prefix="/study-sessions")
logger = logging.getLogger(__name__)

COUNT_FIELDS = ("duration", "cards_studied", "correct_answers", "incorrect_answers")


def serialize_session(study_session: StudySession):
    return {
        "id": study_session.id,
        "user_id": study_session.user_id,
        "subject_id": study_session.subject_id,
        "duration": study_session.duration,
        "cards_studied": study_session.cards_studied,
        "correct_answers": study_session.correct_answers,
        "incorrect_answers": study_session.incorrect_answers,
        "created_at": isoformat(study_session.created_at),
    }


def _read_counts(data):
    """Non-negative integer counts from the request body. Returns (counts, error)."""
    counts = {}
    for key in COUNT_FIELDS:
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return None, f"{key} must be an integer"
        if not 0 <= value <= MAX_INT:
            return None, f"{key} must be between 0 and {MAX_INT}"
        counts[key] = value
    return counts, None


def _read_card_ids(data):
    card_ids = data.get("card_ids")
    if card_ids is None:
        return None, "card_ids is required when sessions reschedule only studied cards"
    if not isinstance(card_ids, list) or not all(is_id(c) for c in card_ids):
        return None, "card_ids must be a list of integers"
    return card_ids, None


@study_sessions_bp.get("")
@login_required
def list_sessions():
    stmt = select(StudySession)
    if not current_user.is_admin:
        stmt = stmt.where(StudySession.user_id == current_user.id)
    subject_id, error = query_int("subject_id")
    if error:
        return jsonify({"error": error}), 400
    if subject_id is not None:
        stmt = stmt.where(StudySession.subject_id == subject_id)
    sessions = db.session.scalars(stmt.order_by(StudySession.created_at.desc(), StudySession.id.desc()))
    return jsonify({"items": [serialize_session(s) for s in sessions]})


@study_sessions_bp.post("")
@login_required
def create_session():
    """
    Record a finished study session and reschedule the subject's due cards.

    Body: { subject_id, duration, cards_studied, correct_answers, incorrect_answers }
    plus card_ids when SESSION_SCHEDULING_SCOPE is "studied".
    A session with no graded answers is stored but leaves every card untouched.
    """
    data = json_body()
    if data is None:
        return jsonify({"error": "Request body must be a JSON object"}), 400
    subject = get_owned_subject(data.get("subject_id"))
    if not subject:
        return jsonify({"error": "Subject not found"}), 404
    counts, error = _read_counts(data)
    if error:
        return jsonify({"error": error}), 400

    card_ids = None
    if current_app.config["SESSION_SCHEDULING_SCOPE"] == "studied":
        card_ids, error = _read_card_ids(data)
        if error:
            return jsonify({"error": error}), 400

    now = clock_now()
    outcome = ReviewOutcomeBatch(counts["correct_answers"], counts["incorrect_answers"])
    directive = compute_session_directive(outcome, now)

    study_session = StudySession(user_id=current_user.id, subject_id=subject.id, **counts)
    db.session.add(study_session)

    rescheduled = 0
    if directive is not None:
        rescheduled = card_store().apply_directive_to_due_cards(subject.id, now, directive, card_ids=card_ids)
    db.session.commit()

    if directive is None:
        logger.info("Study session %s for subject %s had no graded answers; nothing rescheduled",
                    study_session.id, subject.id)
    else:
        logger.info("Study session %s for subject %s: performance %.2f, %s cards due again in %s days",
                    study_session.id, subject.id, outcome.performance, rescheduled, directive.interval_days)

    return jsonify({
        "study_session": serialize_session(study_session),
        "cards_rescheduled": rescheduled,
        "next_review_date": isoformat(directive.next_review_date) if directive else None,
    }), 201


@study_sessions_bp.get("/statistics")
@login_required
def statistics():
    """Totals and per-subject breakdown of the user's sessions; ?subject_id= narrows both."""
    subject_id, error = query_int("subject_id")
    if error:
        return jsonify({"error": error}), 400
    owned = StudySession.user_id == current_user.id
    if subject_id is not None:
        owned = and_(owned, StudySession.subject_id == subject_id)
    answered = StudySession.correct_answers + StudySession.incorrect_answers
    # sessions without answers have no score and are left out of the average
    score = case((answered > 0, StudySession.correct_answers * 1.0 / answered), else_=None)

    totals_stmt = select(
        func.count(StudySession.id),
        func.coalesce(func.sum(StudySession.duration), 0),
        func.coalesce(func.sum(StudySession.cards_studied), 0),
        func.coalesce(func.sum(StudySession.correct_answers), 0),
        func.coalesce(func.sum(StudySession.incorrect_answers), 0),
        func.avg(score),
    ).where(owned)
    sessions, duration, studied, correct, incorrect, average = db.session.execute(totals_stmt).one()

    per_subject = db.session.execute(
        select(
            Subject.id,
            Subject.name,
            func.count(StudySession.id),
            func.sum(StudySession.cards_studied),
            func.sum(StudySession.correct_answers),
            func.sum(StudySession.incorrect_answers),
        )
        .select_from(StudySession)
        .join(Subject, Subject.id == StudySession.subject_id)
        .where(owned)
        .group_by(Subject.id, Subject.name)
        .order_by(Subject.name)
    ).all()

    subjects = []
    for sid, name, count, s_studied, s_correct, s_incorrect in per_subject:
        s_total = s_correct + s_incorrect
        subjects.append({
            "id": sid,
            "name": name,
            "sessions": count,
            "cards_studied": s_studied,
            "correct_answers": s_correct,
            "incorrect_answers": s_incorrect,
            "success_rate": (s_correct / s_total * 100) if s_total else 0,
        })

    return jsonify({"statistics": {
        "total_sessions": sessions,
        "total_duration": duration,
        "total_cards_studied": studied,
        "total_correct_answers": correct,
        "total_incorrect_answers": incorrect,
        "average_score": average or 0,
        "subjects": subjects,
    }})
