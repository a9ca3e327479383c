from flask import current_app, request
from flask_login import current_user

from extensions import db
from models.deck import Deck
from models.subject import Subject
from services.card_store import SqlAlchemyCardStore

# upper bound of a SQLite/Postgres INTEGER column
MAX_INT = 2 ** 31 - 1


def clock_now():
    return current_app.extensions["clock"].now()


def card_store():
    return SqlAlchemyCardStore(db.session)


def is_id(value):
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_INT


def json_body():
    """The JSON object posted with the request, {} when absent, None when not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def get_owned_subject(subject_id):
    if not is_id(subject_id):
        return None
    return Subject.query.filter_by(id=subject_id, user_id=current_user.id).first()


def get_owned_deck(deck_id):
    if not is_id(deck_id):
        return None
    return Deck.query.filter_by(id=deck_id, user_id=current_user.id).first()


def query_int(name, default=None):
    """Read an integer query argument. Returns (value, error); a present but unparsable value is an error."""
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default, None
    try:
        return int(raw), None
    except ValueError:
        return None, f"{name} must be an integer"


def page_args():
    """Read page/limit from the query string. Returns (page, limit, error)."""
    page, error = query_int("page", 1)
    if error or page < 1:
        return None, None, "page must be a positive integer"
    limit, error = query_int("limit", current_app.config["DEFAULT_PAGE_SIZE"])
    if error or not 1 <= limit <= current_app.config["MAX_PAGE_SIZE"]:
        return None, None, f"limit must be between 1 and {current_app.config['MAX_PAGE_SIZE']}"
    return page, limit, None


def paginated(stmt, page, limit, serialize):
    result = db.paginate(stmt, page=page, per_page=limit, error_out=False)
    return {
        "items": [serialize(item) for item in result.items],
        "total": result.total,
        "page": page,
        "total_pages": result.pages,
    }
