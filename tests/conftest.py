"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

from app import create_app
from config import TestConfig
from extensions import db
from models.flashcard import Flashcard
from scheduling import FixedClock

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def app(clock):
    """App on a fresh in-memory database with the clock pinned to NOW."""
    flask_app = create_app(TestConfig, clock=clock)
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """Test client with a registered, logged-in user (id 1)."""
    resp = client.post("/auth/register", json={
        "email": "learner@example.com", "password": "correct horse", "name": "Learner"})
    assert resp.status_code == 201
    return client


@pytest.fixture
def subject_id(auth_client):
    resp = auth_client.post("/subjects", json={"name": "Biology"})
    assert resp.status_code == 201
    return resp.get_json()["id"]


def add_card(app, subject_id, user_id=1, next_review=None, **fields):
    """Insert a flashcard directly, bypassing the API. next_review is naive UTC."""
    fields.setdefault("question", "Q")
    fields.setdefault("answer", "A")
    fields.setdefault("review_count", 0)
    with app.app_context():
        card = Flashcard(user_id=user_id, subject_id=subject_id, next_review=next_review, **fields)
        db.session.add(card)
        db.session.commit()
        return card.id
