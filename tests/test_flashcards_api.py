"""HTTP tests for flashcard endpoints."""

from datetime import datetime, timedelta

from sqlalchemy import select

from conftest import add_card
from extensions import db
from models.flashcard import ReviewLog

NAIVE_NOW = datetime(2024, 1, 1)


def test_create_and_get(auth_client, subject_id):
    resp = auth_client.post("/flashcards", json={
        "subject_id": subject_id, "question": "What is ATP?", "answer": "Energy currency",
        "tags": ["cells", "energy"]})
    assert resp.status_code == 201
    card = resp.get_json()
    assert card["difficulty"] == "medium"
    assert card["next_review"] is None
    assert card["review_count"] == 0
    assert card["due"] is True

    fetched = auth_client.get(f"/flashcards/{card['id']}").get_json()
    assert fetched["tags"] == ["cells", "energy"]


def test_create_validation(auth_client, subject_id):
    assert auth_client.post("/flashcards", json={"subject_id": subject_id, "question": "Q"}).status_code == 400
    assert auth_client.post("/flashcards", json={
        "subject_id": subject_id, "question": "Q", "answer": "A", "difficulty": "brutal"}).status_code == 400
    assert auth_client.post("/flashcards", json={"subject_id": 999, "question": "Q", "answer": "A"}).status_code == 404


def test_update_and_delete(auth_client, subject_id):
    card_id = auth_client.post("/flashcards", json={
        "subject_id": subject_id, "question": "Q", "answer": "A"}).get_json()["id"]

    resp = auth_client.put(f"/flashcards/{card_id}", json={"answer": "B", "difficulty": "hard"})
    assert resp.status_code == 200
    assert resp.get_json()["answer"] == "B"
    assert resp.get_json()["question"] == "Q"
    assert auth_client.put(f"/flashcards/{card_id}", json={"question": ""}).status_code == 400

    assert auth_client.delete(f"/flashcards/{card_id}").status_code == 200
    assert auth_client.get(f"/flashcards/{card_id}").status_code == 404


def test_list_filters_and_pagination(app, auth_client, subject_id):
    for i in range(3):
        add_card(app, subject_id, question=f"Q{i}", difficulty="hard", tags=["exam"])
    add_card(app, subject_id, question="easy one", difficulty="easy")

    page = auth_client.get(f"/flashcards?subject_id={subject_id}&limit=2").get_json()
    assert page["total"] == 4
    assert page["total_pages"] == 2
    assert len(page["items"]) == 2

    assert auth_client.get("/flashcards?difficulty=hard").get_json()["total"] == 3
    assert auth_client.get("/flashcards?tag=exam").get_json()["total"] == 3
    assert auth_client.get("/flashcards?limit=101").status_code == 400
    assert auth_client.get("/flashcards?page=0").status_code == 400
    assert auth_client.get("/flashcards?page=abc").status_code == 400
    assert auth_client.get("/flashcards?limit=ten").status_code == 400
    assert auth_client.get("/flashcards?subject_id=abc").status_code == 400
    assert auth_client.get("/flashcards/due?page=x").status_code == 400


def test_search(app, auth_client, subject_id):
    add_card(app, subject_id, question="Mitochondria function", answer="Respiration")
    add_card(app, subject_id, question="Ribosome", answer="Protein synthesis", tags=["organelles"])
    add_card(app, subject_id, question="100% sure?", answer="no")

    assert auth_client.get("/flashcards/search?q=mitochondria").get_json()["total"] == 1
    assert auth_client.get("/flashcards/search?q=PROTEIN").get_json()["total"] == 1
    assert auth_client.get("/flashcards/search?q=organelle").get_json()["total"] == 1
    assert auth_client.get("/flashcards/search?q=%25").get_json()["total"] == 1
    assert auth_client.get("/flashcards/search").status_code == 400


def test_due_listing_order(app, auth_client, subject_id):
    recent = add_card(app, subject_id, next_review=NAIVE_NOW - timedelta(hours=2))
    new = add_card(app, subject_id)
    oldest = add_card(app, subject_id, next_review=NAIVE_NOW - timedelta(days=5))
    add_card(app, subject_id, next_review=NAIVE_NOW + timedelta(days=1))

    body = auth_client.get("/flashcards/due").get_json()
    assert [c["id"] for c in body["items"]] == [new, oldest, recent]
    assert body["total"] == 3


def test_due_listing_by_subject(app, auth_client, subject_id):
    other = auth_client.post("/subjects", json={"name": "History"}).get_json()["id"]
    add_card(app, subject_id)
    history_card = add_card(app, other)

    body = auth_client.get(f"/flashcards/due?subject_id={other}").get_json()
    assert [c["id"] for c in body["items"]] == [history_card]
    assert auth_client.get("/flashcards/due?subject_id=999").status_code == 404


def test_review_hard(app, auth_client, subject_id):
    card_id = add_card(app, subject_id, review_count=2)

    resp = auth_client.post(f"/flashcards/{card_id}/review", json={"performance": "hard"})
    assert resp.status_code == 200
    card = resp.get_json()["card"]
    assert card["last_reviewed"] == "2024-01-01T00:00:00Z"
    assert card["next_review"] == "2024-01-01T00:10:00Z"
    assert card["review_count"] == 2
    assert card["due"] is False

    with app.app_context():
        log = db.session.scalars(select(ReviewLog)).one()
        assert log.grade == "hard"
        assert log.next_review_after == datetime(2024, 1, 1, 0, 10)


def test_review_returns_next_due_card(app, auth_client, subject_id):
    first = add_card(app, subject_id)
    second = add_card(app, subject_id)

    body = auth_client.post(f"/flashcards/{first}/review", json={"performance": "easy"}).get_json()
    assert body["card"]["next_review"] == "2024-01-04T00:00:00Z"
    assert body["next"]["has_card"] is True
    assert body["next"]["card"]["id"] == second

    body = auth_client.post(f"/flashcards/{second}/review", json={"performance": "good"}).get_json()
    assert body["next"] == {"has_card": False, "card": None}


def test_review_rejects_unknown_grade(app, auth_client, subject_id):
    card_id = add_card(app, subject_id)
    resp = auth_client.post(f"/flashcards/{card_id}/review", json={"performance": "medium"})
    assert resp.status_code == 400
    assert "performance must be one of" in resp.get_json()["error"]
    assert auth_client.post(f"/flashcards/{card_id}/review", json={}).status_code == 400

    card = auth_client.get(f"/flashcards/{card_id}").get_json()
    assert card["next_review"] is None


def test_review_other_users_card(app, auth_client, subject_id):
    card_id = add_card(app, subject_id, user_id=2)
    assert auth_client.post(f"/flashcards/{card_id}/review", json={"performance": "good"}).status_code == 404


def test_malformed_bodies_rejected(app, auth_client, subject_id):
    card_id = add_card(app, subject_id)

    assert auth_client.post("/flashcards", json=[1, 2]).status_code == 400
    assert auth_client.put(f"/flashcards/{card_id}", json=["answer"]).status_code == 400
    assert auth_client.post(f"/flashcards/{card_id}/review", json=["good"]).status_code == 400
    assert auth_client.post("/flashcards", json={
        "subject_id": [subject_id], "question": "Q", "answer": "A"}).status_code == 404
    assert auth_client.post("/flashcards", json={
        "subject_id": subject_id, "question": 42, "answer": "A"}).status_code == 400
    assert auth_client.put(f"/flashcards/{card_id}", json={"subject_id": "1"}).status_code == 404

    assert auth_client.get(f"/flashcards/{card_id}").get_json()["next_review"] is None


def _deck(client, subject_id, name="Cells"):
    resp = client.post("/decks", json={"subject_id": subject_id, "name": name})
    assert resp.status_code == 201
    return resp.get_json()["id"]


def test_create_card_in_deck(auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id)
    other_subject = auth_client.post("/subjects", json={"name": "History"}).get_json()["id"]

    resp = auth_client.post("/flashcards", json={
        "subject_id": subject_id, "deck_id": deck_id, "question": "Q", "answer": "A"})
    assert resp.status_code == 201
    assert resp.get_json()["deck_id"] == deck_id

    assert auth_client.post("/flashcards", json={
        "subject_id": other_subject, "deck_id": deck_id, "question": "Q", "answer": "A"}).status_code == 400
    assert auth_client.post("/flashcards", json={
        "subject_id": subject_id, "deck_id": 999, "question": "Q", "answer": "A"}).status_code == 404


def test_moving_card_to_other_subject_leaves_deck(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id)
    card_id = add_card(app, subject_id, deck_id=deck_id)
    other_subject = auth_client.post("/subjects", json={"name": "History"}).get_json()["id"]

    card = auth_client.put(f"/flashcards/{card_id}", json={"subject_id": other_subject}).get_json()
    assert card["subject_id"] == other_subject
    assert card["deck_id"] is None


def test_due_and_search_filter_by_deck(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id)
    in_deck = add_card(app, subject_id, deck_id=deck_id, question="Krebs cycle")
    add_card(app, subject_id, question="Krebs again")
    add_card(app, subject_id, deck_id=deck_id, next_review=NAIVE_NOW + timedelta(days=1))

    due = auth_client.get(f"/flashcards/due?deck_id={deck_id}").get_json()
    assert [c["id"] for c in due["items"]] == [in_deck]
    assert auth_client.get("/flashcards/search?q=krebs").get_json()["total"] == 2
    found = auth_client.get(f"/flashcards/search?q=krebs&deck_id={deck_id}").get_json()
    assert [c["id"] for c in found["items"]] == [in_deck]
    assert auth_client.get(f"/flashcards?deck_id={deck_id}").get_json()["total"] == 2
    assert auth_client.get("/flashcards/due?deck_id=999").status_code == 404
