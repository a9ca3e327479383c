"""HTTP tests for deck endpoints."""

from conftest import add_card


def _deck(client, subject_id, name="Cells", **extra):
    return client.post("/decks", json={"subject_id": subject_id, "name": name, **extra})


def test_create_and_list(app, auth_client, subject_id):
    resp = _deck(auth_client, subject_id, description="Organelles")
    assert resp.status_code == 201
    deck = resp.get_json()
    assert deck["subject_id"] == subject_id
    assert deck["flashcard_count"] == 0

    genes = _deck(auth_client, subject_id, "Genes").get_json()["id"]
    add_card(app, subject_id, deck_id=genes)
    add_card(app, subject_id, deck_id=genes)

    items = auth_client.get(f"/decks/subject/{subject_id}").get_json()["items"]
    assert {d["name"]: d["flashcard_count"] for d in items} == {"Cells": 0, "Genes": 2}
    assert auth_client.get("/decks/subject/999").status_code == 404


def test_create_validation(auth_client, subject_id):
    assert _deck(auth_client, subject_id, "  ").status_code == 400
    assert _deck(auth_client, subject_id, "x" * 101).status_code == 400
    assert _deck(auth_client, 999).status_code == 404
    assert _deck(auth_client, [subject_id]).status_code == 404
    assert auth_client.post("/decks", json=["Cells"]).status_code == 400

    assert _deck(auth_client, subject_id).status_code == 201
    assert _deck(auth_client, subject_id).status_code == 400
    other = auth_client.post("/subjects", json={"name": "History"}).get_json()["id"]
    assert _deck(auth_client, other).status_code == 201


def test_get_with_flashcards(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    card_id = add_card(app, subject_id, deck_id=deck_id)
    add_card(app, subject_id)

    body = auth_client.get(f"/decks/{deck_id}").get_json()
    assert body["flashcard_count"] == 1
    assert [c["id"] for c in body["flashcards"]] == [card_id]


def test_update(auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    _deck(auth_client, subject_id, "Genes")

    resp = auth_client.put(f"/decks/{deck_id}", json={"name": "Membranes"})
    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Membranes"
    assert auth_client.put(f"/decks/{deck_id}", json={"name": "Genes"}).status_code == 400
    assert auth_client.put(f"/decks/{deck_id}", json={"description": "y" * 501}).status_code == 400
    assert auth_client.put("/decks/999", json={"name": "X"}).status_code == 404


def test_delete_keeps_cards(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    card_id = add_card(app, subject_id, deck_id=deck_id)

    assert auth_client.delete(f"/decks/{deck_id}").status_code == 200
    assert auth_client.get(f"/decks/{deck_id}").status_code == 404
    card = auth_client.get(f"/flashcards/{card_id}").get_json()
    assert card["deck_id"] is None
    assert card["subject_id"] == subject_id


def test_move_flashcards(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    cards = [add_card(app, subject_id) for _ in range(2)]

    resp = auth_client.post(f"/decks/{deck_id}/move-flashcards", json={"flashcard_ids": cards})
    assert resp.status_code == 200
    assert resp.get_json()["moved"] == 2
    assert resp.get_json()["deck"]["flashcard_count"] == 2
    assert auth_client.get(f"/flashcards/{cards[0]}").get_json()["deck_id"] == deck_id


def test_move_flashcards_all_or_nothing(app, auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    other = auth_client.post("/subjects", json={"name": "History"}).get_json()["id"]
    mine = add_card(app, subject_id)
    elsewhere = add_card(app, other)
    foreign = add_card(app, subject_id, user_id=2)

    url = f"/decks/{deck_id}/move-flashcards"
    assert auth_client.post(url, json={"flashcard_ids": [mine, elsewhere]}).status_code == 400
    assert auth_client.post(url, json={"flashcard_ids": [mine, foreign]}).status_code == 404
    assert auth_client.post(url, json={"flashcard_ids": []}).status_code == 400
    assert auth_client.post(url, json={"flashcard_ids": ["1"]}).status_code == 400
    assert auth_client.post(url, json=[mine]).status_code == 400
    assert auth_client.get(f"/flashcards/{mine}").get_json()["deck_id"] is None


def test_decks_are_private(auth_client, subject_id):
    deck_id = _deck(auth_client, subject_id).get_json()["id"]
    auth_client.post("/auth/logout")
    auth_client.post("/auth/register", json={"email": "other@example.com", "password": "longenough"})
    assert auth_client.get(f"/decks/{deck_id}").status_code == 404
    assert auth_client.delete(f"/decks/{deck_id}").status_code == 404
