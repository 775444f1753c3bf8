"""Tests for the read-only HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from forum.main import app
from forum.store.dependencies import get_store

from rows import question_row


@pytest.fixture()
def client(store):
    # No `with`: the lifespan (pool + schema) is not started.
    app.dependency_overrides[get_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_recent_questions(client, fake_db):
    fake_db.fetch_all.return_value = [question_row(id=i) for i in (3, 2, 1)]

    response = client.get("/questions/recent", params={"count": 2})

    assert response.status_code == 200
    assert [q["id"] for q in response.json()] == [3, 2]


def test_recent_questions_rejects_negative_count(client, fake_db):
    response = client.get("/questions/recent", params={"count": -1})

    assert response.status_code == 422
    fake_db.fetch_all.assert_not_awaited()


def test_search_returns_questions_and_their_tags(client, fake_db):
    fake_db.fetch_all.side_effect = [
        [question_row(id=1), question_row(id=2)],
        [{"tag_name": "js"}],
        [{"tag_name": "js"}, {"tag_name": "css"}],
    ]

    response = client.get("/questions/search", params={"q": "#js"})

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "#js"
    assert [q["id"] for q in body["questions"]] == [1, 2]
    assert body["tags"] == ["js", "css"]


def test_popular_tags(client, fake_db):
    fake_db.fetch_all.return_value = [{"tag_name": "python", "usage_count": 2}]

    response = client.get("/tags/popular", params={"q": "py"})

    assert response.json() == {"query": "py", "tags": ["python"]}
