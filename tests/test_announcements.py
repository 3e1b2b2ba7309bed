"""Tests for announcements and comments."""
from datetime import datetime

import pytest
from werkzeug.security import generate_password_hash

from app.fellowship import create_app
from app.fellowship.db import session_scope
from app.fellowship.models import Base, User
from app.fellowship.modules.announcements.models import Announcement, Comment


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        s.add_all([
            User(username="boss", password_hash=generate_password_hash("pw"), role="admin", permissions=[]),
            User(username="joe", password_hash=generate_password_hash("pw"), role="member", permissions=[]),
        ])

    return app.test_client()


def _login(client, username):
    r = client.post("/api/login", json={"username": username, "password": "pw"})
    assert r.status_code == 200
    return r.json


def _post(client, title, content="Body"):
    r = client.post("/api/announcements", json={"title": title, "content": content})
    assert r.status_code == 201
    return r.json


def _set_created_at(client, model, row_id, when):
    with session_scope(client.application) as s:
        s.get(model, row_id).created_at = when


# ---------- Announcements ----------
def test_announcement_create_requires_auth(client):
    r = client.post("/api/announcements", json={"title": "Hi", "content": "There"})
    assert r.status_code == 401


def test_announcement_author_comes_from_session(client):
    boss = _login(client, "boss")
    client.post("/api/logout")
    joe = _login(client, "joe")

    r = client.post("/api/announcements", json={"title": "Picnic", "content": "Saturday", "authorId": boss["id"]})
    assert r.status_code == 201
    assert r.json["authorId"] == joe["id"]

    with session_scope(client.application) as s:
        assert s.get(Announcement, r.json["id"]).author_id == joe["id"]


def test_announcement_validation(client):
    _login(client, "joe")
    r = client.post("/api/announcements", json={"title": "   ", "content": "x"})
    assert r.status_code == 400
    assert r.json["message"] == "Title is required."


def test_announcements_newest_first_with_author(client):
    _login(client, "joe")
    a1 = _post(client, "one")
    a2 = _post(client, "two")
    a3 = _post(client, "three")
    _set_created_at(client, Announcement, a1["id"], datetime(2024, 1, 1, 9, 0))
    _set_created_at(client, Announcement, a2["id"], datetime(2024, 1, 2, 9, 0))
    _set_created_at(client, Announcement, a3["id"], datetime(2024, 1, 3, 9, 0))
    client.post("/api/logout")

    r = client.get("/api/announcements")
    assert r.status_code == 200
    assert [a["title"] for a in r.json] == ["three", "two", "one"]
    assert r.json[0]["author"]["username"] == "joe"
    assert "password_hash" not in r.json[0]["author"]


def test_announcements_same_timestamp_ordered_by_id(client):
    _login(client, "joe")
    ids = [_post(client, t)["id"] for t in ("a", "b", "c")]
    for i in ids:
        _set_created_at(client, Announcement, i, datetime(2024, 5, 5, 12, 0))

    r = client.get("/api/announcements")
    assert [a["id"] for a in r.json] == sorted(ids)


# ---------- Comments ----------
def test_comment_anonymous_rejected_and_not_stored(client):
    r = client.post("/api/comments", json={"content": "hi", "announcementId": 1, "parentId": None})
    assert r.status_code == 401
    with session_scope(client.application) as s:
        assert s.query(Comment).count() == 0


def test_comment_create_and_list(client):
    joe = _login(client, "joe")
    a = _post(client, "Retreat")

    r = client.post("/api/comments", json={"content": "Count me in", "announcementId": a["id"], "authorId": 999})
    assert r.status_code == 201
    first = r.json
    assert first["authorId"] == joe["id"]
    assert first["parentId"] is None

    r = client.post("/api/comments", json={"content": "Same", "announcementId": a["id"], "parentId": first["id"]})
    assert r.status_code == 201
    reply = r.json
    assert reply["parentId"] == first["id"]

    _set_created_at(client, Comment, first["id"], datetime(2024, 1, 1))
    _set_created_at(client, Comment, reply["id"], datetime(2024, 1, 2))
    client.post("/api/logout")

    r = client.get(f"/api/announcements/{a['id']}/comments")
    assert r.status_code == 200
    assert [c["id"] for c in r.json] == [reply["id"], first["id"]]
    assert r.json[0]["author"]["username"] == "joe"


def test_comment_on_missing_announcement_is_400(client):
    _login(client, "joe")
    r = client.post("/api/comments", json={"content": "hello?", "announcementId": 777})
    assert r.status_code == 400
    with session_scope(client.application) as s:
        assert s.query(Comment).count() == 0


def test_comment_validation(client):
    _login(client, "joe")
    r = client.post("/api/comments", json={"content": "x", "announcementId": "one"})
    assert r.status_code == 400
    assert r.json["message"] == "Announcement id must be an integer."


def test_comments_for_unknown_announcement_is_empty(client):
    r = client.get("/api/announcements/555/comments")
    assert r.status_code == 200
    assert r.json == []


def test_announcement_long_title_accepted(client):
    _login(client, "joe")
    title = "T" * 300
    r = client.post("/api/announcements", json={"title": title, "content": "Long one"})
    assert r.status_code == 201
    assert r.json["title"] == title
    with session_scope(client.application) as s:
        assert s.get(Announcement, r.json["id"]).title == title
