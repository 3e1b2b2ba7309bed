"""Tests for account administration (/api/users)."""
import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from app.fellowship import create_app
from app.fellowship.db import session_scope
from app.fellowship.models import Base, User
from app.fellowship.modules.users.service import seed_admin


def _seed_accounts(s):
    """One account per role, all with password 'pw'."""
    users = [
        User(username="sys", password_hash=generate_password_hash("pw"), role="system_admin", permissions=[]),
        User(username="boss", password_hash=generate_password_hash("pw"), role="admin", permissions=[]),
        User(username="joe", password_hash=generate_password_hash("pw"), role="member", permissions=[]),
    ]
    s.add_all(users)
    return users


@pytest.fixture()
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        _seed_accounts(s)

    return app.test_client()


def _login(client, username):
    r = client.post("/api/login", json={"username": username, "password": "pw"})
    assert r.status_code == 200
    return r.json


def _user_by_name(client, username):
    with session_scope(client.application) as s:
        return s.query(User).filter(User.username == username).one()


# ---------- List ----------
def test_users_list_anonymous_forbidden(client):
    r = client.get("/api/users")
    assert r.status_code == 403


def test_users_list_member_forbidden(client):
    _login(client, "joe")
    r = client.get("/api/users")
    assert r.status_code == 403
    assert r.json["message"] == "Forbidden"


def test_users_list_admin_ok(client):
    _login(client, "boss")
    r = client.get("/api/users")
    assert r.status_code == 200
    assert [u["username"] for u in r.json] == ["sys", "boss", "joe"]
    assert all("password_hash" not in u for u in r.json)


# ---------- Create ----------
def test_users_create_member_forbidden(client):
    _login(client, "joe")
    r = client.post("/api/users", json={"username": "new", "password": "secret"})
    assert r.status_code == 403
    with session_scope(client.application) as s:
        assert s.query(User).filter(User.username == "new").one_or_none() is None


def test_users_create_by_admin(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"username": "  newbie ", "password": "secret", "role": "admin"})
    assert r.status_code == 201
    assert r.json["username"] == "newbie"
    assert r.json["role"] == "admin"
    assert r.json["permissions"] == []
    assert r.json["id"] and r.json["createdAt"]

    stored = _user_by_name(client, "newbie")
    assert stored.password_hash != "secret"
    assert check_password_hash(stored.password_hash, "secret")


def test_users_create_defaults_to_member_role(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"username": "plain", "password": "secret"})
    assert r.status_code == 201
    assert r.json["role"] == "member"


def test_users_create_validation(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"password": "secret"})
    assert r.status_code == 400
    assert r.json["message"] == "Username is required."

    r = client.post("/api/users", json={"username": "x", "password": "secret", "role": "pope"})
    assert r.status_code == 400
    assert r.json["field"] == "role"

    r = client.post("/api/users", json={"username": "x", "password": "secret", "permissions": ["fly"]})
    assert r.status_code == 400
    assert r.json["message"] == "Unknown permissions: fly"


def test_users_create_duplicate_username(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"username": "joe", "password": "secret"})
    assert r.status_code == 400
    assert r.json["message"] == "Username already exists."


def test_users_create_system_admin_requires_system_admin(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"username": "climber", "password": "secret", "role": "system_admin"})
    assert r.status_code == 403

    client.post("/api/logout")
    _login(client, "sys")
    r = client.post("/api/users", json={"username": "climber", "password": "secret", "role": "system_admin"})
    assert r.status_code == 201
    assert r.json["role"] == "system_admin"


# ---------- Permissions ----------
def test_permissions_update_by_admin_forbidden(client):
    target = _user_by_name(client, "joe")
    _login(client, "boss")
    r = client.patch(f"/api/users/{target.id}/permissions", json={"permissions": ["manage_members"]})
    assert r.status_code == 403
    assert _user_by_name(client, "joe").permissions == []


def test_permissions_update_anonymous_forbidden(client):
    target = _user_by_name(client, "joe")
    r = client.patch(f"/api/users/{target.id}/permissions", json={"permissions": ["manage_members"]})
    assert r.status_code == 403


def test_permissions_update_full_replace(client):
    target = _user_by_name(client, "joe")
    _login(client, "sys")

    r = client.patch(
        f"/api/users/{target.id}/permissions",
        json={"permissions": ["create_announcement", "manage_members", "create_announcement"]},
    )
    assert r.status_code == 200
    assert r.json["permissions"] == ["create_announcement", "manage_members"]

    r = client.patch(f"/api/users/{target.id}/permissions", json={"permissions": ["delete_announcement"]})
    assert r.status_code == 200
    assert r.json["permissions"] == ["delete_announcement"]
    assert _user_by_name(client, "joe").permissions == ["delete_announcement"]


def test_permissions_update_rejects_unknown_flag(client):
    target = _user_by_name(client, "joe")
    _login(client, "sys")
    r = client.patch(f"/api/users/{target.id}/permissions", json={"permissions": ["root"]})
    assert r.status_code == 400
    assert _user_by_name(client, "joe").permissions == []


def test_permissions_update_missing_user(client):
    _login(client, "sys")
    r = client.patch("/api/users/999/permissions", json={"permissions": []})
    assert r.status_code == 404


# ---------- Seeding ----------
def test_seed_admin_only_when_empty(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'seed.db'}")
    monkeypatch.setenv("ENV", "test")
    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        created = seed_admin(s, "admin", "admin")
        assert created is not None
        assert created.role == "system_admin"
        assert created.permissions == ["create_user", "delete_user", "manage_content"]

    with session_scope(app) as s:
        assert seed_admin(s, "other", "pw") is None
        assert s.query(User).count() == 1


def test_users_create_system_admin_forbidden_before_validation(client):
    _login(client, "boss")
    r = client.post("/api/users", json={"role": "system_admin"})
    assert r.status_code == 403
    with session_scope(client.application) as s:
        assert s.query(User).count() == 3
