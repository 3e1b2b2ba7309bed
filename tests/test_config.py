import pytest

from app.fellowship import create_app
from app.fellowship.config import load_settings


def test_settings_defaults(monkeypatch):
    for k in ("SECRET_KEY", "ENV", "DATABASE_URL", "ADMIN_USERNAME", "ADMIN_PASSWORD", "SESSION_LIFETIME_HOURS"):
        monkeypatch.delenv(k, raising=False)
    s = load_settings()
    assert s.env == "development"
    assert s.database_url == "sqlite:///fellowship.db"
    assert s.admin_username == "admin"
    assert s.session_lifetime_hours == 8


def test_bad_session_lifetime(monkeypatch):
    monkeypatch.setenv("SESSION_LIFETIME_HOURS", "soon")
    with pytest.raises(RuntimeError):
        load_settings()


def test_production_refuses_sqlite(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "a-real-secret")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///prod.db")
    with pytest.raises(RuntimeError, match="Postgres"):
        create_app()


def test_production_refuses_default_secret(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("SECRET_KEY", "change-me")
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://u:p@localhost/db")
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app()
