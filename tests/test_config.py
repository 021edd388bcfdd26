"""Tests for settings loading, production guardrails and schema health."""
import pytest

from app.roster import create_app
from app.roster.config import load_config, load_settings


def test_defaults(monkeypatch):
    for k in ("SECRET_KEY", "ENV", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.setenv(k, "")
    s = load_settings()
    assert s.secret_key == "change-me"
    assert s.env == "development"
    assert s.database_url == "sqlite:///roster.db"
    assert s.log_level == "INFO"


def test_cookie_secure_only_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "development")
    assert load_config()["SESSION_COOKIE_SECURE"] is False
    monkeypatch.setenv("ENV", "production")
    assert load_config()["SESSION_COOKIE_SECURE"] is True


def test_log_level_is_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    assert load_settings().log_level == "DEBUG"


@pytest.mark.parametrize(
    "database_url,secret_key,message",
    [
        ("sqlite:///prod.db", "strong-secret", "must be Postgres"),
        ("postgresql://u:p@db/roster", "change-me", "SECRET_KEY"),
    ],
)
def test_production_guardrails(monkeypatch, database_url, secret_key, message):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("SECRET_KEY", secret_key)
    with pytest.raises(RuntimeError, match=message):
        create_app()


def test_missing_schema_renders_out_of_date_page(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'empty.db'}")
    monkeypatch.setenv("ENV", "test")
    app = create_app()
    client = app.test_client()

    r = client.get("/students")
    assert r.status_code == 500
    assert b"alembic upgrade head" in r.data
    assert b"students (table)" in r.data

    # Health probes and the login page stay up
    assert client.get("/healthz").status_code == 200
    assert client.get("/login").status_code == 200
