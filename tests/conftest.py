from contextlib import contextmanager

import pytest
from flask import template_rendered

from app.roster import create_app
from app.roster.auth import reset_login_attempts
from app.roster.constants import ROLE_ADMIN, ROLE_USER
from app.roster.db import session_scope
from app.roster.models import Base
from scripts.init_db import ensure_user

CSRF_TOKEN = "test-csrf-token"
ADMIN_PASSWORD = "admin-pw"
USER_PASSWORD = "user-pw"


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    reset_login_attempts()

    app = create_app()
    app.config["TESTING"] = True

    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        ensure_user(s, "admin", ADMIN_PASSWORD, ROLE_ADMIN)
        ensure_user(s, "user", USER_PASSWORD, ROLE_USER)

    yield app
    engine.dispose()


def login(client, username: str, password: str):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


def set_csrf(client) -> None:
    with client.session_transaction() as sess:
        sess["csrf_token"] = CSRF_TOKEN


@pytest.fixture()
def client(app):
    """Anonymous client that already holds a valid CSRF token."""
    c = app.test_client()
    set_csrf(c)
    return c


@pytest.fixture()
def admin_client(app):
    c = app.test_client()
    assert login(c, "admin", ADMIN_PASSWORD).status_code == 302
    set_csrf(c)
    return c


@pytest.fixture()
def user_client(app):
    c = app.test_client()
    assert login(c, "user", USER_PASSWORD).status_code == 302
    set_csrf(c)
    return c


@pytest.fixture()
def captured_templates(app):
    @contextmanager
    def _capture():
        recorded = []

        def record(sender, template, context, **extra):
            recorded.append((template, context))

        template_rendered.connect(record, app)
        try:
            yield recorded
        finally:
            template_rendered.disconnect(record, app)

    return _capture
