"""Tests for the release script: alembic migrations plus account seeding."""
import pytest
from alembic import command
from sqlalchemy import create_engine, inspect

from app.roster.models import User
from scripts._db_utils import script_session
from scripts.release import alembic_config, run_release


@pytest.fixture()
def db_url(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path/'release.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("ENV", "test")
    return url


def _inspect(url):
    engine = create_engine(url)
    try:
        insp = inspect(engine)
        return {
            t: (
                {c["name"] for c in insp.get_columns(t)},
                insp.get_pk_constraint(t)["constrained_columns"],
            )
            for t in insp.get_table_names()
        }
    finally:
        engine.dispose()


def test_release_creates_schema(db_url):
    run_release()

    tables = _inspect(db_url)
    assert {"users", "user_roles", "students", "alembic_version"} <= set(tables)
    assert tables["students"] == ({"id", "name", "roll"}, ["id"])
    assert tables["users"] == ({"id", "username", "password", "enabled"}, ["id"])
    assert tables["user_roles"][0] == {"user_id", "role"}
    assert sorted(tables["user_roles"][1]) == ["role", "user_id"]


def test_release_seeds_both_roles(db_url):
    run_release()

    with script_session(db_url) as s:
        roles = {u.username: u.role_names for u in s.query(User).all()}
    assert roles == {"admin": {"ADMIN"}, "user": {"USER"}}


def test_release_twice_is_harmless(db_url):
    run_release()
    run_release()

    with script_session(db_url) as s:
        assert s.query(User).count() == 2


def test_release_without_seed_leaves_users_empty(db_url):
    run_release(seed=False)

    with script_session(db_url) as s:
        assert s.query(User).count() == 0


def test_downgrade_drops_tables(db_url):
    run_release(seed=False)
    command.downgrade(alembic_config(db_url), "base")

    assert set(_inspect(db_url)) <= {"alembic_version"}


def test_release_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        run_release()


def test_release_refuses_sqlite_in_production(tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError, match="sqlite"):
        run_release(database_url=f"sqlite:///{tmp_path/'prod.db'}")
