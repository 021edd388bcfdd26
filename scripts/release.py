"""
Release phase: migrate the schema, then seed the two static accounts.

Refuses to run without DATABASE_URL, and refuses SQLite when ENV is production.

Usage:
  python scripts/release.py [--skip-seed]
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scripts import init_db  # noqa: E402


def alembic_config(db_url: str) -> Config:
    """Alembic config pinned to this checkout's migrations and the given database."""
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def _release_database_url(database_url: str | None) -> str:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("Missing required environment variable DATABASE_URL.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and db_url.startswith("sqlite"):
        raise RuntimeError("Refusing to release against sqlite in production. Set DATABASE_URL to Postgres.")
    return db_url


def run_release(*, database_url: str | None = None, seed: bool = True) -> None:
    db_url = _release_database_url(database_url)

    print("=== Roster release: alembic upgrade head ===", flush=True)
    command.upgrade(alembic_config(db_url), "head")

    if seed:
        print("=== Roster release: seeding accounts ===", flush=True)
        init_db.seed_only(database_url=db_url)
    print("=== Roster release done ===", flush=True)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--skip-seed", action="store_true", help="Only run migrations")
    args = parser.parse_args()
    run_release(seed=not args.skip_seed)


if __name__ == "__main__":
    main()
