"""
Seed the two static accounts (admin/ADMIN and user/USER).

Idempotent: existing users keep their passwords; missing roles are attached.

Usage:
  python scripts/init_db.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.roster.constants import ROLE_ADMIN, ROLE_USER  # noqa: E402
from app.roster.models import User, UserRole  # noqa: E402
from scripts._db_utils import script_session  # noqa: E402


def _seed_accounts() -> list[tuple[str, str, str]]:
    """(username, password, role) triples from the environment."""
    return [
        (
            (os.environ.get("ADMIN_USERNAME") or "admin").strip(),
            os.environ.get("ADMIN_PASSWORD") or "change-me",
            ROLE_ADMIN,
        ),
        (
            (os.environ.get("USER_USERNAME") or "user").strip(),
            os.environ.get("USER_PASSWORD") or "change-me",
            ROLE_USER,
        ),
    ]


def ensure_user(s: Session, username: str, password: str, role: str) -> User:
    user = s.query(User).filter(User.username == username).one_or_none()
    if not user:
        user = User(username=username, password=generate_password_hash(password), enabled=True)
        s.add(user)
    if role not in user.role_names:
        user.roles.append(UserRole(role=role))
    return user


def seed_only(*, database_url: str | None = None) -> None:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///roster.db").strip()

    with script_session(db_url) as s:
        for username, password, role in _seed_accounts():
            ensure_user(s, username, password, role)

    print("Initialized database (seed_only).")
    for username, _password, role in _seed_accounts():
        print(f"{role} username: {username} (password from environment)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
