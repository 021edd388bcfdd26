"""
Central constants for the roster application.
"""
from __future__ import annotations

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"

VALID_ROLES = frozenset({ROLE_ADMIN, ROLE_USER})

# Probe endpoints, matched exactly; they skip user loading and CSRF checks
PUBLIC_PATHS = frozenset({"/health", "/healthz"})
STATIC_PATH_PREFIX = "/static/"

# Tables the app cannot serve without
REQUIRED_TABLES = ("users", "user_roles", "students")


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(STATIC_PATH_PREFIX)
