from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import abort, g, redirect, request, url_for

from app.roster.models import User


def user_has_role(user: User | None, *roles: str) -> bool:
    if not user or not user.enabled:
        return False
    return bool(user.role_names.intersection(roles))


def require_role(*roles: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Guard a view so only enabled users holding one of `roles` reach it."""

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapped(*args: Any, **kwargs: Any):
            user: User | None = getattr(g, "current_user", None)
            # Unauthenticated → redirect to login
            if not user or not user.enabled:
                nxt = request.full_path or request.path
                # Avoid trailing '?' from full_path when there is no query string.
                if nxt.endswith("?"):
                    nxt = nxt[:-1]
                return redirect(url_for("auth.login_get", next=nxt))
            # Authenticated but unauthorized → 403
            if not user_has_role(user, *roles):
                g.missing_role = " or ".join(sorted(roles))
                abort(403)
            return fn(*args, **kwargs)

        return wrapped

    return decorator
