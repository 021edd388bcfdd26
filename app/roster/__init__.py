import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, render_template, request, session
from sqlalchemy import inspect as sa_inspect
from werkzeug.exceptions import HTTPException

from app.roster.config import load_config
from app.roster.constants import REQUIRED_TABLES, is_public_path
from app.roster.db import init_db, teardown_db_session
from app.roster.routes import bp as routes_bp
from app.roster.auth import bp as auth_bp, load_current_user
from app.roster.modules.students.admin import bp as students_bp

logger = logging.getLogger(__name__)


def _check_production_config(app: Flask) -> None:
    env = (app.config.get("ENV") or "").strip().lower()
    if env not in ("prod", "production"):
        return
    db_url = str(app.config.get("DATABASE_URL") or "").strip()
    if not db_url:
        raise RuntimeError("DATABASE_URL is required in production.")
    if db_url.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
    if str(app.config.get("SECRET_KEY") or "") in ("", "change-me"):
        raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    _check_production_config(app)

    from app.roster.rbac import user_has_role
    from app.roster.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_roles() -> dict:
        def has_role(*roles: str) -> bool:
            return user_has_role(getattr(g, "current_user", None), *roles)

        return {"has_role": has_role, "current_user": getattr(g, "current_user", None)}

    @app.before_request
    def _csrf_guard():
        if is_public_path(request.path):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            # Login/logout carry their own credentials.
            if (request.endpoint or "").startswith("auth."):
                return None
            if not validate_csrf(request):
                app.logger.warning("CSRF rejected: %s %s", request.method, request.path)
                return render_template("errors/403.html", message="CSRF token missing or invalid."), 403
        return None

    init_db(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(students_bp)

    # Schema health: checked once, on the first request, so tests and release
    # scripts can create tables after the app is built.
    app.config.setdefault("_schema_health_checked", False)
    app.config.setdefault("_schema_health_missing", [])

    def _run_schema_health_check() -> list[str]:
        engine = app.extensions["sqlalchemy_engine"]
        insp = sa_inspect(engine)
        missing = [f"{t} (table)" for t in REQUIRED_TABLES if not insp.has_table(t)]
        if missing:
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing: %s", ", ".join(missing))
        return missing

    @app.before_request
    def _schema_health_guardrail():
        if is_public_path(request.path):
            return None
        if not app.config["_schema_health_checked"]:
            app.config["_schema_health_missing"] = _run_schema_health_check()
            app.config["_schema_health_checked"] = True
        missing = app.config["_schema_health_missing"]
        if missing and request.endpoint not in ("auth.login_get", "auth.logout"):
            return render_template("errors/schema_out_of_date.html", missing=missing), 500
        return None

    app.before_request(load_current_user)
    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(ValueError)
    def _err_400(e: ValueError):
        app.logger.error("Invalid argument (request_id=%s): %s", getattr(g, "request_id", None), e, exc_info=e)
        return render_template("errors/error.html", error="Invalid request", message=str(e)), 400

    @app.errorhandler(403)
    def _err_403(e):
        missing = getattr(g, "missing_role", None)
        if missing:
            app.logger.warning(
                "Forbidden: missing_role=%s path=%s request_id=%s",
                missing,
                request.path,
                getattr(g, "request_id", None),
            )
        return render_template("errors/403.html", missing_role=missing), 403

    @app.errorhandler(404)
    def _err_404(e):
        return render_template("errors/404.html"), 404

    @app.errorhandler(Exception)
    def _err_500(e: Exception):
        # Other HTTP errors (405, 413, ...) keep their own status and body.
        if isinstance(e, HTTPException):
            return e
        app.logger.exception("Unhandled exception (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/error.html", error="An unexpected error occurred", message=str(e)), 500

    logger.info("create_app() complete; app ready to serve")

    return app
