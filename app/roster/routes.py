from flask import Blueprint, redirect, url_for

bp = Blueprint("routes", __name__)


@bp.get("/")
def index():
    return redirect(url_for("students.students_list"))


@bp.get("/health")
def health():
    return {"ok": True}


@bp.get("/healthz")
def healthz():
    """Liveness probe for gunicorn/container checks; never touches the database."""
    return "ok", 200
