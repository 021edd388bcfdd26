from __future__ import annotations

from flask import Blueprint, redirect, render_template, request, url_for

from app.roster.constants import ROLE_ADMIN, ROLE_USER
from app.roster.db import db_session
from app.roster.modules.students.service import create_student, delete_student, list_students
from app.roster.rbac import require_role

bp = Blueprint("students", __name__)


# ---------- List ----------
@bp.get("/students")
@require_role(ROLE_USER, ROLE_ADMIN)
def students_list():
    s = db_session()
    return render_template("students/list.html", students=list_students(s))


# ---------- New ----------
@bp.get("/students/add")
@require_role(ROLE_ADMIN)
def students_add():
    return render_template("students/form.html", student={"name": "", "roll": ""})


@bp.post("/students/store")
@require_role(ROLE_ADMIN)
def students_store():
    s = db_session()
    payload = {
        "name": request.form.get("name"),
        "roll": request.form.get("roll"),
    }
    create_student(s, payload)
    s.commit()
    return redirect(url_for("students.students_list"))


# ---------- Delete ----------
@bp.post("/students/delete/<int:student_id>")
@require_role(ROLE_ADMIN)
def students_delete(student_id: int):
    s = db_session()
    delete_student(s, student_id)
    s.commit()
    return redirect(url_for("students.students_list"))
