from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from app.roster.modules.students.models import Student

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _require_id(student_id: int | None) -> int:
    if student_id is None:
        raise ValueError("Student id must not be None.")
    return student_id


def list_students(s: "Session") -> list[Student]:
    """All students in insertion order."""
    return list(s.scalars(select(Student).order_by(Student.id.asc())))


def get_student(s: "Session", student_id: int | None) -> Student | None:
    return s.get(Student, _require_id(student_id))


def count_students(s: "Session") -> int:
    return s.scalar(select(func.count()).select_from(Student)) or 0


def student_exists(s: "Session", student_id: int | None) -> bool:
    return get_student(s, student_id) is not None


def create_student(s: "Session", payload: Mapping[str, str | None]) -> Student:
    """
    Insert a student from a form payload.

    No validation: empty strings and missing fields are stored as given.
    The caller owns the commit.
    """
    student = Student(name=payload.get("name"), roll=payload.get("roll"))
    s.add(student)
    s.flush()
    logger.info("Student created (id=%s roll=%r)", student.id, student.roll)
    return student


def delete_student(s: "Session", student_id: int | None) -> bool:
    """Delete a student by id. Returns False when there was nothing to delete."""
    student = get_student(s, student_id)
    if student is None:
        logger.info("Student delete skipped; no row with id=%s", student_id)
        return False
    s.delete(student)
    s.flush()
    logger.info("Student deleted (id=%s)", student_id)
    return True
