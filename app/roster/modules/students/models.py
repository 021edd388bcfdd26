from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.roster.models import Base


class Student(Base):
    """
    A student row. Compared by value: same (id, name, roll) means equal.
    """

    __tablename__ = "students"

    id: Mapped[int | None] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    roll: Mapped[str | None] = mapped_column(String(255), nullable=True)  # informal identifier, not unique

    def _key(self) -> tuple[int | None, str | None, str | None]:
        return (self.id, self.name, self.roll)

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Student):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return f"Student(id={self.id!r}, name={self.name!r}, roll={self.roll!r})"
