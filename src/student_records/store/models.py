"""SQLAlchemy models for the student record store."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Student(Base):
    """Student model - one enrolled student."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    course: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __init__(
        self,
        first_name: str | None = None,
        last_name: str | None = None,
        age: int | None = None,
        course: str | None = None,
        id: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.first_name = first_name
        self.last_name = last_name
        self.age = age
        self.course = course

    def same_record(self, other: Student) -> bool:
        """Check whether both objects refer to the same persisted row.

        Unsaved students (id is None) are never the same record.
        """
        return self.id is not None and self.id == other.id

    def __repr__(self) -> str:
        return (
            f"<Student(id={self.id!r}, first_name={self.first_name!r}, "
            f"last_name={self.last_name!r}, age={self.age!r}, course={self.course!r})>"
        )
