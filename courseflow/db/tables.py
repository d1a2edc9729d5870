"""SQLAlchemy table definitions.

These map to the frozen dataclass models in courseflow/models/.  Repos
convert between rows and models; nothing outside courseflow/repos/
touches a row.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from courseflow.db.engine import Base


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str | None] = mapped_column(String(320), unique=True, nullable=True)
    roles: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=[])


class CourseRow(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unlock_lesson_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    start_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    access_token: Mapped[str | None] = mapped_column(String(255), nullable=True)


class UnitRow(Base):
    __tablename__ = "units"
    __table_args__ = (UniqueConstraint("course_id", "position"),)

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("courses.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    open_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    lesson_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class LessonRow(Base):
    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("unit_id", "position"),)

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    unit_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("units.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)


class LessonProgressRow(Base):
    """One row per (user, course, lesson); rows are upserted, never deleted."""

    __tablename__ = "lesson_progress"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("courses.id"), primary_key=True
    )
    lesson_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Stored verbatim; the engine tolerates malformed values
    completed_at: Mapped[str | None] = mapped_column(String(64), nullable=True)
    lesson_name: Mapped[str] = mapped_column(String(500), nullable=False, default="")
