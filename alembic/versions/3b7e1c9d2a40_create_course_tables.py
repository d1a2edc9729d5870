"""create course, progress and user tables

Revision ID: 3b7e1c9d2a40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b7e1c9d2a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("email", sa.String(length=320), nullable=True, unique=True),
        sa.Column(
            "roles",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default="{}",
        ),
    )
    op.create_table(
        "courses",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("unlock_lesson_index", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.String(length=64), nullable=True),
        sa.Column("access_token", sa.String(length=255), nullable=True),
    )
    op.create_table(
        "units",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(length=128),
            sa.ForeignKey("courses.id"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("open_date", sa.String(length=64), nullable=True),
        sa.Column("lesson_count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("course_id", "position"),
    )
    op.create_index("ix_units_course_id", "units", ["course_id"])
    op.create_table(
        "lessons",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column(
            "unit_id", sa.String(length=128), sa.ForeignKey("units.id"), nullable=False
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.UniqueConstraint("unit_id", "position"),
    )
    op.create_index("ix_lessons_unit_id", "lessons", ["unit_id"])
    op.create_table(
        "lesson_progress",
        sa.Column("user_id", sa.String(length=128), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(length=128),
            sa.ForeignKey("courses.id"),
            primary_key=True,
        ),
        sa.Column("lesson_id", sa.String(length=128), primary_key=True),
        sa.Column("completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completed_at", sa.String(length=64), nullable=True),
        sa.Column("lesson_name", sa.String(length=500), nullable=False, server_default=""),
    )


def downgrade() -> None:
    op.drop_table("lesson_progress")
    op.drop_index("ix_lessons_unit_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_units_course_id", table_name="units")
    op.drop_table("units")
    op.drop_table("courses")
    op.drop_table("users")
