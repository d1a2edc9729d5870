"""PostgreSQL implementation of ProgressRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courseflow.db.tables import LessonProgressRow
from courseflow.models.progress import ProgressRecord, record_from_fields


class PgProgressRepo:
    """Satisfies the ProgressRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get_progress(
        self, user_id: str, course_id: str
    ) -> dict[str, ProgressRecord]:
        stmt = select(LessonProgressRow).where(
            LessonProgressRow.user_id == user_id,
            LessonProgressRow.course_id == course_id,
        )
        async with self._sessions() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return {row.lesson_id: _row_to_record(row) for row in rows}

    async def mark_completed(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        lesson_name: str,
        completed_at: str,
    ) -> None:
        stmt = insert(LessonProgressRow).values(
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            completed=True,
            completed_at=completed_at,
            lesson_name=lesson_name,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "course_id", "lesson_id"],
            set_={
                "completed": True,
                "completed_at": stmt.excluded.completed_at,
                "lesson_name": stmt.excluded.lesson_name,
            },
        )
        async with self._sessions.begin() as session:
            await session.execute(stmt)


def _row_to_record(row: LessonProgressRow) -> ProgressRecord:
    return record_from_fields(
        completed=bool(row.completed),
        completed_at=row.completed_at,
        lesson_name=row.lesson_name,
    )
