"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courseflow.db.tables import CourseRow, LessonRow, UnitRow
from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol using PostgreSQL via SQLAlchemy.

    Opens a session per call so outline, progress and role fetches can
    run concurrently.
    """

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get_outline(self, course_id: str) -> CourseOutline | None:
        async with self._sessions() as session:
            course = await session.get(CourseRow, course_id)
            if course is None:
                return None

            unit_rows = (
                await session.execute(
                    select(UnitRow)
                    .where(UnitRow.course_id == course_id)
                    .order_by(UnitRow.position)
                )
            ).scalars().all()

            lesson_rows = (
                await session.execute(
                    select(LessonRow)
                    .join(UnitRow, LessonRow.unit_id == UnitRow.id)
                    .where(UnitRow.course_id == course_id)
                    .order_by(LessonRow.unit_id, LessonRow.position)
                )
            ).scalars().all()

        lessons_by_unit: dict[str, list[LessonRef]] = {}
        for row in lesson_rows:
            lessons_by_unit.setdefault(row.unit_id, []).append(_row_to_lesson(row))

        return CourseOutline(
            id=course.id,
            name=course.name,
            description=course.description or "",
            policy=_row_to_policy(course),
            units=tuple(
                Unit(
                    id=row.id,
                    name=row.name,
                    lessons=tuple(lessons_by_unit.get(row.id, ())),
                    open_date=row.open_date,
                    lesson_count=row.lesson_count,
                )
                for row in unit_rows
            ),
        )

    async def get_policy(self, course_id: str) -> CoursePolicy | None:
        async with self._sessions() as session:
            course = await session.get(CourseRow, course_id)
        if course is None:
            return None
        return _row_to_policy(course)

    async def get_unit_lessons(self, unit_id: str) -> list[LessonRef] | None:
        async with self._sessions() as session:
            unit = await session.get(UnitRow, unit_id)
            if unit is None:
                return None
            rows = (
                await session.execute(
                    select(LessonRow)
                    .where(LessonRow.unit_id == unit_id)
                    .order_by(LessonRow.position)
                )
            ).scalars().all()
        return [_row_to_lesson(row) for row in rows]


def _row_to_policy(row: CourseRow) -> CoursePolicy:
    return CoursePolicy(
        is_public=bool(row.is_public),
        unlock_lesson_index=row.unlock_lesson_index,
        start_date=row.start_date,
        access_token=row.access_token,
    )


def _row_to_lesson(row: LessonRow) -> LessonRef:
    return LessonRef(id=row.id, name=row.name)
