"""Time gating and study-schedule arithmetic.

A course with a start date runs on a one-lesson-per-day plan.  Unit 0
is the orientation unit: it never gets a scheduled date and its
lessons do not consume plan days, so the first lesson of unit 1 falls
on the start date itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from courseflow.models.course import CourseOutline, LessonRef, Unit
from courseflow.models.principal import Role
from courseflow.services.timestamps import parse_date, parse_timestamp


@dataclass(frozen=True, slots=True)
class ScheduledLesson:
    unit_id: str
    lesson_id: str
    lesson_name: str
    day: int  # 1-based plan day
    scheduled_date: date


def is_time_gated(
    open_date: object, role: Role, *, now: datetime | None = None
) -> bool:
    """True iff a student must still wait for *open_date*.

    Admins are never gated.  A missing or unparseable open date is not a
    gate.
    """
    if role == "admin":
        return False
    opens_at = parse_timestamp(open_date)
    if opens_at is None:
        return False
    return opens_at > (now or datetime.now(UTC))


def unit_start_day_offsets(outline: CourseOutline) -> dict[str, int]:
    """Lessons scheduled before each unit, skipping unit 0's lessons."""
    offsets: dict[str, int] = {}
    running = 0
    for index, unit in enumerate(outline.units):
        offsets[unit.id] = running
        if index > 0:
            running += unit.lesson_count
    return offsets


def scheduled_date_for_lesson(
    start_date: object,
    unit_start_day_offsets: dict[str, int],
    unit_id: str,
    lesson_index: int,
    *,
    orientation_unit_id: str | None = None,
) -> date | None:
    """Calendar date of the lesson at 0-based *lesson_index* in *unit_id*.

    ``orientation_unit_id`` names unit 0; its lessons are unscheduled.
    When omitted, the unit whose offset is listed first is taken as
    unit 0 (offset maps are built in outline order).  A date that would
    fall past ``date.max`` is reported as None.
    """
    start = parse_date(start_date)
    if start is None or lesson_index < 0:
        return None
    if unit_id not in unit_start_day_offsets:
        return None
    if orientation_unit_id is None:
        orientation_unit_id = next(iter(unit_start_day_offsets), None)
    if unit_id == orientation_unit_id:
        return None
    try:
        return start + timedelta(days=unit_start_day_offsets[unit_id] + lesson_index)
    except OverflowError:
        # Past date.max: the lesson cannot be placed on the calendar
        return None


def study_day(start_date: object, today: date | None = None) -> int:
    """Plan day number for *today*; day 1 is the start date.

    Returns 0 when there is no usable start date.  Days before the start
    come out as 0 or negative.
    """
    start = parse_date(start_date)
    if start is None:
        return 0
    today = today or datetime.now(UTC).date()
    return (today - start).days + 1


def course_schedule(outline: CourseOutline) -> list[ScheduledLesson]:
    """Every scheduled lesson of *outline* in plan order."""
    start = parse_date(outline.policy.start_date)
    if start is None or not outline.units:
        return []

    offsets = unit_start_day_offsets(outline)
    orientation_id = outline.units[0].id
    schedule: list[ScheduledLesson] = []
    for unit in outline.units[1:]:
        for index, lesson in enumerate(unit.lessons):
            when = scheduled_date_for_lesson(
                start,
                offsets,
                unit.id,
                index,
                orientation_unit_id=orientation_id,
            )
            if when is None:
                continue
            schedule.append(
                ScheduledLesson(
                    unit_id=unit.id,
                    lesson_id=lesson.id,
                    lesson_name=lesson.name,
                    day=offsets[unit.id] + index + 1,
                    scheduled_date=when,
                )
            )
    return schedule


def lesson_for_study_day(
    outline: CourseOutline, day: int
) -> tuple[Unit, LessonRef] | None:
    """The lesson planned for plan day *day*, if the outline has one."""
    if day < 1:
        return None
    offsets = unit_start_day_offsets(outline)
    for unit in outline.units[1:]:
        index = day - 1 - offsets[unit.id]
        if 0 <= index < unit.lesson_count:
            if index < len(unit.lessons):
                return unit, unit.lessons[index]
            return None
    return None
