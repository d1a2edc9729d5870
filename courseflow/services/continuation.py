"""Latest-completion and resume-target lookup."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

from courseflow.models.course import CourseOutline
from courseflow.models.progress import Completed, ProgressSnapshot
from courseflow.services.timestamps import parse_timestamp


@dataclass(frozen=True, slots=True)
class LatestCompletion:
    lesson_id: str
    lesson_name: str
    completed_at: datetime
    unit_id: str | None = None


@dataclass(frozen=True, slots=True)
class ResumeTarget:
    unit_id: str
    lesson_id: str
    unit_name: str
    lesson_name: str
    open_date: str | None


def find_latest_completed(progress: ProgressSnapshot) -> LatestCompletion | None:
    """Most recent completion by timestamp.

    Entries whose ``completed_at`` is missing or unparseable take no part
    in the comparison.  Among equal timestamps the first one seen wins.
    """
    latest: LatestCompletion | None = None
    for lesson_id, record in progress.items():
        if not isinstance(record, Completed):
            continue
        completed_at = parse_timestamp(record.completed_at)
        if completed_at is None:
            continue
        if latest is None or completed_at > latest.completed_at:
            latest = LatestCompletion(
                lesson_id=lesson_id,
                lesson_name=record.lesson_name,
                completed_at=completed_at,
            )
    return latest


def locate_lesson(outline: CourseOutline, lesson_id: str) -> tuple[int, int] | None:
    """(unit index, lesson index) of *lesson_id*, both 0-based."""
    for unit_index, unit in enumerate(outline.units):
        for lesson_index, lesson in enumerate(unit.lessons):
            if lesson.id == lesson_id:
                return unit_index, lesson_index
    return None


def find_latest_pointer(
    outline: CourseOutline, progress: ProgressSnapshot
) -> LatestCompletion | None:
    """``find_latest_completed`` with the owning unit filled in.

    A completion whose lesson is no longer in the outline keeps
    ``unit_id=None``.
    """
    latest = find_latest_completed(progress)
    if latest is None:
        return None
    position = locate_lesson(outline, latest.lesson_id)
    if position is None:
        return latest
    return replace(latest, unit_id=outline.units[position[0]].id)


def find_resume_target(
    outline: CourseOutline, latest: LatestCompletion | None
) -> ResumeTarget | None:
    """The lesson after *latest*, possibly the first lesson of the next unit.

    None when nothing has been completed, when the completed lesson is
    not in the outline, or when it was the final lesson of the course.
    """
    if latest is None:
        return None
    position = locate_lesson(outline, latest.lesson_id)
    if position is None:
        return None

    unit_index, lesson_index = position
    unit = outline.units[unit_index]
    if lesson_index + 1 < len(unit.lessons):
        nxt = unit.lessons[lesson_index + 1]
        return ResumeTarget(
            unit_id=unit.id,
            lesson_id=nxt.id,
            unit_name=unit.name,
            lesson_name=nxt.name,
            open_date=unit.open_date,
        )

    if unit_index + 1 < len(outline.units):
        next_unit = outline.units[unit_index + 1]
        if next_unit.lessons:
            first = next_unit.lessons[0]
            return ResumeTarget(
                unit_id=next_unit.id,
                lesson_id=first.id,
                unit_name=next_unit.name,
                lesson_name=first.name,
                open_date=next_unit.open_date,
            )

    return None
