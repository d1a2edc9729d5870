from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Completed:
    lesson_name: str
    completed_at: str | None = None  # ISO timestamp as stored; may be malformed


@dataclass(frozen=True, slots=True)
class NotCompleted:
    lesson_name: str = ""


ProgressRecord: TypeAlias = Completed | NotCompleted

# lesson id -> record.  Lesson ids are unique across the whole course.
ProgressSnapshot: TypeAlias = Mapping[str, ProgressRecord]


def is_completed(progress: ProgressSnapshot, lesson_id: str | None) -> bool:
    """An absent entry and a NotCompleted entry mean the same thing."""
    if lesson_id is None:
        return False
    return isinstance(progress.get(lesson_id), Completed)


def record_from_fields(
    *, completed: bool, completed_at: str | None, lesson_name: str | None
) -> ProgressRecord:
    """Build the tagged record from the flat shape providers store."""
    if completed:
        return Completed(lesson_name=lesson_name or "", completed_at=completed_at)
    return NotCompleted(lesson_name=lesson_name or "")
