"""Lesson accessibility for a learner.

Lessons unlock sequentially: a lesson is open once the lesson before it
is completed.  "Before it" is taken in whole-course order, so the last
lesson of one unit gates the first lesson of the next.  The previous
lesson id is threaded through units as an explicit fold argument.

Rules, first match wins, for the lesson at 1-based position ``i`` in its
unit:

  1. admin                                  -> accessible
  2. course is public                       -> accessible
  3. ``i == policy.unlock_lesson_index``    -> accessible
  4. ``i == 1`` and nothing came before     -> accessible
  5. otherwise: the previous lesson is completed
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit
from courseflow.models.principal import Role
from courseflow.models.progress import ProgressSnapshot, is_completed
from courseflow.services.schedule_gate import is_time_gated


@dataclass(frozen=True, slots=True)
class UnitAccessibility:
    per_lesson: dict[str, bool]
    last_lesson_id: str | None


@dataclass(frozen=True, slots=True)
class CourseAccessibility:
    per_lesson: dict[str, bool] = field(default_factory=dict)
    gated_unit_ids: frozenset[str] = frozenset()
    last_lesson_id: str | None = None

    def is_accessible(self, lesson_id: str) -> bool:
        # Lessons the table never saw are locked
        return self.per_lesson.get(lesson_id, False)

    def is_unit_gated(self, unit_id: str) -> bool:
        return unit_id in self.gated_unit_ids


def resolve_unit_accessibility(
    unit: Unit,
    lessons: Sequence[LessonRef],
    progress: ProgressSnapshot,
    policy: CoursePolicy,
    role: Role,
    carried_previous_lesson_id: str | None,
) -> UnitAccessibility:
    """Classify one unit's lessons, continuing from the carried lesson id.

    Returns the table for this unit and the id to carry into the next
    unit.  An empty unit hands the carried id straight through.
    """
    per_lesson: dict[str, bool] = {}
    previous_id = carried_previous_lesson_id

    for position, lesson in enumerate(lessons, start=1):
        if role == "admin" or policy.is_public:
            accessible = True
        elif (
            policy.unlock_lesson_index is not None
            and position == policy.unlock_lesson_index
        ):
            accessible = True
        elif position == 1 and previous_id is None:
            accessible = True
        else:
            accessible = is_completed(progress, previous_id)

        per_lesson[lesson.id] = accessible
        previous_id = lesson.id

    return UnitAccessibility(per_lesson=per_lesson, last_lesson_id=previous_id)


def resolve_course_accessibility(
    outline: CourseOutline,
    progress: ProgressSnapshot,
    role: Role,
    *,
    unit_lessons: Mapping[str, Sequence[LessonRef]] | None = None,
    now: datetime | None = None,
) -> CourseAccessibility:
    """Fold ``resolve_unit_accessibility`` over the outline in unit order.

    ``unit_lessons`` overrides a unit's lesson list (for units expanded
    lazily through the course provider); units not listed use the
    lessons embedded in the outline.
    """
    per_lesson: dict[str, bool] = {}
    gated: set[str] = set()
    carried: str | None = None

    for unit in outline.units:
        if is_time_gated(unit.open_date, role, now=now):
            gated.add(unit.id)

        lessons = unit.lessons
        if unit_lessons is not None and unit.id in unit_lessons:
            lessons = tuple(unit_lessons[unit.id])

        result = resolve_unit_accessibility(
            unit, lessons, progress, outline.policy, role, carried
        )
        per_lesson.update(result.per_lesson)
        carried = result.last_lesson_id

    return CourseAccessibility(
        per_lesson=per_lesson,
        gated_unit_ids=frozenset(gated),
        last_lesson_id=carried,
    )
