from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LessonRef:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Unit:
    """A named, ordered group of lessons.

    ``lesson_count`` is what the course record advertises and drives
    schedule arithmetic; ``lessons`` may be empty until the unit is
    expanded through ``CourseRepo.get_unit_lessons``.
    """

    id: str
    name: str
    lessons: tuple[LessonRef, ...] = ()
    open_date: str | None = None  # ISO timestamp; time-gated before this
    lesson_count: int = 0

    @staticmethod
    def new(
        *,
        id: str,
        name: str,
        lessons: tuple[LessonRef, ...] | list[LessonRef] = (),
        open_date: str | None = None,
        lesson_count: int | None = None,
    ) -> Unit:
        lessons = tuple(lessons)
        return Unit(
            id=id,
            name=name,
            lessons=lessons,
            open_date=open_date,
            lesson_count=len(lessons) if lesson_count is None else lesson_count,
        )


@dataclass(frozen=True, slots=True)
class CoursePolicy:
    is_public: bool = False
    unlock_lesson_index: int | None = None  # 1-based, applies to every unit
    start_date: str | None = None  # ISO date anchoring the study schedule
    access_token: str | None = None  # enforced outside the progression engine


@dataclass(frozen=True, slots=True)
class CourseOutline:
    id: str
    name: str
    units: tuple[Unit, ...] = ()
    policy: CoursePolicy = field(default_factory=CoursePolicy)
    description: str = ""

    def unit_by_id(self, unit_id: str) -> Unit | None:
        for unit in self.units:
            if unit.id == unit_id:
                return unit
        return None
