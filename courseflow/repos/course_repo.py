from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef


class CourseRepo(Protocol):
    async def get_outline(self, course_id: str) -> CourseOutline | None: ...
    async def get_policy(self, course_id: str) -> CoursePolicy | None: ...
    async def get_unit_lessons(self, unit_id: str) -> list[LessonRef] | None: ...


class InMemoryCourseRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, CourseOutline] = {}

    async def get_outline(self, course_id: str) -> CourseOutline | None:
        return self._by_id.get(course_id)

    async def get_policy(self, course_id: str) -> CoursePolicy | None:
        outline = self._by_id.get(course_id)
        return outline.policy if outline is not None else None

    async def get_unit_lessons(self, unit_id: str) -> list[LessonRef] | None:
        for outline in self._by_id.values():
            unit = outline.unit_by_id(unit_id)
            if unit is not None:
                return list(unit.lessons)
        return None

    def add(self, outline: CourseOutline) -> None:
        if outline.id in self._by_id:
            raise ValueError("course already exists")
        self._by_id[outline.id] = outline

    def set_policy(self, course_id: str, policy: CoursePolicy) -> None:
        outline = self._by_id.get(course_id)
        if outline is None:
            raise KeyError("course not found")
        self._by_id[course_id] = replace(outline, policy=policy)
