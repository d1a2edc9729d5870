"""Read-through cache in front of any CourseRepo.

Only whole outlines are cached.  Policy lookups read the cached outline;
unit lesson lists go straight to the wrapped repo since they are fetched
one unit at a time when a unit is opened.

A cache that errors is treated as a miss: the outline is served from
the wrapped repo and the failure is logged.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict

from courseflow.core.metrics import CACHE_OPERATIONS
from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit
from courseflow.repos.course_repo import CourseRepo
from courseflow.services.cache import CacheService

logger = logging.getLogger(__name__)


def _key(course_id: str) -> str:
    return f"outline:{course_id}"


class CachedCourseRepo:
    def __init__(self, inner: CourseRepo, cache: CacheService, ttl_seconds: int) -> None:
        self._inner = inner
        self._cache = cache
        self._ttl = ttl_seconds

    async def get_outline(self, course_id: str) -> CourseOutline | None:
        if self._ttl <= 0:
            return await self._inner.get_outline(course_id)

        try:
            cached = await self._cache.get(_key(course_id))
        except Exception:
            logger.exception("Outline cache read failed for course=%s", course_id)
            cached = None

        if cached is not None:
            CACHE_OPERATIONS.labels(operation="hit").inc()
            return outline_from_json(cached)

        CACHE_OPERATIONS.labels(operation="miss").inc()
        outline = await self._inner.get_outline(course_id)
        if outline is None:
            return None

        try:
            await self._cache.set(_key(course_id), outline_to_json(outline), self._ttl)
        except Exception:
            logger.exception("Outline cache write failed for course=%s", course_id)
        return outline

    async def get_policy(self, course_id: str) -> CoursePolicy | None:
        outline = await self.get_outline(course_id)
        return outline.policy if outline is not None else None

    async def get_unit_lessons(self, unit_id: str) -> list[LessonRef] | None:
        return await self._inner.get_unit_lessons(unit_id)


def outline_to_json(outline: CourseOutline) -> str:
    return json.dumps(asdict(outline))


def outline_from_json(raw: str) -> CourseOutline:
    data = json.loads(raw)
    return CourseOutline(
        id=data["id"],
        name=data["name"],
        description=data.get("description", ""),
        policy=CoursePolicy(**data.get("policy", {})),
        units=tuple(
            Unit(
                id=u["id"],
                name=u["name"],
                lessons=tuple(LessonRef(**lesson) for lesson in u.get("lessons", [])),
                open_date=u.get("open_date"),
                lesson_count=u.get("lesson_count", 0),
            )
            for u in data.get("units", [])
        ),
    )
