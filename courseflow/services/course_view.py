"""Fetch snapshots and assemble the navigation, schedule and summary views.

This is the caller of the progression engine.  It owns everything the
pure functions do not: talking to providers, deciding the learner role,
logging data problems, and turning provider failures into one error
type the API can map to a status code.

Outline, progress and role are fetched concurrently.  The engine only
runs once all three have arrived, so every view is computed from
snapshots taken at the same point in the request.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, tzinfo
from typing import TypeVar

from courseflow.core.metrics import MALFORMED_TIMESTAMPS, PROVIDER_FAILURES
from courseflow.models.course import CourseOutline, LessonRef
from courseflow.models.principal import Principal, Role
from courseflow.models.progress import (
    Completed,
    ProgressRecord,
    ProgressSnapshot,
    is_completed,
)
from courseflow.repos.course_repo import CourseRepo
from courseflow.repos.progress_repo import ProgressRepo
from courseflow.repos.user_repo import UserRepo
from courseflow.services.accessibility import (
    CourseAccessibility,
    resolve_course_accessibility,
)
from courseflow.services.activity_calendar import (
    CalendarDay,
    build_calendar,
    calendar_window,
)
from courseflow.services.completion import completed_count, unit_completion
from courseflow.services.continuation import (
    LatestCompletion,
    ResumeTarget,
    find_latest_pointer,
    find_resume_target,
    locate_lesson,
)
from courseflow.services.schedule_gate import (
    ScheduledLesson,
    course_schedule,
    lesson_for_study_day,
    scheduled_date_for_lesson,
    study_day,
    unit_start_day_offsets,
)
from courseflow.services.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderFetchError(Exception):
    """A snapshot provider raised; the engine was not run."""

    def __init__(self, provider: str, course_id: str) -> None:
        super().__init__(f"{provider} fetch failed for course {course_id}")
        self.provider = provider
        self.course_id = course_id


class CourseNotFoundError(LookupError):
    pass


class LessonNotFoundError(LookupError):
    pass


class UnitNotFoundError(LookupError):
    pass


class LessonLockedError(Exception):
    def __init__(self, lesson_id: str, reason: str) -> None:
        super().__init__(f"lesson {lesson_id} is {reason}")
        self.lesson_id = lesson_id
        self.reason = reason  # "locked" or "not yet open"


@dataclass(frozen=True, slots=True)
class Snapshots:
    outline: CourseOutline
    progress: dict[str, ProgressRecord]
    role: Role


# ---------------------------------------------------------------------------
# View models
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LessonView:
    id: str
    name: str
    position: int  # 1-based within the unit
    accessible: bool
    completed: bool
    scheduled_date: date | None


@dataclass(frozen=True, slots=True)
class UnitView:
    id: str
    name: str
    open_date: str | None
    gated: bool
    completed: int
    total: int
    percent: int
    lessons: list[LessonView]


@dataclass(frozen=True, slots=True)
class NavigationView:
    course_id: str
    course_name: str
    description: str
    role: Role
    is_public: bool
    units: list[UnitView]
    resume: ResumeTarget | None


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    course_id: str
    completed_count: int
    latest: LatestCompletion | None
    resume: ResumeTarget | None
    window_start: date
    window_end: date
    calendar: list[CalendarDay]


@dataclass(frozen=True, slots=True)
class ScheduleView:
    course_id: str
    start_date: str | None
    study_day: int
    today: ScheduledLesson | None
    lessons: list[ScheduledLesson]


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


async def _fetch(provider: str, course_id: str, pending: Awaitable[T]) -> T:
    try:
        return await pending
    except Exception as exc:
        PROVIDER_FAILURES.labels(provider=provider).inc()
        logger.exception(
            "Provider %s failed for course=%s",
            provider,
            course_id,
            extra={"course_id": course_id},
        )
        raise ProviderFetchError(provider, course_id) from exc


async def resolve_role(users: UserRepo, principal: Principal) -> Role:
    """The user profile decides; the token's roles apply when there is none."""
    profile = await users.get_role(principal.user_id)
    if profile is not None:
        return profile.role
    return "admin" if principal.is_platform_admin() else "student"


async def load_snapshots(
    courses: CourseRepo,
    progress_repo: ProgressRepo,
    users: UserRepo,
    principal: Principal,
    course_id: str,
) -> Snapshots:
    results = await asyncio.gather(
        _fetch("outline", course_id, courses.get_outline(course_id)),
        _fetch(
            "progress",
            course_id,
            progress_repo.get_progress(principal.user_id, course_id),
        ),
        _fetch("role", course_id, resolve_role(users, principal)),
        return_exceptions=True,
    )
    # All three settle before the first failure, in argument order, is raised
    for result in results:
        if isinstance(result, BaseException):
            raise result
    outline, progress, role = results
    if outline is None:
        raise CourseNotFoundError(course_id)

    report_malformed_timestamps(progress, user_id=principal.user_id, course_id=course_id)
    return Snapshots(outline=outline, progress=progress, role=role)


async def load_outline(courses: CourseRepo, course_id: str) -> CourseOutline:
    outline = await _fetch("outline", course_id, courses.get_outline(course_id))
    if outline is None:
        raise CourseNotFoundError(course_id)
    return outline


async def load_unit_lessons(
    courses: CourseRepo, course_id: str, unit_id: str
) -> list[LessonRef] | None:
    return await _fetch("unit_lessons", course_id, courses.get_unit_lessons(unit_id))


def report_malformed_timestamps(
    progress: ProgressSnapshot, *, user_id: str, course_id: str
) -> int:
    """Log and count completed entries whose timestamp will be ignored."""
    bad = 0
    for lesson_id, record in progress.items():
        if not isinstance(record, Completed) or record.completed_at is None:
            continue
        if parse_timestamp(record.completed_at) is None:
            bad += 1
            logger.warning(
                "Ignoring malformed completed_at=%r for lesson=%s",
                record.completed_at,
                lesson_id,
                extra={"user_id": user_id, "course_id": course_id, "lesson_id": lesson_id},
            )
    if bad:
        MALFORMED_TIMESTAMPS.inc(bad)
    return bad


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


def _unit_views(
    outline: CourseOutline,
    progress: ProgressSnapshot,
    access: CourseAccessibility,
    unit_lessons: dict[str, list[LessonRef]] | None = None,
) -> list[UnitView]:
    offsets = unit_start_day_offsets(outline)
    orientation_id = outline.units[0].id if outline.units else None
    views: list[UnitView] = []
    for unit in outline.units:
        lessons = unit.lessons
        if unit_lessons is not None and unit.id in unit_lessons:
            lessons = tuple(unit_lessons[unit.id])
        completion = unit_completion(replace(unit, lessons=lessons), progress)
        views.append(
            UnitView(
                id=unit.id,
                name=unit.name,
                open_date=unit.open_date,
                gated=access.is_unit_gated(unit.id),
                completed=completion.completed,
                total=completion.total,
                percent=completion.percent,
                lessons=[
                    LessonView(
                        id=lesson.id,
                        name=lesson.name,
                        position=index + 1,
                        accessible=access.is_accessible(lesson.id),
                        completed=is_completed(progress, lesson.id),
                        scheduled_date=scheduled_date_for_lesson(
                            outline.policy.start_date,
                            offsets,
                            unit.id,
                            index,
                            orientation_unit_id=orientation_id,
                        ),
                    )
                    for index, lesson in enumerate(lessons)
                ],
            )
        )
    return views


def build_navigation(
    snapshots: Snapshots, *, now: datetime | None = None
) -> NavigationView:
    outline, progress = snapshots.outline, snapshots.progress
    access = resolve_course_accessibility(outline, progress, snapshots.role, now=now)
    latest = find_latest_pointer(outline, progress)
    return NavigationView(
        course_id=outline.id,
        course_name=outline.name,
        description=outline.description,
        role=snapshots.role,
        is_public=outline.policy.is_public,
        units=_unit_views(outline, progress, access),
        resume=find_resume_target(outline, latest),
    )


def build_unit_view(
    snapshots: Snapshots,
    unit_id: str,
    lessons: list[LessonRef],
    *,
    now: datetime | None = None,
) -> UnitView:
    """View of one lazily expanded unit.

    Accessibility is still folded over the whole course so the unit's
    first lesson sees the previous unit's last lesson.
    """
    outline = snapshots.outline
    if outline.unit_by_id(unit_id) is None:
        raise UnitNotFoundError(unit_id)
    expanded = {unit_id: lessons}
    access = resolve_course_accessibility(
        outline, snapshots.progress, snapshots.role, unit_lessons=expanded, now=now
    )
    views = _unit_views(outline, snapshots.progress, access, expanded)
    return next(view for view in views if view.id == unit_id)


def build_progress_summary(
    snapshots: Snapshots,
    *,
    today: date | None = None,
    months: int = 6,
    tz: tzinfo = UTC,
) -> ProgressSummary:
    outline, progress = snapshots.outline, snapshots.progress
    today = today or datetime.now(tz).date()
    window_start, window_end = calendar_window(today, months)
    latest = find_latest_pointer(outline, progress)
    return ProgressSummary(
        course_id=outline.id,
        completed_count=completed_count(progress),
        latest=latest,
        resume=find_resume_target(outline, latest),
        window_start=window_start,
        window_end=window_end,
        calendar=build_calendar(progress, window_start, window_end, tz=tz),
    )


def build_schedule(outline: CourseOutline, *, today: date | None = None) -> ScheduleView:
    day = study_day(outline.policy.start_date, today)
    lessons = course_schedule(outline)
    todays: ScheduledLesson | None = None
    found = lesson_for_study_day(outline, day)
    if found is not None:
        _, lesson = found
        todays = next((s for s in lessons if s.lesson_id == lesson.id), None)
    return ScheduleView(
        course_id=outline.id,
        start_date=outline.policy.start_date,
        study_day=day,
        today=todays,
        lessons=lessons,
    )


def check_can_complete(
    snapshots: Snapshots, lesson_id: str, *, now: datetime | None = None
) -> LessonRef:
    """Return the lesson if the learner may complete it, else raise."""
    outline = snapshots.outline
    position = locate_lesson(outline, lesson_id)
    if position is None:
        raise LessonNotFoundError(lesson_id)

    unit = outline.units[position[0]]
    access = resolve_course_accessibility(
        outline, snapshots.progress, snapshots.role, now=now
    )
    if access.is_unit_gated(unit.id):
        raise LessonLockedError(lesson_id, "not yet open")
    if not access.is_accessible(lesson_id):
        raise LessonLockedError(lesson_id, "locked")
    return unit.lessons[position[1]]
