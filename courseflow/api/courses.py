"""Course navigation endpoints.

  GET /v1/courses/{course_id}/navigation
      -> outline + progress + role (fetched concurrently)
      -> accessibility fold, unit gates, schedule dates
      -> units with per-lesson accessible/completed flags

  GET /v1/courses/{course_id}/units/{unit_id}/lessons
      -> lazy expansion of one unit, accessibility still folded course-wide

  GET /v1/courses/{course_id}/schedule
      -> study plan: every scheduled lesson, today's plan day and lesson
"""

from __future__ import annotations

import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from courseflow.api.dependencies import load_course_snapshots, require_user, unavailable
from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit
from courseflow.models.principal import Principal
from courseflow.repos import providers
from courseflow.services import course_view

router = APIRouter(prefix="/v1/courses", tags=["courses"])


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LessonOut(_Out):
    id: str
    name: str
    position: int
    accessible: bool
    completed: bool
    scheduled_date: datetime.date | None


class UnitOut(_Out):
    id: str
    name: str
    open_date: str | None
    gated: bool
    completed: int
    total: int
    percent: int
    lessons: list[LessonOut]


class ResumeOut(_Out):
    unit_id: str
    lesson_id: str
    unit_name: str
    lesson_name: str
    open_date: str | None


class NavigationOut(_Out):
    course_id: str
    course_name: str
    description: str
    role: str
    is_public: bool
    units: list[UnitOut]
    resume: ResumeOut | None


class ScheduledLessonOut(_Out):
    unit_id: str
    lesson_id: str
    lesson_name: str
    day: int
    scheduled_date: datetime.date


class ScheduleOut(_Out):
    course_id: str
    start_date: str | None
    study_day: int
    today: ScheduledLessonOut | None
    lessons: list[ScheduledLessonOut]


def seed_sample_course() -> None:
    """Seed a sample course into the in-memory provider for development."""
    if providers.memory_courses._by_id:
        return
    providers.memory_courses.add(
        CourseOutline(
            id="daily-reading",
            name="Daily Reading Plan",
            description="One reading a day, with a short orientation first.",
            policy=CoursePolicy(unlock_lesson_index=None, start_date="2024-01-01"),
            units=(
                Unit.new(
                    id="orientation",
                    name="Orientation",
                    lessons=[LessonRef("welcome", "Welcome")],
                ),
                Unit.new(
                    id="week-1",
                    name="Week 1",
                    lessons=[
                        LessonRef("week-1-day-1", "Day 1"),
                        LessonRef("week-1-day-2", "Day 2"),
                        LessonRef("week-1-day-3", "Day 3"),
                    ],
                ),
                Unit.new(
                    id="week-2",
                    name="Week 2",
                    lessons=[
                        LessonRef("week-2-day-1", "Day 4"),
                        LessonRef("week-2-day-2", "Day 5"),
                    ],
                ),
            ),
        )
    )


@router.get("/{course_id}/navigation", response_model=NavigationOut)
def get_navigation(
    snapshots: Annotated[course_view.Snapshots, Depends(load_course_snapshots)],
) -> NavigationOut:
    return NavigationOut.model_validate(course_view.build_navigation(snapshots))


@router.get("/{course_id}/units/{unit_id}/lessons", response_model=UnitOut)
async def get_unit_lessons(
    course_id: str,
    unit_id: str,
    snapshots: Annotated[course_view.Snapshots, Depends(load_course_snapshots)],
) -> UnitOut:
    if snapshots.outline.unit_by_id(unit_id) is None:
        raise HTTPException(status_code=404, detail="unit not found")

    try:
        lessons = await course_view.load_unit_lessons(
            providers.course_repo, course_id, unit_id
        )
    except course_view.ProviderFetchError as exc:
        raise unavailable(exc) from None
    if lessons is None:
        raise HTTPException(status_code=404, detail="unit not found")

    return UnitOut.model_validate(
        course_view.build_unit_view(snapshots, unit_id, lessons)
    )


@router.get("/{course_id}/schedule", response_model=ScheduleOut)
async def get_schedule(
    course_id: str,
    _principal: Annotated[Principal, Depends(require_user)],
) -> ScheduleOut:
    try:
        outline = await course_view.load_outline(providers.course_repo, course_id)
    except course_view.CourseNotFoundError:
        raise HTTPException(status_code=404, detail="course not found") from None
    except course_view.ProviderFetchError as exc:
        raise unavailable(exc) from None

    return ScheduleOut.model_validate(course_view.build_schedule(outline))
