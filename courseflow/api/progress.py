"""Learner progress endpoints.

  GET /v1/progress/{course_id}/summary?months=N
      -> completed count, latest completion, resume target
      -> activity calendar bucketed in DISPLAY_TIMEZONE

  POST /v1/progress/{course_id}/lessons/{lesson_id}/complete
      -> same accessibility fold the navigation view uses
      -> 403 when locked or not yet open, 404 when unknown
      -> record completion (a repeat keeps the first timestamp)
      -> 202 Accepted with the next lesson to resume at
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict

from courseflow.api.courses import ResumeOut
from courseflow.api.dependencies import load_course_snapshots, require_user, unavailable
from courseflow.core.config import SETTINGS
from courseflow.models.principal import Principal
from courseflow.models.progress import Completed
from courseflow.repos import providers
from courseflow.services import course_view
from courseflow.services.continuation import LatestCompletion, find_resume_target
from courseflow.services.timestamps import parse_timestamp

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/progress", tags=["progress"])


class _Out(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class LatestOut(_Out):
    lesson_id: str
    lesson_name: str
    completed_at: datetime.datetime
    unit_id: str | None


class CalendarLessonOut(_Out):
    id: str
    name: str


class CalendarDayOut(_Out):
    date: datetime.date
    count: int
    lessons: list[CalendarLessonOut]
    representative_lesson_id: str | None


class ProgressSummaryOut(_Out):
    course_id: str
    completed_count: int
    latest: LatestOut | None
    resume: ResumeOut | None
    window_start: datetime.date
    window_end: datetime.date
    calendar: list[CalendarDayOut]


class CompletionOut(BaseModel):
    course_id: str
    lesson_id: str
    completed_at: str | None
    already_completed: bool
    resume: ResumeOut | None


@router.get("/{course_id}/summary", response_model=ProgressSummaryOut)
def get_progress_summary(
    snapshots: Annotated[course_view.Snapshots, Depends(load_course_snapshots)],
    months: Annotated[int | None, Query(ge=1, le=24)] = None,
) -> ProgressSummaryOut:
    summary = course_view.build_progress_summary(
        snapshots,
        months=months or SETTINGS.calendar_months,
        tz=SETTINGS.tz,
    )
    return ProgressSummaryOut.model_validate(summary)


@router.post(
    "/{course_id}/lessons/{lesson_id}/complete",
    response_model=CompletionOut,
    status_code=status.HTTP_202_ACCEPTED,
)
async def complete_lesson(
    course_id: str,
    lesson_id: str,
    principal: Annotated[Principal, Depends(require_user)],
    snapshots: Annotated[course_view.Snapshots, Depends(load_course_snapshots)],
) -> CompletionOut:
    try:
        lesson = course_view.check_can_complete(snapshots, lesson_id)
    except course_view.LessonNotFoundError:
        raise HTTPException(status_code=404, detail="lesson not found") from None
    except course_view.LessonLockedError as exc:
        logger.info(
            "Completion refused for lesson=%s: %s",
            lesson_id,
            exc.reason,
            extra={
                "user_id": principal.user_id,
                "course_id": course_id,
                "lesson_id": lesson_id,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=f"lesson {exc.reason}"
        ) from None

    existing = snapshots.progress.get(lesson_id)
    already = isinstance(existing, Completed)
    completed_at: str | None
    if isinstance(existing, Completed):
        completed_at = existing.completed_at
    else:
        completed_at = datetime.datetime.now(datetime.UTC).isoformat()
        try:
            await providers.progress_repo.mark_completed(
                principal.user_id, course_id, lesson_id, lesson.name, completed_at
            )
        except Exception as exc:
            logger.exception(
                "Recording completion failed for lesson=%s",
                lesson_id,
                extra={"user_id": principal.user_id, "course_id": course_id},
            )
            raise unavailable(
                course_view.ProviderFetchError("progress", course_id)
            ) from exc
        logger.info(
            "Lesson completed",
            extra={
                "user_id": principal.user_id,
                "course_id": course_id,
                "lesson_id": lesson_id,
            },
        )

    resume = find_resume_target(
        snapshots.outline,
        LatestCompletion(
            lesson_id=lesson_id,
            lesson_name=lesson.name,
            completed_at=parse_timestamp(completed_at)
            or datetime.datetime.now(datetime.UTC),
        ),
    )
    return CompletionOut(
        course_id=course_id,
        lesson_id=lesson_id,
        completed_at=completed_at,
        already_completed=already,
        resume=ResumeOut.model_validate(resume) if resume is not None else None,
    )
