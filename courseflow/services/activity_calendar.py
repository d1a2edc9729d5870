"""Per-day completion buckets for the activity heat-map.

Each completed lesson is placed on the local calendar day of its
``completed_at``.  A day's lessons are kept in the order they were
processed, and the last one appended is the day's representative
lesson (the drill-through target when the day is clicked).  Progress
snapshots carry no ordering guarantee, so the representative is not
necessarily the latest completion of that day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import UTC, date, tzinfo

from courseflow.models.progress import Completed, ProgressSnapshot
from courseflow.services.timestamps import parse_timestamp


@dataclass(frozen=True, slots=True)
class CalendarLesson:
    id: str
    name: str


@dataclass(slots=True)
class CalendarDay:
    date: date
    count: int = 0
    lessons: list[CalendarLesson] = field(default_factory=list)

    @property
    def representative_lesson_id(self) -> str | None:
        return self.lessons[-1].id if self.lessons else None


def build_calendar(
    progress: ProgressSnapshot,
    window_start: date | None = None,
    window_end: date | None = None,
    *,
    tz: tzinfo = UTC,
) -> list[CalendarDay]:
    """Bucket completions by local day, sorted by date.

    Days outside ``[window_start, window_end]`` are dropped; either bound
    may be None.  Unparseable timestamps, and instants with no local
    date in *tz*, are skipped.
    """
    buckets: dict[date, CalendarDay] = {}
    for lesson_id, record in progress.items():
        if not isinstance(record, Completed):
            continue
        completed_at = parse_timestamp(record.completed_at)
        if completed_at is None:
            continue

        try:
            day = completed_at.astimezone(tz).date()
        except (OverflowError, ValueError):
            continue
        if window_start is not None and day < window_start:
            continue
        if window_end is not None and day > window_end:
            continue

        bucket = buckets.setdefault(day, CalendarDay(date=day))
        bucket.count += 1
        bucket.lessons.append(CalendarLesson(id=lesson_id, name=record.lesson_name))

    return [buckets[day] for day in sorted(buckets)]


def calendar_window(today: date, months: int = 6) -> tuple[date, date]:
    """Heat-map range covering *months* calendar months up to *today*."""
    back = max(months, 1) - 1
    month_index = today.year * 12 + (today.month - 1) - back
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(today.day, last_day)), today
