from __future__ import annotations

from typing import Protocol

from courseflow.models.progress import Completed, ProgressRecord


class ProgressRepo(Protocol):
    async def get_progress(
        self, user_id: str, course_id: str
    ) -> dict[str, ProgressRecord]: ...

    async def mark_completed(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        lesson_name: str,
        completed_at: str,
    ) -> None: ...


class InMemoryProgressRepo:
    def __init__(self) -> None:
        # key: (user_id, course_id)
        self._store: dict[tuple[str, str], dict[str, ProgressRecord]] = {}

    async def get_progress(
        self, user_id: str, course_id: str
    ) -> dict[str, ProgressRecord]:
        # Copy so callers get a snapshot, not a live view
        return dict(self._store.get((user_id, course_id), {}))

    async def mark_completed(
        self,
        user_id: str,
        course_id: str,
        lesson_id: str,
        lesson_name: str,
        completed_at: str,
    ) -> None:
        records = self._store.setdefault((user_id, course_id), {})
        records[lesson_id] = Completed(lesson_name=lesson_name, completed_at=completed_at)

    def put(
        self, user_id: str, course_id: str, lesson_id: str, record: ProgressRecord
    ) -> None:
        """Store a record verbatim (used for seeding and imports)."""
        self._store.setdefault((user_id, course_id), {})[lesson_id] = record
