from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from courseflow.main import app
from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit
from courseflow.models.progress import Completed
from courseflow.repos import providers
from courseflow.services import token_service
from courseflow.services.cache import cache_service

# Ensure repo root is on sys.path so `import courseflow` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

COURSE_ID = "algebra"


@pytest.fixture(autouse=True)
def reset_providers() -> None:
    """Clear the in-memory course, progress and user providers."""
    providers.memory_courses._by_id.clear()
    providers.memory_progress._store.clear()
    providers.memory_users._by_id.clear()


@pytest.fixture(autouse=True)
def reset_cache() -> None:
    """Clear the outline cache between tests."""
    if hasattr(cache_service, "_store"):
        cache_service._store.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


@pytest.fixture
def token() -> str:
    """Token with default role (student)."""
    return mint_token()


@pytest.fixture
def admin_token() -> str:
    """Token with admin role."""
    return mint_token(username="test-admin", roles=["admin"])


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Course helpers
# ---------------------------------------------------------------------------


def make_outline(
    *,
    course_id: str = COURSE_ID,
    policy: CoursePolicy | None = None,
    u2_open_date: str | None = None,
) -> CourseOutline:
    """Orientation unit with one lesson, then U1 (l1-l3) and U2 (l4-l5)."""
    return CourseOutline(
        id=course_id,
        name="Algebra I",
        policy=policy or CoursePolicy(start_date="2024-01-01"),
        units=(
            Unit.new(id="u0", name="Orientation", lessons=[LessonRef("intro", "Intro")]),
            Unit.new(
                id="u1",
                name="Unit 1",
                lessons=[
                    LessonRef("l1", "Lesson 1"),
                    LessonRef("l2", "Lesson 2"),
                    LessonRef("l3", "Lesson 3"),
                ],
            ),
            Unit.new(
                id="u2",
                name="Unit 2",
                open_date=u2_open_date,
                lessons=[LessonRef("l4", "Lesson 4"), LessonRef("l5", "Lesson 5")],
            ),
        ),
    )


def add_course(outline: CourseOutline | None = None) -> CourseOutline:
    """Create and persist a course in the in-memory provider."""
    outline = outline or make_outline()
    providers.memory_courses.add(outline)
    return outline


def complete(
    user_id: str,
    lesson_id: str,
    completed_at: str | None = "2024-01-02T10:00:00Z",
    *,
    course_id: str = COURSE_ID,
    lesson_name: str = "",
) -> None:
    providers.memory_progress.put(
        user_id,
        course_id,
        lesson_id,
        Completed(lesson_name=lesson_name or lesson_id, completed_at=completed_at),
    )
