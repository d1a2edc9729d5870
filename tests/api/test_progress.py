from __future__ import annotations

import datetime

from fastapi.testclient import TestClient

from courseflow.models.progress import Completed
from courseflow.repos import providers
from tests.conftest import COURSE_ID, add_course, auth, complete, make_outline


def _complete_url(lesson_id: str, course_id: str = COURSE_ID) -> str:
    return f"/v1/progress/{course_id}/lessons/{lesson_id}/complete"


def _stored(user_id: str = "test-user") -> dict:
    return providers.memory_progress._store.get((user_id, COURSE_ID), {})


# ---- 401: unauthenticated ----


def test_complete_rejects_missing_token(client: TestClient) -> None:
    add_course()
    resp = client.post(_complete_url("intro"))
    assert resp.status_code == 401


# ---- POST complete ----


def test_complete_open_lesson(client: TestClient, token: str) -> None:
    add_course()
    resp = client.post(_complete_url("intro"), headers=auth(token))
    assert resp.status_code == 202
    body = resp.json()
    assert body["already_completed"] is False
    assert body["resume"]["lesson_id"] == "l1"
    record = _stored()["intro"]
    assert isinstance(record, Completed)
    assert record.lesson_name == "Intro"
    assert record.completed_at == body["completed_at"]


def test_complete_unlocks_next_lesson(client: TestClient, token: str) -> None:
    add_course()
    client.post(_complete_url("intro"), headers=auth(token))
    resp = client.post(_complete_url("l1"), headers=auth(token))
    assert resp.status_code == 202


def test_complete_locked_lesson(client: TestClient, token: str) -> None:
    add_course()
    resp = client.post(_complete_url("l2"), headers=auth(token))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "lesson locked"
    assert "l2" not in _stored()


def test_complete_in_gated_unit(client: TestClient, token: str) -> None:
    add_course(make_outline(u2_open_date="2999-01-01T00:00:00Z"))
    for lesson_id in ("intro", "l1", "l2", "l3"):
        complete("test-user", lesson_id)
    resp = client.post(_complete_url("l4"), headers=auth(token))
    assert resp.status_code == 403
    assert resp.json()["detail"] == "lesson not yet open"


def test_admin_completes_anything(client: TestClient, admin_token: str) -> None:
    add_course(make_outline(u2_open_date="2999-01-01T00:00:00Z"))
    resp = client.post(_complete_url("l5"), headers=auth(admin_token))
    assert resp.status_code == 202
    assert resp.json()["resume"] is None


def test_complete_unknown_lesson(client: TestClient, token: str) -> None:
    add_course()
    resp = client.post(_complete_url("nope"), headers=auth(token))
    assert resp.status_code == 404


def test_complete_unknown_course(client: TestClient, token: str) -> None:
    resp = client.post(_complete_url("intro", course_id="missing"), headers=auth(token))
    assert resp.status_code == 404


def test_repeat_completion_keeps_first_timestamp(
    client: TestClient, token: str
) -> None:
    add_course()
    complete("test-user", "intro", "2024-01-01T08:00:00Z")
    resp = client.post(_complete_url("intro"), headers=auth(token))
    assert resp.status_code == 202
    body = resp.json()
    assert body["already_completed"] is True
    assert body["completed_at"] == "2024-01-01T08:00:00Z"
    assert _stored()["intro"].completed_at == "2024-01-01T08:00:00Z"


def test_complete_store_failure(client: TestClient, token: str, monkeypatch) -> None:
    add_course()

    async def boom(*args):
        raise ConnectionError("down")

    monkeypatch.setattr(providers.memory_progress, "mark_completed", boom)
    resp = client.post(_complete_url("intro"), headers=auth(token))
    assert resp.status_code == 503
    assert resp.json()["detail"] == "progress unavailable"


# ---- GET summary ----


def test_summary_for_new_student(client: TestClient, token: str) -> None:
    add_course()
    resp = client.get(f"/v1/progress/{COURSE_ID}/summary", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["completed_count"] == 0
    assert body["latest"] is None
    assert body["resume"] is None
    assert body["calendar"] == []


def test_summary_after_completions(client: TestClient, token: str) -> None:
    add_course()
    today = datetime.datetime.now(datetime.UTC)
    earlier = (today - datetime.timedelta(hours=1)).isoformat()
    complete("test-user", "intro", earlier, lesson_name="Intro")
    client.post(_complete_url("l1"), headers=auth(token))

    resp = client.get(f"/v1/progress/{COURSE_ID}/summary", headers=auth(token))
    body = resp.json()
    assert body["completed_count"] == 2
    assert body["latest"]["lesson_id"] == "l1"
    assert body["latest"]["unit_id"] == "u1"
    assert body["resume"]["lesson_id"] == "l2"
    total = sum(day["count"] for day in body["calendar"])
    assert total == 2
    last_day = body["calendar"][-1]
    assert last_day["representative_lesson_id"] == last_day["lessons"][-1]["id"]


def test_summary_months_parameter(client: TestClient, token: str) -> None:
    add_course()
    resp = client.get(
        f"/v1/progress/{COURSE_ID}/summary?months=1", headers=auth(token)
    )
    body = resp.json()
    start = datetime.date.fromisoformat(body["window_start"])
    end = datetime.date.fromisoformat(body["window_end"])
    assert (start.year, start.month) == (end.year, end.month)


def test_summary_rejects_bad_months(client: TestClient, token: str) -> None:
    add_course()
    resp = client.get(
        f"/v1/progress/{COURSE_ID}/summary?months=0", headers=auth(token)
    )
    assert resp.status_code == 422


def test_summary_tolerates_malformed_timestamps(
    client: TestClient, token: str
) -> None:
    add_course()
    complete("test-user", "intro", "not-a-timestamp")
    resp = client.get(f"/v1/progress/{COURSE_ID}/summary", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["completed_count"] == 1
    assert body["latest"] is None
    assert body["calendar"] == []
