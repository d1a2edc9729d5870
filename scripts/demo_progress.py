"""Demo: walk a learner through the sample course using FastAPI TestClient.

Run with:
    python scripts/demo_progress.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from courseflow.api.courses import seed_sample_course
from courseflow.main import app
from courseflow.services import token_service

COURSE_ID = "daily-reading"


def _lessons(body: dict) -> str:
    return "  ".join(
        f"{lesson['id']}={'open' if lesson['accessible'] else 'locked'}"
        for unit in body["units"]
        for lesson in unit["lessons"]
    )


def main() -> None:
    seed_sample_course()
    client = TestClient(app)
    headers = {
        "Authorization": f"Bearer {token_service.create_access_token(sub='demo-learner')}"
    }

    # ── Step 1: navigation for a new learner ────────────────────────
    r = client.get(f"/v1/courses/{COURSE_ID}/navigation", headers=headers)
    print(f"1. GET  navigation          → {r.status_code}")
    print(f"   {_lessons(r.json())}")

    # ── Step 2: try to skip ahead ───────────────────────────────────
    r = client.post(
        f"/v1/progress/{COURSE_ID}/lessons/week-1-day-2/complete", headers=headers
    )
    print(f"2. POST complete week-1-day-2 → {r.status_code}  ({r.json()['detail']})")

    # ── Step 3: complete lessons in order ───────────────────────────
    for lesson_id in ("welcome", "week-1-day-1", "week-1-day-2", "week-1-day-3"):
        r = client.post(
            f"/v1/progress/{COURSE_ID}/lessons/{lesson_id}/complete", headers=headers
        )
        resume = r.json()["resume"]
        nxt = resume["lesson_id"] if resume else "-"
        print(f"3. POST complete {lesson_id:<13} → {r.status_code}  next={nxt}")

    # ── Step 4: the carried lesson opens week 2 ─────────────────────
    r = client.get(f"/v1/courses/{COURSE_ID}/navigation", headers=headers)
    print(f"4. GET  navigation          → {r.status_code}")
    print(f"   {_lessons(r.json())}")

    # ── Step 5: schedule and summary ────────────────────────────────
    r = client.get(f"/v1/courses/{COURSE_ID}/schedule", headers=headers)
    plan = ", ".join(f"{s['lesson_id']}@{s['scheduled_date']}" for s in r.json()["lessons"])
    print(f"5. GET  schedule            → {r.status_code}  {plan}")

    r = client.get(f"/v1/progress/{COURSE_ID}/summary", headers=headers)
    body = r.json()
    days = ", ".join(f"{d['date']}×{d['count']}" for d in body["calendar"])
    print(
        f"6. GET  summary             → {r.status_code}  "
        f"completed={body['completed_count']}  calendar=[{days}]"
    )


if __name__ == "__main__":
    main()
