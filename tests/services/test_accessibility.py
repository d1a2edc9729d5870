"""Tests for the sequential-unlock accessibility fold.

The previous lesson id is carried across unit boundaries, so the first
lesson of a unit is locked until the last lesson of the unit before it
is completed.
"""

from __future__ import annotations

from datetime import UTC, datetime

from courseflow.models.course import CourseOutline, CoursePolicy, LessonRef, Unit
from courseflow.models.progress import Completed, NotCompleted
from courseflow.services.accessibility import (
    resolve_course_accessibility,
    resolve_unit_accessibility,
)
from tests.conftest import make_outline

_NOW = datetime(2024, 6, 1, tzinfo=UTC)
_DONE = Completed(lesson_name="x", completed_at="2024-01-02T10:00:00Z")


def _unit(unit_id: str, *lesson_ids: str) -> Unit:
    return Unit.new(
        id=unit_id,
        name=unit_id,
        lessons=[LessonRef(lesson_id, lesson_id) for lesson_id in lesson_ids],
    )


# ---- resolve_unit_accessibility ----


def test_first_lesson_open_when_nothing_came_before() -> None:
    unit = _unit("u", "a", "b", "c")
    result = resolve_unit_accessibility(
        unit, unit.lessons, {}, CoursePolicy(), "student", None
    )
    assert result.per_lesson == {"a": True, "b": False, "c": False}
    assert result.last_lesson_id == "c"


def test_completed_lesson_unlocks_next() -> None:
    unit = _unit("u", "a", "b", "c")
    result = resolve_unit_accessibility(
        unit, unit.lessons, {"a": _DONE}, CoursePolicy(), "student", None
    )
    assert result.per_lesson == {"a": True, "b": True, "c": False}


def test_not_completed_record_is_same_as_absent() -> None:
    unit = _unit("u", "a", "b")
    result = resolve_unit_accessibility(
        unit,
        unit.lessons,
        {"a": NotCompleted(lesson_name="a")},
        CoursePolicy(),
        "student",
        None,
    )
    assert result.per_lesson["b"] is False


def test_carried_lesson_gates_first_lesson() -> None:
    unit = _unit("u", "a", "b")
    locked = resolve_unit_accessibility(
        unit, unit.lessons, {}, CoursePolicy(), "student", "prev"
    )
    assert locked.per_lesson["a"] is False

    opened = resolve_unit_accessibility(
        unit, unit.lessons, {"prev": _DONE}, CoursePolicy(), "student", "prev"
    )
    assert opened.per_lesson["a"] is True


def test_admin_sees_everything() -> None:
    unit = _unit("u", "a", "b", "c")
    result = resolve_unit_accessibility(
        unit, unit.lessons, {}, CoursePolicy(), "admin", "prev"
    )
    assert all(result.per_lesson.values())


def test_public_course_is_fully_open() -> None:
    unit = _unit("u", "a", "b", "c")
    result = resolve_unit_accessibility(
        unit, unit.lessons, {}, CoursePolicy(is_public=True), "student", "prev"
    )
    assert all(result.per_lesson.values())


def test_unlock_index_opens_that_position() -> None:
    unit = _unit("u", "a", "b", "c")
    result = resolve_unit_accessibility(
        unit,
        unit.lessons,
        {},
        CoursePolicy(unlock_lesson_index=2),
        "student",
        "prev",
    )
    assert result.per_lesson == {"a": False, "b": True, "c": False}


def test_unlock_index_one_opens_first_lesson_after_carry() -> None:
    unit = _unit("u", "a", "b")
    result = resolve_unit_accessibility(
        unit,
        unit.lessons,
        {},
        CoursePolicy(unlock_lesson_index=1),
        "student",
        "prev",
    )
    assert result.per_lesson["a"] is True


def test_empty_unit_passes_carried_id_through() -> None:
    unit = _unit("u")
    result = resolve_unit_accessibility(
        unit, (), {}, CoursePolicy(), "student", "prev"
    )
    assert result.per_lesson == {}
    assert result.last_lesson_id == "prev"


# ---- resolve_course_accessibility ----


def test_fold_crosses_unit_boundaries() -> None:
    outline = make_outline()
    progress = {"intro": _DONE, "l1": _DONE, "l2": _DONE}
    access = resolve_course_accessibility(outline, progress, "student", now=_NOW)
    assert access.is_accessible("l3") is True
    # l4 waits for l3, the last lesson of the previous unit
    assert access.is_accessible("l4") is False

    progress["l3"] = _DONE
    access = resolve_course_accessibility(outline, progress, "student", now=_NOW)
    assert access.is_accessible("l4") is True


def test_first_lesson_of_unit_1_waits_for_orientation() -> None:
    access = resolve_course_accessibility(make_outline(), {}, "student", now=_NOW)
    assert access.is_accessible("intro") is True
    assert access.is_accessible("l1") is False


def test_empty_unit_between_units_keeps_the_carry() -> None:
    outline = CourseOutline(
        id="c",
        name="C",
        units=(_unit("u1", "a"), _unit("empty"), _unit("u3", "b")),
    )
    locked = resolve_course_accessibility(outline, {}, "student", now=_NOW)
    assert locked.is_accessible("b") is False

    opened = resolve_course_accessibility(outline, {"a": _DONE}, "student", now=_NOW)
    assert opened.is_accessible("b") is True
    assert opened.last_lesson_id == "b"


def test_unknown_lesson_is_not_accessible() -> None:
    access = resolve_course_accessibility(make_outline(), {}, "admin", now=_NOW)
    assert access.is_accessible("no-such-lesson") is False


def test_gated_units_reported_for_students_only() -> None:
    outline = make_outline(u2_open_date="2024-12-01T00:00:00Z")
    student = resolve_course_accessibility(outline, {}, "student", now=_NOW)
    admin = resolve_course_accessibility(outline, {}, "admin", now=_NOW)
    assert student.is_unit_gated("u2") is True
    assert student.is_unit_gated("u1") is False
    assert admin.is_unit_gated("u2") is False


def test_unit_lessons_override_outline_lessons() -> None:
    outline = CourseOutline(
        id="c",
        name="C",
        units=(
            _unit("u1", "a"),
            Unit.new(id="u2", name="u2", lesson_count=2),
        ),
    )
    expanded = {"u2": [LessonRef("b", "b"), LessonRef("c", "c")]}
    access = resolve_course_accessibility(
        outline, {"a": _DONE}, "student", unit_lessons=expanded, now=_NOW
    )
    assert access.is_accessible("b") is True
    assert access.is_accessible("c") is False
