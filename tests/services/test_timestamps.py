from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

from courseflow.services.timestamps import parse_date, parse_timestamp


def test_parse_timestamp_with_z_suffix() -> None:
    assert parse_timestamp("2024-01-02T10:00:00Z") == datetime(2024, 1, 2, 10, tzinfo=UTC)


def test_parse_timestamp_normalises_offset_to_utc() -> None:
    parsed = parse_timestamp("2024-01-02T10:00:00+02:00")
    assert parsed == datetime(2024, 1, 2, 8, tzinfo=UTC)
    assert parsed.utcoffset() == timedelta(0)  # type: ignore[union-attr]


def test_naive_timestamp_is_utc() -> None:
    assert parse_timestamp("2024-01-02T10:00:00") == datetime(2024, 1, 2, 10, tzinfo=UTC)


def test_date_only_is_midnight_utc() -> None:
    assert parse_timestamp("2024-01-02") == datetime(2024, 1, 2, tzinfo=UTC)


def test_parse_timestamp_accepts_datetime_and_date() -> None:
    aware = datetime(2024, 1, 2, tzinfo=timezone(timedelta(hours=-5)))
    assert parse_timestamp(aware) == datetime(2024, 1, 2, 5, tzinfo=UTC)
    assert parse_timestamp(date(2024, 1, 2)) == datetime(2024, 1, 2, tzinfo=UTC)


def test_parse_timestamp_never_raises() -> None:
    for value in ("", "   ", "soon", "2024-13-45", None, 42, object()):
        assert parse_timestamp(value) is None


def test_parse_date() -> None:
    assert parse_date("2024-01-02") == date(2024, 1, 2)
    assert parse_date("2024-01-02T23:00:00-05:00") == date(2024, 1, 2)
    assert parse_date(datetime(2024, 1, 2, 5)) == date(2024, 1, 2)
    assert parse_date("nope") is None
    assert parse_date(None) is None


def test_instants_outside_datetime_range_are_unparseable() -> None:
    # Both parse, but neither has a UTC equivalent
    assert parse_timestamp("0001-01-01T00:00:00+05:00") is None
    assert parse_timestamp("9999-12-31T23:00:00-05:00") is None
    assert parse_timestamp("9999-12-31T23:00:00Z") == datetime(
        9999, 12, 31, 23, tzinfo=UTC
    )
