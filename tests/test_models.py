"""Tests for report models and their wire format."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from core.domain.models import ConversionReport, DstState, TimeReport, format_instant, format_offset
from tests.conftest import utc


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(0, "+00:00"), (60, "+01:00"), (-300, "-05:00"), (345, "+05:45"), (-570, "-09:30")],
)
def test_format_offset(minutes: int, expected: str) -> None:
    assert format_offset(minutes) == expected


def test_format_instant_normalizes_to_utc_with_millis() -> None:
    plus_two = timezone(timedelta(hours=2))
    instant = datetime(2025, 7, 1, 14, 0, 5, 123456, tzinfo=plus_two)

    assert format_instant(instant) == "2025-07-01T12:00:05.123Z"


def test_dst_state_local_rendering() -> None:
    state = DstState(utc_offset_minutes=-240, is_dst=True)

    assert state.format_local(utc(2025, 7, 1, 16, 0)) == "2025-07-01T12:00:00-04:00"


def test_dst_state_rejects_absurd_offsets() -> None:
    with pytest.raises(ValidationError):
        DstState(utc_offset_minutes=24 * 60 + 1, is_dst=False)


def test_time_report_wire_names() -> None:
    report = TimeReport(
        zone="Europe/London",
        instant=utc(2025, 10, 19, 17),
        formatted="2025-10-19T18:00:00+01:00",
        utc_offset="+01:00",
        day_of_week="Sunday",
        is_dst=True,
        dst_offset="+01:00",
        next_dst_change=utc(2025, 10, 26, 1, 0, 30),
    )

    assert report.model_dump(mode="json", by_alias=True) == {
        "timezone": "Europe/London",
        "datetime": "2025-10-19T17:00:00.000Z",
        "formatted": "2025-10-19T18:00:00+01:00",
        "utc_offset": "+01:00",
        "day_of_week": "Sunday",
        "is_dst": True,
        "dst_offset": "+01:00",
        "next_dst_change": "2025-10-26T01:00:30.000Z",
    }


def test_conversion_report_accepts_wire_names() -> None:
    report = ConversionReport.model_validate(
        {
            "from": "UTC",
            "to": "Asia/Tokyo",
            "input_time": "2025-10-19T14:00:00Z",
            "input_formatted": "2025-10-19T14:00:00+00:00",
            "converted_time": "2025-10-19T14:00:00Z",
            "converted_formatted": "2025-10-19T23:00:00+09:00",
            "is_dst_in_target": False,
            "utc_offset_target": "+09:00",
        }
    )

    assert report.from_zone == "UTC"
    assert report.to_zone == "Asia/Tokyo"
    assert report.input_time == utc(2025, 10, 19, 14)


def test_reports_are_frozen() -> None:
    state = DstState(utc_offset_minutes=0, is_dst=False)
    with pytest.raises(ValidationError):
        state.is_dst = True


@pytest.mark.parametrize(
    ("seconds", "minutes", "label"),
    [(-17762, -296, "-04:56:02"), (561, 9, "+00:09:21"), (-30, 0, "-00:00:30"), (3600, 60, "+01:00")],
)
def test_dst_state_keeps_offset_seconds(seconds: int, minutes: int, label: str) -> None:
    state = DstState(utc_offset_minutes=minutes, utc_offset_seconds=seconds, is_dst=False)

    assert state.utc_offset == timedelta(seconds=seconds)
    assert state.offset_label == label


def test_dst_state_localizes_with_seconds() -> None:
    state = DstState(utc_offset_minutes=-296, utc_offset_seconds=-17762, is_dst=False)

    assert state.format_local(utc(1880, 1, 1, 4, 56, 2)) == "1880-01-01T00:00:00-04:56:02"


def test_dst_state_defaults_seconds_from_minutes() -> None:
    state = DstState(utc_offset_minutes=330, is_dst=False)

    assert state.offset_seconds == 330 * 60
    assert state.offset_label == "+05:30"


def test_dst_state_rejects_inconsistent_seconds() -> None:
    with pytest.raises(ValidationError):
        DstState(utc_offset_minutes=-297, utc_offset_seconds=-17762, is_dst=False)
