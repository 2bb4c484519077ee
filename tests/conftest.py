"""Shared fixtures: a controllable clock and a schedule-driven zone oracle."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Sequence

import pytest

from adapters.zoneinfo_oracle import ZoneInfoOracle
from core.config import AppSettings
from core.domain.models import DstState


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)

    def set(self, instant: datetime) -> None:
        self._now = instant


@dataclass
class FakeZone:
    """Standard offset plus a sorted list of instants where DST toggles.

    DST is off before the first transition, on after it, off after the
    second, and so on.
    """

    std_offset_minutes: int
    dst_offset_minutes: int = 0
    transitions: Sequence[datetime] = ()


@dataclass
class FakeOracle:
    zones: dict[str, FakeZone] = field(default_factory=dict)
    calls: int = 0

    def is_known_zone(self, zone: str) -> bool:
        return zone in self.zones

    def canonical_zone(self, zone: str) -> str | None:
        return zone if zone in self.zones else None

    def offset_and_dst(self, zone: str, instant: datetime) -> DstState:
        self.calls += 1
        rules = self.zones[zone]
        flips = bisect.bisect_right(list(rules.transitions), instant)
        is_dst = flips % 2 == 1
        offset = rules.dst_offset_minutes if is_dst else rules.std_offset_minutes
        return DstState(utc_offset_minutes=offset, is_dst=is_dst)

    def list_known_zones(self) -> Sequence[str]:
        return sorted(self.zones)


SPRING_2025 = utc(2025, 3, 30, 1, 0)
AUTUMN_2025 = utc(2025, 10, 26, 1, 0)
SPRING_2026 = utc(2026, 3, 29, 1, 0)


@pytest.fixture
def fake_oracle() -> FakeOracle:
    return FakeOracle(
        zones={
            "Test/Seasonal": FakeZone(
                std_offset_minutes=0,
                dst_offset_minutes=60,
                transitions=(SPRING_2025, AUTUMN_2025, SPRING_2026),
            ),
            "Test/Fixed": FakeZone(std_offset_minutes=330),
        }
    )


@pytest.fixture(scope="session")
def zoneinfo_oracle() -> ZoneInfoOracle:
    return ZoneInfoOracle()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(utc(2025, 10, 19, 17, 0))


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    for name in ("PORT", "SERVICE_NAME", "CACHE_TTL_MS", "RATE_WINDOW_MS", "RATE_MAX"):
        monkeypatch.delenv(name, raising=False)
    return AppSettings(_env_file=None, service_name="tzclock-test")
