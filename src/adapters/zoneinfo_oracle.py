"""Zone oracle backed by the IANA tz database (zoneinfo + tzdata).

Why in adapters:
- The rule database is infrastructure; the Core only sees `ZoneOracle`.
- `tzdata` ships the database as a package, so lookups do not depend on the
  host having /usr/share/zoneinfo.

Notes:
- Identifiers match case-insensitively; `canonical_zone` gives back the
  spelling the database uses.
- tzdata models some zones (Europe/Dublin, Africa/Casablanca) with *negative*
  DST: `dst()` is -1h in winter and 0 in summer. The DST flag therefore
  compares the offset with the zone's standard offset for that year instead of
  trusting the sign of `dst()` alone.
"""

from __future__ import annotations

import logging
import zoneinfo
from datetime import datetime, timedelta, timezone
from typing import Sequence

from core.domain.errors import OracleFailureError
from core.domain.models import DstState
from core.interfaces.zone_oracle import ZoneOracle

logger = logging.getLogger(__name__)

_ZERO = timedelta(0)


class ZoneInfoOracle(ZoneOracle):
    """Answers offset/DST questions from `zoneinfo.ZoneInfo`."""

    def __init__(self) -> None:
        self._known: frozenset[str] | None = None
        self._folded: dict[str, str] | None = None
        self._ordered: tuple[str, ...] | None = None
        # (zone, year) -> standard offset, only for years with negative DST.
        self._negative_dst_years: dict[tuple[str, int], timedelta | None] = {}

    def _known_zones(self) -> frozenset[str]:
        if self._known is None:
            self._known = frozenset(zoneinfo.available_timezones())
            logger.debug("Loaded %d zone identifiers", len(self._known))
        return self._known

    def canonical_zone(self, zone: str) -> str | None:
        if not zone:
            return None
        known = self._known_zones()
        if zone in known:
            return zone
        if self._folded is None:
            self._folded = {name.casefold(): name for name in known}
        return self._folded.get(zone.casefold())

    def is_known_zone(self, zone: str) -> bool:
        return self.canonical_zone(zone) is not None

    def _standard_offset_if_negative_dst(self, tz: zoneinfo.ZoneInfo, zone: str, year: int) -> timedelta | None:
        """Standard offset of `year` when the zone uses negative DST then, else None."""

        key = (zone, year)
        if key not in self._negative_dst_years:
            samples = [datetime(year, month, 1, tzinfo=timezone.utc).astimezone(tz) for month in (1, 7)]
            if any((sample.dst() or _ZERO) < _ZERO for sample in samples):
                self._negative_dst_years[key] = min(sample.utcoffset() for sample in samples)
            else:
                self._negative_dst_years[key] = None
        return self._negative_dst_years[key]

    def offset_and_dst(self, zone: str, instant: datetime) -> DstState:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        name = self.canonical_zone(zone) or zone
        try:
            tz = zoneinfo.ZoneInfo(name)
            local = instant.astimezone(tz)
            offset = local.utcoffset()
            dst = local.dst()
            if offset is None:
                raise OracleFailureError(f"zone {zone!r} reported no UTC offset")

            if dst is not None and dst > _ZERO:
                is_dst = True
            elif dst is not None and dst < _ZERO:
                is_dst = False
            else:
                standard = self._standard_offset_if_negative_dst(tz, name, local.year)
                is_dst = standard is not None and offset > standard
        except (zoneinfo.ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise OracleFailureError(f"zone rule lookup failed for {zone!r}: {exc}") from exc

        seconds = int(offset.total_seconds())
        return DstState(
            utc_offset_minutes=int(seconds / 60),
            utc_offset_seconds=seconds,
            is_dst=is_dst,
        )

    def list_known_zones(self) -> Sequence[str]:
        if self._ordered is None:
            self._ordered = tuple(sorted(self._known_zones()))
        return self._ordered
