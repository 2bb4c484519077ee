"""Wall-clock conversion between zones.

The input is read as a clock face in the *source* zone: the same string maps
to different absolute instants depending on the source zone's offset at that
date. Only an explicit offset (or `Z`) in the string overrides this.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from core.domain.errors import InvalidInstantError, InvalidZoneError
from core.domain.models import ConversionReport
from core.interfaces.zone_oracle import ZoneOracle

# Offsets a day away from a local time bracket any single transition.
_BRACKET = timedelta(days=1)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; the result is naive unless it carries an offset."""

    text = value.strip()
    if not text:
        raise InvalidInstantError(value)
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidInstantError(value) from exc


def resolve_local(oracle: ZoneOracle, zone: str, local: datetime) -> datetime:
    """Absolute instant shown as the naive wall clock `local` in `zone`.

    Ambiguous times (clocks set back) resolve to the earlier instant.
    Non-existent times (clocks set forward) use the offset in force before the
    change, which moves them forward by the size of the gap.
    """

    face = local.replace(tzinfo=timezone.utc)
    before = oracle.offset_and_dst(zone, face - _BRACKET).utc_offset
    after = oracle.offset_and_dst(zone, face + _BRACKET).utc_offset

    candidates = []
    for offset in {before, after}:
        instant = face - offset
        if oracle.offset_and_dst(zone, instant).utc_offset == offset:
            candidates.append(instant)
    if candidates:
        return min(candidates)
    return face - before


def to_instant(oracle: ZoneOracle, zone: str, value: str) -> datetime:
    parsed = parse_timestamp(value)
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return resolve_local(oracle, zone, parsed)


def convert(oracle: ZoneOracle, from_zone: str, to_zone: str, local_input: str) -> ConversionReport:
    """Render `local_input`, read as wall-clock time in `from_zone`, in `to_zone`."""

    resolved = []
    for zone in (from_zone, to_zone):
        canonical = oracle.canonical_zone(zone)
        if canonical is None:
            raise InvalidZoneError(
                zone, user_message="Invalid time zone identifier for from or to"
            )
        resolved.append(canonical)
    from_zone, to_zone = resolved

    try:
        instant = to_instant(oracle, from_zone, local_input)
        source = oracle.offset_and_dst(from_zone, instant)
        target = oracle.offset_and_dst(to_zone, instant)
        input_formatted = source.format_local(instant)
        converted_formatted = target.format_local(instant)
    except OverflowError as exc:
        # Timestamps at the edge of the representable range.
        raise InvalidInstantError(local_input) from exc

    return ConversionReport(
        from_zone=from_zone,
        to_zone=to_zone,
        input_time=instant,
        input_formatted=input_formatted,
        converted_time=instant,
        converted_formatted=converted_formatted,
        is_dst_in_target=target.is_dst,
        utc_offset_target=target.offset_label,
    )
