"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  Core to the tz database or to HTTP.
- Serialization to the public JSON shape lives next to the data it describes.

Note:
- These models describe *what* a report is, not *how* it is computed.
- Reports are frozen: a cached instance is served as-is on every hit.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field, field_serializer, model_validator
from pydantic.config import ConfigDict


def format_instant(instant: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing `Z`."""

    utc = instant.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def format_offset(offset_minutes: int) -> str:
    """Render a UTC offset as `+HH:MM` / `-HH:MM`."""

    sign = "-" if offset_minutes < 0 else "+"
    hours, minutes = divmod(abs(offset_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


class DstState(BaseModel):
    """UTC offset and DST flag of one zone at one instant.

    `utc_offset_minutes` is the whole-minute offset, truncated toward zero.
    `utc_offset_seconds` carries the exact offset for historical rules
    (local mean time) whose offsets are not whole minutes; when omitted it is
    taken to be `utc_offset_minutes * 60`.
    """

    model_config = ConfigDict(frozen=True)

    utc_offset_minutes: int = Field(
        ...,
        ge=-24 * 60,
        le=24 * 60,
        description="Offset from UTC in minutes (east positive).",
    )
    utc_offset_seconds: int | None = Field(
        default=None,
        ge=-24 * 3600,
        le=24 * 3600,
        description="Exact offset from UTC in seconds.",
    )
    is_dst: bool = Field(
        ...,
        description="Whether daylight saving time is in effect.",
    )

    @model_validator(mode="after")
    def _check_seconds_match_minutes(self) -> "DstState":
        seconds = self.utc_offset_seconds
        if seconds is not None and int(seconds / 60) != self.utc_offset_minutes:
            raise ValueError(
                f"utc_offset_seconds={seconds} does not match utc_offset_minutes={self.utc_offset_minutes}"
            )
        return self

    @property
    def offset_seconds(self) -> int:
        if self.utc_offset_seconds is not None:
            return self.utc_offset_seconds
        return self.utc_offset_minutes * 60

    @property
    def utc_offset(self) -> timedelta:
        return timedelta(seconds=self.offset_seconds)

    @property
    def offset_label(self) -> str:
        """`+HH:MM`, or `+HH:MM:SS` when the offset has a seconds part."""

        total = self.offset_seconds
        minutes, seconds = divmod(abs(total), 60)
        label = format_offset(-minutes if total < 0 else minutes)
        if total < 0 and minutes == 0:
            label = "-" + label[1:]
        return f"{label}:{seconds:02d}" if seconds else label

    def localize(self, instant: datetime) -> datetime:
        """Express `instant` as a wall clock carrying this offset."""

        return instant.astimezone(timezone(self.utc_offset))

    def format_local(self, instant: datetime) -> str:
        local = self.localize(instant)
        return local.strftime("%Y-%m-%dT%H:%M:%S") + self.offset_label


class TimeReport(BaseModel):
    """Current wall-clock time and DST status of one zone."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    zone: str = Field(..., alias="timezone", min_length=1)
    instant: datetime = Field(..., alias="datetime")
    formatted: str = Field(..., description="Local time with offset.")
    utc_offset: str = Field(..., description="`+HH:MM` offset at `instant`.")
    day_of_week: str = Field(..., description="English weekday name, local.")
    is_dst: bool
    dst_offset: str | None = Field(
        default=None,
        description="The UTC offset while DST is in effect, else null.",
    )
    next_dst_change: datetime | None = Field(
        default=None,
        description="Next DST flip within the search horizon, if any.",
    )

    @field_serializer("instant")
    def _serialize_instant(self, value: datetime) -> str:
        return format_instant(value)

    @field_serializer("next_dst_change")
    def _serialize_next_change(self, value: datetime | None) -> str | None:
        return format_instant(value) if value is not None else None


class ConversionReport(BaseModel):
    """One instant rendered in a source and a target zone."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_zone: str = Field(..., alias="from", min_length=1)
    to_zone: str = Field(..., alias="to", min_length=1)
    input_time: datetime
    input_formatted: str
    converted_time: datetime
    converted_formatted: str
    is_dst_in_target: bool
    utc_offset_target: str

    @field_serializer("input_time", "converted_time")
    def _serialize_instant(self, value: datetime) -> str:
        return format_instant(value)


class HealthReport(BaseModel):
    """Liveness payload."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    service: str
    time: datetime

    @field_serializer("time")
    def _serialize_time(self, value: datetime) -> str:
        return format_instant(value)


class ErrorPayload(BaseModel):
    """Structured body returned for every rejected request."""

    error: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
