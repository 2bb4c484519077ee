"""Zone oracle contract.

Why Protocol:
- Defines a structural contract (duck typing) without rigid inheritance.
- The transition search and the converter only need these few questions
  answered, so they can run against the real tz database or against a
  deterministic fake with a synthetic transition schedule.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import DstState


@runtime_checkable
class ZoneOracle(Protocol):
    """Opaque source of time-zone rules.

    Design rules:
    - Lookups are synchronous and in-process (no network I/O).
    - `offset_and_dst` may assume the zone is known; callers validate first.
    """

    def is_known_zone(self, zone: str) -> bool:
        """Return True if `zone` is a usable identifier."""

        ...

    def canonical_zone(self, zone: str) -> str | None:
        """The database spelling of `zone` (matched case-insensitively), or None."""

        ...

    def offset_and_dst(self, zone: str, instant: datetime) -> DstState:
        """UTC offset and DST flag of `zone` at the aware `instant`."""

        ...

    def list_known_zones(self) -> Sequence[str]:
        """Every known identifier, in a stable order."""

        ...
