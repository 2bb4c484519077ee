"""Next DST transition search.

The oracle's DST flag is a step function of time. We scan forward in coarse
steps until the flag differs from its value at the reference instant, then
bisect the last step down to the requested resolution.

The coarse step must stay strictly below the shortest gap between two DST
changes in the oracle's rule data (about 24h for current real-world rules),
otherwise a pair of changes can fall inside one step and be skipped.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from typing import Callable

from core.domain.errors import OracleFailureError
from core.interfaces.zone_oracle import ZoneOracle

logger = logging.getLogger(__name__)

DEFAULT_HORIZON = timedelta(days=370)
DEFAULT_STEP = timedelta(hours=6)
DEFAULT_RESOLUTION = timedelta(minutes=1)
DEFAULT_BUDGET_SECONDS = 2.0


def find_next_transition(
    oracle: ZoneOracle,
    zone: str,
    reference: datetime,
    *,
    horizon: timedelta = DEFAULT_HORIZON,
    step: timedelta = DEFAULT_STEP,
    resolution: timedelta = DEFAULT_RESOLUTION,
    budget_seconds: float | None = DEFAULT_BUDGET_SECONDS,
    timer: Callable[[], float] = time.monotonic,
) -> datetime | None:
    """Return the first instant after `reference` where the DST flag flips.

    The result is the upper bound of an interval no wider than `resolution`
    that contains the flip: the flag equals its `reference` value just before
    the returned instant and differs at it. Returns None when the flag does
    not change within `horizon` (zones without DST end up here).

    `zone` must already be known to `oracle`. Raises `OracleFailureError`
    when the search exceeds `budget_seconds` of wall-clock time.
    """

    if step <= timedelta(0) or resolution <= timedelta(0):
        raise ValueError("step and resolution must be positive")

    deadline = None if budget_seconds is None else timer() + budget_seconds

    def is_dst(instant: datetime) -> bool:
        if deadline is not None and timer() > deadline:
            raise OracleFailureError(
                f"DST transition search for {zone!r} exceeded {budget_seconds}s budget"
            )
        return oracle.offset_and_dst(zone, instant).is_dst

    baseline = is_dst(reference)
    limit = reference + horizon

    cursor = reference
    while cursor < limit:
        ahead = cursor + step
        if is_dst(ahead) != baseline:
            left, right = cursor, ahead
            while right - left > resolution:
                mid = left + (right - left) / 2
                if is_dst(mid) == baseline:
                    left = mid
                else:
                    right = mid
            logger.debug("Next DST change for %s after %s: %s", zone, reference, right)
            return right
        cursor = ahead

    logger.debug("No DST change for %s within %s of %s", zone, horizon, reference)
    return None
