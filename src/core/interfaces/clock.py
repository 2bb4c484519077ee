"""Clock contract.

Cache expiry, admission windows and "current time" reports all read time
through this seam so tests can pin it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""

        ...
