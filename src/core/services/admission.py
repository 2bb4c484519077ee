"""Per-client request admission (fixed window).

Each client owns a window `{count, window_start}` that is either ACTIVE or
EXPIRED relative to the current instant. A request against an EXPIRED window
resets it (count 0, start = now) before counting. Bursts of up to twice the
limit around a window boundary are possible and accepted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from core.interfaces.clock import Clock

logger = logging.getLogger(__name__)


class WindowState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass
class ClientWindow:
    count: int
    window_start: datetime

    def state(self, now: datetime, length: timedelta) -> WindowState:
        if now > self.window_start + length:
            return WindowState.EXPIRED
        return WindowState.ACTIVE

    def reset(self, now: datetime) -> None:
        self.count = 0
        self.window_start = now


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of one admission check, with what rate-limit headers need."""

    allowed: bool
    limit: int
    remaining: int
    reset_after_seconds: float


class AdmissionControl:
    """Fixed-window request counter keyed by client identity."""

    def __init__(
        self,
        clock: Clock,
        *,
        window: timedelta = timedelta(seconds=60),
        max_requests: int = 120,
        max_tracked_clients: int = 10_000,
    ) -> None:
        if window <= timedelta(0):
            raise ValueError("window must be positive")
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self._clock = clock
        self._window = window
        self._max_requests = max_requests
        self._max_tracked_clients = max_tracked_clients
        self._windows: dict[str, ClientWindow] = {}
        self._lock = threading.Lock()

    @property
    def window(self) -> timedelta:
        return self._window

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def check(self, client_id: str) -> AdmissionDecision:
        """Count one request from `client_id` and decide whether it may proceed."""

        now = self._clock.now()
        with self._lock:
            current = self._windows.get(client_id)
            if current is None:
                if len(self._windows) >= self._max_tracked_clients:
                    self._sweep(now)
                current = ClientWindow(count=0, window_start=now)
                self._windows[client_id] = current
            elif current.state(now, self._window) is WindowState.EXPIRED:
                current.reset(now)

            allowed = current.count < self._max_requests
            if allowed:
                current.count += 1
            remaining = max(0, self._max_requests - current.count)
            reset_after = (current.window_start + self._window - now).total_seconds()

        if not allowed:
            logger.warning("Rate limit exceeded for client %s", client_id)
        return AdmissionDecision(
            allowed=allowed,
            limit=self._max_requests,
            remaining=remaining,
            reset_after_seconds=max(0.0, reset_after),
        )

    def admit(self, client_id: str) -> bool:
        return self.check(client_id).allowed

    def state_of(self, client_id: str) -> WindowState | None:
        """Window state for `client_id`, or None if it was never seen."""

        now = self._clock.now()
        with self._lock:
            current = self._windows.get(client_id)
            return None if current is None else current.state(now, self._window)

    def _sweep(self, now: datetime) -> None:
        expired = [
            client
            for client, current in self._windows.items()
            if current.state(now, self._window) is WindowState.EXPIRED
        ]
        for client in expired:
            del self._windows[client]
        if expired:
            logger.debug("Swept %d expired client windows", len(expired))

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
