"""Domain error hierarchy.

Every failure a request can hit is one of these kinds. All of them are
terminal for the request that raised them; nothing in the core retries.
"""

from __future__ import annotations


class TzClockError(Exception):
    """Base class for tzclock errors surfaced to requesters."""

    kind: str = "Error"

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message: str = user_message or message


class MissingParameterError(TzClockError):
    """A required query parameter was not supplied."""

    kind = "MissingParameter"


class InvalidZoneError(TzClockError):
    """The zone identifier is not known to the zone oracle."""

    kind = "InvalidZone"

    def __init__(self, zone: str, *, user_message: str | None = None) -> None:
        super().__init__(
            f"unknown time zone identifier: {zone!r}",
            user_message=user_message or "Invalid time zone identifier",
        )
        self.zone: str = zone


class InvalidInstantError(TzClockError):
    """A time string could not be parsed as a calendar timestamp."""

    kind = "InvalidInstant"

    def __init__(self, value: str) -> None:
        super().__init__(
            f"cannot parse time value: {value!r}",
            user_message="Invalid time format. Use ISO 8601 or parsable string.",
        )
        self.value: str = value


class RateLimitExceededError(TzClockError):
    """The client used up its request allowance for the current window."""

    kind = "RateLimitExceeded"

    def __init__(self, client_id: str, *, retry_after_seconds: float) -> None:
        super().__init__(
            f"rate limit exceeded for client {client_id!r}",
            user_message="Too many requests, please try again later.",
        )
        self.client_id: str = client_id
        self.retry_after_seconds: float = retry_after_seconds


class OracleFailureError(TzClockError):
    """Unexpected failure while querying zone rules."""

    kind = "OracleFailure"

    def __init__(self, message: str) -> None:
        super().__init__(message, user_message="Internal server error")
