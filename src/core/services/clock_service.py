"""Request orchestration for time reports, conversions and zone listing.

This module is what each entry point (HTTP handlers, CLI commands, tests)
calls. It validates inputs, derives the cache key from the normalized
parameters, consults the response cache and only on a miss runs the
transition search / converter against the zone oracle. Side-effects such as
rendering or status codes stay in the adapters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from core.config import AppSettings
from core.domain.errors import InvalidZoneError, MissingParameterError
from core.domain.models import ConversionReport, HealthReport, TimeReport
from core.interfaces.clock import Clock
from core.interfaces.zone_oracle import ZoneOracle
from core.services.response_cache import ResponseCache, cache_key
from core.services import time_converter
from core.services.transition_finder import find_next_transition

logger = logging.getLogger(__name__)


@dataclass
class CachePolicy:
    """TTL per endpoint family."""

    report_ttl: timedelta = timedelta(seconds=10)
    zone_list_ttl: timedelta = timedelta(seconds=60)


@dataclass
class SearchOptions:
    """Parameters of the next-transition search."""

    horizon: timedelta = timedelta(days=370)
    step: timedelta = timedelta(hours=6)
    budget_seconds: float | None = 2.0


@dataclass
class ClockService:
    oracle: ZoneOracle
    clock: Clock
    cache: ResponseCache
    service_name: str = "tzclock"
    cache_policy: CachePolicy = field(default_factory=CachePolicy)
    search: SearchOptions = field(default_factory=SearchOptions)

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        oracle: ZoneOracle,
        clock: Clock,
        cache: ResponseCache | None = None,
    ) -> "ClockService":
        return cls(
            oracle=oracle,
            clock=clock,
            cache=cache if cache is not None else ResponseCache(clock),
            service_name=settings.service_name,
            cache_policy=CachePolicy(
                report_ttl=timedelta(seconds=settings.cache_ttl_seconds),
                zone_list_ttl=timedelta(seconds=settings.zone_list_ttl_seconds),
            ),
            search=SearchOptions(
                horizon=settings.transition_horizon,
                step=settings.transition_step,
                budget_seconds=settings.transition_budget_seconds,
            ),
        )

    def health(self) -> HealthReport:
        return HealthReport(service=self.service_name, time=self.clock.now())

    def list_zones(self) -> list[str]:
        key = cache_key("timezones")
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        zones = list(self.oracle.list_known_zones())
        self.cache.put(key, zones, self.cache_policy.zone_list_ttl)
        return zones

    def time_report(self, zone: str | None) -> TimeReport:
        """Current time, DST status and next DST change for `zone`."""

        if not zone:
            raise MissingParameterError(
                "missing zone", user_message="Missing required query parameter 'zone'"
            )

        key = cache_key("time", zone)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        logger.debug("Cache miss: %s", key)

        canonical = self.oracle.canonical_zone(zone)
        if canonical is None:
            raise InvalidZoneError(zone)
        zone = canonical

        now = self.clock.now()
        state = self.oracle.offset_and_dst(zone, now)
        next_change = find_next_transition(
            self.oracle,
            zone,
            now,
            horizon=self.search.horizon,
            step=self.search.step,
            budget_seconds=self.search.budget_seconds,
        )
        offset = state.offset_label
        report = TimeReport(
            zone=zone,
            instant=now,
            formatted=state.format_local(now),
            utc_offset=offset,
            day_of_week=state.localize(now).strftime("%A"),
            is_dst=state.is_dst,
            dst_offset=offset if state.is_dst else None,
            next_dst_change=next_change,
        )
        self.cache.put(key, report, self.cache_policy.report_ttl)
        return report

    def convert(
        self,
        from_zone: str | None,
        to_zone: str | None,
        time: str | None,
    ) -> ConversionReport:
        """Convert wall-clock `time` in `from_zone` to `to_zone`."""

        if not from_zone or not to_zone or not time:
            raise MissingParameterError(
                "missing conversion parameters",
                user_message="Missing parameters. Required: 'from', 'to', 'time' (ISO string)",
            )

        key = cache_key("convert", from_zone, to_zone, time)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        report = time_converter.convert(self.oracle, from_zone, to_zone, time)
        self.cache.put(key, report, self.cache_policy.report_ttl)
        return report

    def next_change(self, zone: str) -> datetime | None:
        """Uncached next-transition lookup from the current instant."""

        canonical = self.oracle.canonical_zone(zone)
        if canonical is None:
            raise InvalidZoneError(zone)
        return find_next_transition(
            self.oracle,
            canonical,
            self.clock.now(),
            horizon=self.search.horizon,
            step=self.search.step,
            budget_seconds=self.search.budget_seconds,
        )
