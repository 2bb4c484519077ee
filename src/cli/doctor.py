"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import time

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import base_url_for, build_async_client, fetch_health
from adapters.system_clock import SystemClock
from adapters.zoneinfo_oracle import ZoneInfoOracle
from core.config import AppSettings, get_user_env_file
from core.domain.models import format_instant
from core.services.transition_finder import find_next_transition

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()

_SAMPLE_ZONE = "Europe/London"


async def _check_http(settings: AppSettings, base_url: str) -> tuple[bool, str]:
    try:
        async with build_async_client(settings, base_url=base_url) as client:
            payload = await fetch_health(client)
        return True, f"{payload.get('status')} ({payload.get('service')})"
    except Exception as exc:
        return False, str(exc) or exc.__class__.__name__


def _check_tzdata(oracle: ZoneInfoOracle) -> tuple[bool, str]:
    zones = oracle.list_known_zones()
    if not zones:
        return False, "no zones found; install the 'tzdata' package"
    return True, f"{len(zones)} zones"


def _check_search(oracle: ZoneInfoOracle, settings: AppSettings) -> tuple[bool, str]:
    """Run one transition search and report how long it took."""

    if not oracle.is_known_zone(_SAMPLE_ZONE):
        return False, f"{_SAMPLE_ZONE} unknown"
    started = time.perf_counter()
    try:
        result = find_next_transition(
            oracle,
            _SAMPLE_ZONE,
            SystemClock().now(),
            horizon=settings.transition_horizon,
            step=settings.transition_step,
            budget_seconds=settings.transition_budget_seconds,
        )
    except Exception as exc:
        return False, str(exc)
    elapsed_ms = (time.perf_counter() - started) * 1000
    found = format_instant(result) if result else "none"
    return True, f"{_SAMPLE_ZONE}: {found} in {elapsed_ms:.1f}ms"


@app.command()
def run(
    probe: bool = typer.Option(False, "--probe", help="Also call /health on a running server."),
    url: str | None = typer.Option(None, "--url", help="Server base URL (defaults to host/port settings)."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    oracle = ZoneInfoOracle()

    table = Table(title="tzclock Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Listen", "OK", f"{settings.host}:{settings.port}")
    table.add_row("Cache TTL", "OK", f"{settings.cache_ttl_seconds:g}s / zones {settings.zone_list_ttl_seconds:g}s")
    table.add_row(
        "Rate limit",
        "OK",
        f"{settings.rate_max_requests} req / {settings.rate_window_seconds:g}s",
    )

    ok_tz, detail_tz = _check_tzdata(oracle)
    table.add_row("tzdata", "OK" if ok_tz else "FAIL", detail_tz)

    ok_search, detail_search = _check_search(oracle, settings)
    table.add_row("DST search", "OK" if ok_search else "FAIL", detail_search)

    if probe:
        base_url = url or base_url_for(settings)
        ok_http, detail_http = asyncio.run(_check_http(settings, base_url))
        table.add_row(f"GET {base_url}/health", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_tz:
        _console.print("\n[yellow]Note:[/yellow] `pip install tzdata` provides the zone database on any platform.")
