"""tzclock command line.

Local queries run the same `ClockService` the HTTP API uses; `serve` starts
the API itself.
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import Iterator

import typer
from rich.console import Console

from adapters.http_api import serve as serve_api
from adapters.system_clock import SystemClock
from adapters.zoneinfo_oracle import ZoneInfoOracle
from cli.doctor import app as doctor_app
from cli.ui_components import (
    build_conversion_table,
    build_time_report_table,
    build_zones_table,
    print_banner,
)
from core.config import AppSettings
from core.domain.errors import TzClockError
from core.domain.models import format_instant
from core.logging_config import configure_logging
from core.services.clock_service import ClockService

app = typer.Typer(
    no_args_is_help=True,
    help="DST-aware time zone queries and API server.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
app.add_typer(doctor_app, name="doctor")

_console = Console()


def _service(settings: AppSettings) -> ClockService:
    return ClockService.from_settings(settings, oracle=ZoneInfoOracle(), clock=SystemClock())


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn domain errors into a one-line message and exit code 1."""

    try:
        yield
    except TzClockError as exc:
        _console.print(f"[red]{exc.kind}:[/red] {exc.user_message}")
        raise typer.Exit(code=1) from exc


def _print_json(payload: object) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@app.callback()
def main(
    log_level: str | None = typer.Option(None, "--log-level", help="Override TZCLOCK_LOG_LEVEL."),
) -> None:
    settings = AppSettings()
    configure_logging(log_level.upper() if log_level else settings.log_level)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: int | None = typer.Option(None, "--port", min=1, max=65535, help="Listening port."),
) -> None:
    """Run the HTTP API."""

    settings = AppSettings()
    print_banner(_console, settings.service_name)
    serve_api(settings, host=host, port=port)


@app.command()
def now(
    zone: str = typer.Argument(..., help="IANA zone, e.g. Europe/London."),
    as_json: bool = typer.Option(False, "--json", help="Print the API payload."),
) -> None:
    """Current time, DST status and next DST change in ZONE."""

    with _handle_errors():
        report = _service(AppSettings()).time_report(zone)
    if as_json:
        _print_json(report.model_dump(mode="json", by_alias=True))
        return
    _console.print(build_time_report_table(report))


@app.command()
def convert(
    from_zone: str = typer.Argument(..., metavar="FROM", help="Zone the time is written in."),
    to_zone: str = typer.Argument(..., metavar="TO", help="Zone to render the time in."),
    time_value: str = typer.Argument(..., metavar="TIME", help="ISO 8601 timestamp."),
    as_json: bool = typer.Option(False, "--json", help="Print the API payload."),
) -> None:
    """Convert TIME, read as wall-clock time in FROM, to TO."""

    with _handle_errors():
        report = _service(AppSettings()).convert(from_zone, to_zone, time_value)
    if as_json:
        _print_json(report.model_dump(mode="json", by_alias=True))
        return
    _console.print(build_conversion_table(report))


@app.command()
def zones(
    contains: str | None = typer.Option(None, "--contains", "-c", help="Case-insensitive filter."),
    as_json: bool = typer.Option(False, "--json", help="Print a JSON array."),
) -> None:
    """List known time zone identifiers."""

    names = _service(AppSettings()).list_zones()
    if contains:
        needle = contains.lower()
        names = [name for name in names if needle in name.lower()]
    if as_json:
        _print_json(names)
        return
    _console.print(build_zones_table(names))


@app.command("next-change")
def next_change(zone: str = typer.Argument(..., help="IANA zone, e.g. America/New_York.")) -> None:
    """Next instant at which ZONE enters or leaves DST."""

    with _handle_errors():
        result = _service(AppSettings()).next_change(zone)
    if result is None:
        typer.echo("none")
        return
    typer.echo(format_instant(result))


def run() -> None:
    # Workaround for UnicodeEncodeError on Windows terminals (cp1252 vs utf-8).
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()


if __name__ == "__main__":
    run()
