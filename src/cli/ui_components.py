"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Tables are reused by several commands.
"""

from __future__ import annotations

from typing import Iterable

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import ConversionReport, TimeReport, format_instant


def print_banner(console: Console, service_name: str) -> None:
    """Print the welcome banner (skipped in --json mode)."""

    title = Text("tzclock", style="bold cyan")
    subtitle = Text(f"{service_name} • DST search • Conversion", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "[dim]no[/dim]"


def build_time_report_table(report: TimeReport) -> Table:
    table = Table(title=f"Time in {report.zone}", show_header=False)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("UTC", format_instant(report.instant))
    table.add_row("Local", report.formatted)
    table.add_row("Day", report.day_of_week)
    table.add_row("UTC offset", report.utc_offset)
    table.add_row("DST", _yes_no(report.is_dst))
    next_change = format_instant(report.next_dst_change) if report.next_dst_change else "none within horizon"
    table.add_row("Next DST change", next_change)
    return table


def build_conversion_table(report: ConversionReport) -> Table:
    table = Table(title=f"{report.from_zone} → {report.to_zone}")
    table.add_column("Zone", style="cyan", no_wrap=True)
    table.add_column("Local", style="white")
    table.add_column("UTC", style="magenta")
    table.add_row(report.from_zone, report.input_formatted, format_instant(report.input_time))
    table.add_row(report.to_zone, report.converted_formatted, format_instant(report.converted_time))
    table.caption = f"DST in target: {'yes' if report.is_dst_in_target else 'no'} ({report.utc_offset_target})"
    return table


def build_zones_table(zones: Iterable[str]) -> Table:
    table = Table(title="Time zones")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Zone", style="cyan")
    for index, zone in enumerate(zones, start=1):
        table.add_row(str(index), zone)
    return table
