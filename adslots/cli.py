"""
Slot scheduler CLI.

Works against the JSON files in a data directory. Each invocation is its
own process, so writes are serialized only within one command: do not run
commands that change the schedule (book, cancel, prune, campaigns)
concurrently against the same data directory.

Usage:
    adslots census
    adslots expand GP-001,S1GP-002-001
    adslots availability GP-001 --duration 5 --weeks 2 --start 2024-01-01
    adslots book AD-010124-001 GP-001 --duration 10 --weeks 4
    adslots cancel AD-010124-001
    adslots prune --today 2024-03-01
    adslots campaigns
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .campaigns.models import CampaignStatus
from .config import get_settings
from .errors import SchedulerError
from .groups.census import compute_census
from .groups.index import GroupIndex
from .repositories.json_files import (
    JsonCampaignRepository,
    JsonDisplayRepository,
    JsonGroupRepository,
    JsonScheduleRepository,
)
from .scheduling.models import parse_day
from .scheduling.service import AvailabilityReport, SlotScheduler

app = typer.Typer(
    name="adslots",
    help=(
        "Display-network slot scheduler: availability, bookings and queued campaigns. "
        "Run one schedule-changing command at a time per data directory."
    ),
    add_completion=False,
)
console = Console()

EXIT_INFEASIBLE = 2

DataDirOption = typer.Option(None, "--data-dir", help="Directory holding the JSON collections")

STATUS_STYLES = {
    CampaignStatus.ACTIVE: "green",
    CampaignStatus.PAUSED: "cyan",
    CampaignStatus.QUEUED: "yellow",
    CampaignStatus.COMPLETED: "dim",
    CampaignStatus.DRAFT: "dim",
}


def parse_group_ids(value: str) -> list[str]:
    """Parse a comma-separated group id list."""
    ids = [s.strip() for s in value.split(",") if s.strip()]
    if not ids:
        raise typer.BadParameter("At least one group id is required")
    return ids


def _day(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_day(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid date '{value}', expected YYYY-MM-DD")


def _scheduler(data_dir: Optional[Path]) -> SlotScheduler:
    settings = get_settings()
    data_dir = data_dir or settings.data_dir
    return SlotScheduler(
        groups=JsonGroupRepository(data_dir),
        displays=JsonDisplayRepository(data_dir),
        schedules=JsonScheduleRepository(data_dir),
        campaigns=JsonCampaignRepository(data_dir),
        settings=settings,
    )


def _run(coro):
    """Run a scheduler coroutine, turning scheduler errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except SchedulerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def census(data_dir: Optional[Path] = DataDirOption):
    """Show every group with its display count."""
    scheduler = _scheduler(data_dir)
    try:
        index = GroupIndex.build(scheduler.groups.load())
        counts = compute_census(index, scheduler.displays.load())
    except SchedulerError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Display Census")
    table.add_column("Group", style="cyan")
    table.add_column("Path")
    table.add_column("Displays", justify="right", style="green")

    for root in index.roots:
        for gid in index.subtree(root):
            table.add_row(gid, " / ".join(index.path(gid)), str(counts.get(gid, 0)))

    console.print(table)


@app.command()
def expand(
    groups: str = typer.Argument(..., help="Selected group ids (comma-separated)"),
    data_dir: Optional[Path] = DataDirOption,
):
    """Expand selected groups to the groups that carry displays."""
    scheduler = _scheduler(data_dir)
    bearing = _run(scheduler.expand_selection(parse_group_ids(groups)))
    for gid in bearing:
        console.print(gid)


def _print_availability(report: AvailabilityReport) -> None:
    table = Table(title="Availability")
    table.add_column("Group", style="cyan")
    table.add_column("Displays", justify="right")
    table.add_column("Free seconds by week", style="green")
    for group in report.groups:
        table.add_row(
            group.group_id,
            str(group.total_displays),
            ", ".join(f"{s:g}" for s in group.free_seconds_by_week),
        )
    console.print(table)


@app.command()
def availability(
    groups: str = typer.Argument(..., help="Selected group ids (comma-separated)"),
    duration: float = typer.Option(5.0, "--duration", help="Seconds per loop"),
    weeks: int = typer.Option(1, "--weeks", min=1, help="Campaign length in weeks"),
    start: Optional[str] = typer.Option(None, "--start", help="Earliest start day (default: today)"),
    data_dir: Optional[Path] = DataDirOption,
):
    """Preview the earliest start for a campaign without booking it."""
    scheduler = _scheduler(data_dir)
    start_from = _day(start)
    report = _run(scheduler.preview(parse_group_ids(groups), duration, weeks, start_from))

    if not report.feasible:
        console.print(
            f"[yellow]No slot within {scheduler.finder.horizon_days} days "
            f"of {start_from.isoformat()}[/yellow]"
        )
        raise typer.Exit(code=EXIT_INFEASIBLE)

    note = " (fits now)" if report.fits_now else ""
    console.print(
        f"[bold green]Earliest start: {report.earliest_start_date.isoformat()}{note}[/bold green]"
    )
    _print_availability(report)


@app.command()
def book(
    campaign_id: str = typer.Argument(..., help="Campaign id"),
    groups: str = typer.Argument(..., help="Selected group ids (comma-separated)"),
    duration: float = typer.Option(5.0, "--duration", help="Seconds per loop"),
    weeks: int = typer.Option(1, "--weeks", min=1, help="Campaign length in weeks"),
    start: Optional[str] = typer.Option(None, "--start", help="Earliest start day (default: today)"),
    data_dir: Optional[Path] = DataDirOption,
):
    """Book a campaign at the earliest feasible day."""
    scheduler = _scheduler(data_dir)
    start_from = _day(start)

    async def _book():
        bearing = await scheduler.expand_selection(parse_group_ids(groups))
        return await scheduler.book_earliest(campaign_id, bearing, duration, weeks, start_from)

    result = _run(_book())
    if not result.booked:
        console.print(f"[yellow]Campaign {campaign_id} does not fit within the horizon[/yellow]")
        raise typer.Exit(code=EXIT_INFEASIBLE)

    console.print(
        f"[bold green]Booked {campaign_id}[/bold green] "
        f"{result.start_date.isoformat()} -> {result.end_date.isoformat()} "
        f"on {', '.join(result.group_ids)}"
    )


@app.command()
def cancel(
    campaign_id: str = typer.Argument(..., help="Campaign id"),
    data_dir: Optional[Path] = DataDirOption,
):
    """Release every booking held by a campaign."""
    scheduler = _scheduler(data_dir)
    if _run(scheduler.remove_campaign_bookings(campaign_id)):
        console.print(f"Released bookings of {campaign_id}")
    else:
        console.print(f"[yellow]No bookings held by {campaign_id}[/yellow]")


@app.command()
def prune(
    today: Optional[str] = typer.Option(None, "--today", help="Current day (default: today)"),
    data_dir: Optional[Path] = DataDirOption,
):
    """Drop bookings that have ended."""
    scheduler = _scheduler(data_dir)
    changed = _run(scheduler.prune_expired(_day(today)))
    console.print("Pruned expired bookings" if changed else "Nothing to prune")


@app.command()
def campaigns(
    today: Optional[str] = typer.Option(None, "--today", help="Current day (default: today)"),
    data_dir: Optional[Path] = DataDirOption,
):
    """List campaigns, promoting queued ones that now fit."""
    scheduler = _scheduler(data_dir)
    day = _day(today)
    listed = _run(scheduler.list_campaigns(day))

    table = Table(title="Campaigns")
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Days left", justify="right")
    table.add_column("Groups")

    for campaign in listed:
        status = campaign.status(day)
        style = STATUS_STYLES[status]
        table.add_row(
            campaign.id,
            campaign.name,
            f"[{style}]{status.value}[/{style}]",
            campaign.start_date.isoformat() if campaign.start_date else "-",
            campaign.end_date.isoformat() if campaign.end_date else "-",
            str(campaign.remaining_days(day)),
            ", ".join(campaign.requested_groups),
        )

    console.print(table)


if __name__ == "__main__":
    app()
