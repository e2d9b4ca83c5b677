"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, Optional

import pendulum
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.http_store import HttpMeetingStore
from ..adapters.json_store import JsonFileStore
from ..adapters.memory_store import InMemoryStore, seed_sample_data
from ..config import AppConfig
from ..domain.exceptions import SchedulerError
from ..domain.models import BusinessHours
from ..domain.results import ScheduleStatus
from ..services.scheduler import MeetingScheduler
from .validation import MeetingRequestModel

app = typer.Typer(
    name="slotscheduler",
    help="Schedule meetings at the earliest slot all participants share",
    add_completion=False
)

console = Console()

EXIT_NO_SLOT = 2

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", help="JSON data file. Overrides data_file from the config."),
]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], data_file: Optional[Path]):
    """Load configuration and open the configured store."""
    config = AppConfig.load(config_file)
    _configure_logging(config.log_level)

    if data_file is not None:
        store = JsonFileStore(data_file, timezone=config.timezone)
    elif config.store_url:
        store = HttpMeetingStore(config.store_url, timezone=config.timezone)
    else:
        store = JsonFileStore(config.data_file, timezone=config.timezone)

    return config, store


def _build_scheduler(config: AppConfig, store) -> MeetingScheduler:
    return MeetingScheduler(
        directory=store,
        store=store,
        business_hours=BusinessHours.from_config(config.business_hours),
    )


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _meetings_table(title: str, meetings) -> Table:
    table = Table(
        title=title,
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="bold yellow")
    table.add_column("When")
    table.add_column("Participants", style="dim")

    for details in meetings:
        table.add_row(
            str(details.meeting.id),
            details.meeting.format_display(),
            ", ".join(details.participant_names),
        )

    return table


@app.command()
def schedule(
    participant_ids: Annotated[List[int], typer.Argument(help="Participant ids, e.g. '1 2 3'")],
    start: Annotated[str, typer.Option("--start", help="Earliest start (YYYY-MM-DD HH:mm)")],
    end: Annotated[str, typer.Option("--end", help="Latest end (YYYY-MM-DD HH:mm)")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Book a meeting at the earliest slot all participants share.

    Examples:

        slotscheduler schedule 1 2 --start "2024-11-25 09:00" --end "2024-11-25 17:00"

        slotscheduler schedule 1 2 3 -d 60 --start 2024-11-25T08:00 --end 2024-11-26T18:00
    """
    try:
        config, store = _load(config_file, data_file)

        try:
            request = MeetingRequestModel(
                participant_ids=participant_ids,
                duration_minutes=duration if duration is not None else config.defaults.duration_minutes,
                earliest_start=start,
                latest_end=end,
                timezone=config.timezone,
            ).to_request()
        except (ValidationError, ValueError) as e:
            _fail(f"Invalid request: {e}")

        hours = config.business_hours
        console.print("[bold cyan]📊 Summary:[/bold cyan]")
        console.print(f"   Participants: {', '.join(str(pid) for pid in request.participant_ids)}")
        console.print(f"   Window: {request.earliest_start.format('YYYY-MM-DD HH:mm')} - {request.latest_end.format('YYYY-MM-DD HH:mm')}")
        console.print(f"   Duration: {request.duration_minutes} minutes")
        console.print(f"   Business hours: {hours.start} - {hours.end}")
        console.print()

        scheduler = _build_scheduler(config, store)
        result = asyncio.run(scheduler.schedule(request))

        if result.status is ScheduleStatus.NO_SLOT:
            console.print(
                f"[yellow]⚠ {result.reason}.[/yellow]\n"
                "Try a wider window or a shorter duration."
            )
            raise typer.Exit(EXIT_NO_SLOT)

        meeting = result.raise_for_status()

        console.print(Panel.fit(
            f"[bold green]✓ Meeting scheduled[/bold green]\n\n"
            f"[bold]ID:[/bold] {meeting.id}\n"
            f"[bold]When:[/bold] {meeting.format_display()}\n"
            f"[bold]Participants:[/bold] {', '.join(str(pid) for pid in meeting.participant_ids)}",
            title="Meeting"
        ))

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def add_participant(
    name: Annotated[str, typer.Argument(help="Display name of the participant")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Register a new participant.
    """
    try:
        _, store = _load(config_file, data_file)
        participant = asyncio.run(store.add_participant(name))
        console.print(f"[green]✓ Added participant {participant.id}: {participant.name}[/green]")

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def list_participants(
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List all known participants.
    """
    try:
        _, store = _load(config_file, data_file)
        participants = asyncio.run(store.list_participants())

        if not participants:
            console.print("[yellow]No participants registered.[/yellow]")
            return

        table = Table(
            title="Participants",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")

        for participant in participants:
            table.add_row(str(participant.id), participant.name)

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def list_meetings(
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List all scheduled meetings.
    """
    try:
        config, store = _load(config_file, data_file)
        meetings = asyncio.run(_build_scheduler(config, store).list_meetings())

        if not meetings:
            console.print("[yellow]No meetings scheduled.[/yellow]")
            return

        console.print()
        console.print(_meetings_table("Meetings", meetings))
        console.print()

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def show_meeting(
    meeting_id: Annotated[int, typer.Argument(help="Meeting id")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show a single meeting.
    """
    try:
        config, store = _load(config_file, data_file)
        details = asyncio.run(_build_scheduler(config, store).get_meeting(meeting_id))

        if details is None:
            _fail(f"Meeting with ID {meeting_id} not found")

        console.print(Panel.fit(
            f"[bold]When:[/bold] {details.meeting.format_display()}\n"
            f"[bold]Participants:[/bold] {', '.join(details.participant_names)}",
            title=f"Meeting {details.meeting.id}"
        ))

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def show_participant(
    participant_id: Annotated[int, typer.Argument(help="Participant id")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show a single participant.
    """
    try:
        config, store = _load(config_file, data_file)
        participant = asyncio.run(_build_scheduler(config, store).get_participant(participant_id))

        if participant is None:
            _fail(f"Participant with ID {participant_id} not found")

        console.print(f"[bold yellow]{participant.id}[/bold yellow]  {participant.name}")

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def participant_meetings(
    participant_id: Annotated[int, typer.Argument(help="Participant id")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    List the meetings a participant attends, earliest first.
    """
    try:
        config, store = _load(config_file, data_file)
        meetings = asyncio.run(_build_scheduler(config, store).participant_meetings(participant_id))

        if meetings is None:
            _fail(f"Participant with ID {participant_id} not found")

        if not meetings:
            console.print("[yellow]No meetings for this participant.[/yellow]")
            return

        console.print()
        console.print(_meetings_table(f"Meetings of participant {participant_id}", meetings))
        console.print()

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def seed(
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Fill an empty store with sample participants and meetings for today.
    """
    try:
        config, store = _load(config_file, data_file)

        if not isinstance(store, InMemoryStore):
            _fail("Seeding is only supported for the local data file.")

        added = asyncio.run(seed_sample_data(store, pendulum.today(config.timezone)))

        if added:
            console.print("[green]✓ Sample data seeded.[/green]")
        else:
            console.print("[yellow]Store already has participants, nothing seeded.[/yellow]")

    except (FileNotFoundError, ValueError, SchedulerError) as e:
        _fail(str(e))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotscheduler[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
