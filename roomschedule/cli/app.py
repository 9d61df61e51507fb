"""
Main CLI application using Typer.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Dict, List, Optional, Sequence, Tuple

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import ScheduleConfig, get_default_config_path
from ..domain import queries
from ..domain.clock import format_clock
from ..domain.exceptions import ScheduleError
from ..domain.models import Appointment, Day, TimeRange
from ..domain.schedule import Schedule
from ..services.schedule_service import ScheduleService, build_schedule, store_for_path

app = typer.Typer(
    name="roomschedule",
    help="Book rooms and look up free slots in a room schedule",
    add_completion=False
)

console = Console()

DEFAULT_APPOINTMENTS_FILE = Path("appointments.json")

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./schedule.yaml")]
AppointmentsOption = Annotated[Path, typer.Option("--appointments", "-a", help="Appointment file (.json or .csv)")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _open_schedule(config_file: Optional[Path], appointments: Path) -> Tuple[ScheduleConfig, ScheduleService]:
    """Load configuration, build the schedule and read the appointment file into it."""
    config_path = config_file or get_default_config_path()
    config = ScheduleConfig.load_from_yaml(config_path)

    service = ScheduleService(build_schedule(config), store_for_path(appointments, config))
    service.load(appointments)
    return config, service


def _parse_date(value: Optional[str], label: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as e:
        raise ValueError(f"Invalid {label} '{value}' (expected YYYY-MM-DD): {e}") from e


def _parse_data(items: Optional[Sequence[str]]) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for item in items or []:
        key, separator, value = item.partition("=")
        if not separator or not key.strip():
            raise ValueError(f"Data must look like key=value, got '{item}'")
        data[key.strip()] = value.strip()
    return data


def _build_time(
    config: ScheduleConfig,
    start: str,
    end: str,
    on: Optional[str],
    day: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
) -> TimeRange:
    """
    Build a time range either for a single date (``--on``) or for a week day
    across a date range (``--day`` with optional ``--from``/``--to``).
    """
    if on:
        return TimeRange.on(_parse_date(on, "date"), start, end)
    if not day:
        raise ValueError("Either --on DATE or --day DAY is required.")

    return TimeRange(
        day=Day.from_name(day),
        start=start,
        end=end,
        start_date=_parse_date(date_from, "start date") or config.start_date,
        end_date=_parse_date(date_to, "end date") or config.end_date,
    )


def _search(
    schedule: Schedule,
    appointments: Sequence[Appointment],
    *,
    room: Optional[str],
    on: Optional[str],
    day: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
    start: Optional[str],
    end: Optional[str],
    duration: Optional[str],
) -> List[Appointment]:
    """Narrow an appointment collection with whichever filters were given."""
    results = list(appointments)

    if room:
        results = queries.find_by_room(results, schedule.get_room_by_name(room))

    if on:
        results = queries.find_by_date(results, _parse_date(on, "date"))

    window_start = _parse_date(date_from, "start date") or (schedule.availability and schedule.availability.start_date)
    window_end = _parse_date(date_to, "end date") or (schedule.availability and schedule.availability.end_date)

    if start and duration:
        results = queries.find_by_date_time_duration(results, window_start, window_end, start, duration)
    elif start and end and day:
        results = queries.find_by_day_and_period(results, Day.from_name(day), window_start, window_end, start, end)
    elif start and end:
        results = queries.find_by_date_time(results, window_start, window_end, start, end)
    elif start or end or duration:
        raise ValueError("Use --start together with --end or --duration.")
    elif day:
        results = queries.find_by_criteria(results, lambda a: a.time.day == Day.from_name(day))

    return results


def _print_appointments(title: str, appointments: Sequence[Appointment], limit: int) -> None:
    if not appointments:
        console.print("[yellow]⚠ No matching appointments.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Room", style="bold yellow")
    table.add_column("Day")
    table.add_column("Dates")
    table.add_column("Time")
    table.add_column("Data", style="dim")

    ordered = sorted(appointments, key=lambda a: (a.time.start_date, a.room.name, a.time.start))
    for appointment in ordered[:limit]:
        time = appointment.time
        dates = time.start_date.format("YYYY-MM-DD")
        if not time.is_single_day():
            dates += f" – {time.end_date.format('YYYY-MM-DD')}"
        table.add_row(
            appointment.room.name,
            time.day.name.title(),
            dates,
            f"{format_clock(time.start)} – {format_clock(time.end)}",
            ", ".join(f"{key}={value}" for key, value in appointment.data.items()),
        )

    console.print()
    console.print(table)
    if len(ordered) > limit:
        console.print(f"[dim]… {len(ordered) - limit} more (use --limit)[/dim]")
    console.print()


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command()
def rooms(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List all configured rooms.
    """
    _setup_logging(verbose)
    try:
        config_path = config_file or get_default_config_path()
        config = ScheduleConfig.load_from_yaml(config_path)

        room_list = config.build_rooms()
        if not room_list:
            console.print("[yellow]No rooms defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured rooms",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Name", style="bold yellow")
        table.add_column("Capacity", justify="right")
        table.add_column("Equipment", style="dim")

        for room in room_list:
            table.add_row(
                room.name,
                str(room.capacity),
                ", ".join(f"{item.name} ×{item.amount}" for item in room.equipment)
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def free(
    room: Annotated[Optional[str], typer.Option("--room", "-r", help="Only this room")] = None,
    on: Annotated[Optional[str], typer.Option("--on", help="Only this date (YYYY-MM-DD)")] = None,
    day: Annotated[Optional[str], typer.Option("--day", help="Only this week day (e.g. MONDAY)")] = None,
    date_from: Annotated[Optional[str], typer.Option("--from", help="Window start date (YYYY-MM-DD)")] = None,
    date_to: Annotated[Optional[str], typer.Option("--to", help="Window end date (YYYY-MM-DD)")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Required start clock (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Required end clock (HH:MM)")] = None,
    duration: Annotated[Optional[str], typer.Option("--duration", "-d", help="Required length after --start (minutes or H:MM)")] = None,
    limit: Annotated[int, typer.Option("--limit", help="Show at most this many rows")] = 50,
    config_file: ConfigOption = None,
    appointments: AppointmentsOption = DEFAULT_APPOINTMENTS_FILE,
    verbose: VerboseOption = False,
):
    """
    Show free slots.

    Examples:

        roomschedule free --on 2023-01-02

        roomschedule free --room Raf01 --from 2023-01-02 --to 2023-01-06 --start 10:00 --duration 90
    """
    _setup_logging(verbose)
    try:
        _, service = _open_schedule(config_file, appointments)
        schedule = service.schedule
        results = _search(
            schedule, schedule.free_appointments,
            room=room, on=on, day=day, date_from=date_from, date_to=date_to,
            start=start, end=end, duration=duration,
        )
        _print_appointments(f"{len(results)} free slot(s)", results, limit)

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def reserved(
    room: Annotated[Optional[str], typer.Option("--room", "-r", help="Only this room")] = None,
    on: Annotated[Optional[str], typer.Option("--on", help="Only reservations starting on this date (YYYY-MM-DD)")] = None,
    day: Annotated[Optional[str], typer.Option("--day", help="Only this week day (e.g. MONDAY)")] = None,
    date_from: Annotated[Optional[str], typer.Option("--from", help="Window start date (YYYY-MM-DD)")] = None,
    date_to: Annotated[Optional[str], typer.Option("--to", help="Window end date (YYYY-MM-DD)")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Start clock the reservation must cover (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End clock the reservation must cover (HH:MM)")] = None,
    duration: Annotated[Optional[str], typer.Option("--duration", "-d", help="Length after --start to cover (minutes or H:MM)")] = None,
    data: Annotated[Optional[List[str]], typer.Option("--data", help="Only reservations with this key=value (repeatable)")] = None,
    limit: Annotated[int, typer.Option("--limit", help="Show at most this many rows")] = 50,
    config_file: ConfigOption = None,
    appointments: AppointmentsOption = DEFAULT_APPOINTMENTS_FILE,
    verbose: VerboseOption = False,
):
    """
    Show reservations.
    """
    _setup_logging(verbose)
    try:
        _, service = _open_schedule(config_file, appointments)
        schedule = service.schedule
        results = _search(
            schedule, schedule.reserved_appointments,
            room=room, on=on, day=day, date_from=date_from, date_to=date_to,
            start=start, end=end, duration=duration,
        )
        if data:
            results = queries.find_by_data(results, _parse_data(data))
        _print_appointments(f"{len(results)} reservation(s)", results, limit)

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def book(
    room: Annotated[str, typer.Argument(help="Room name")],
    start: Annotated[str, typer.Argument(help="Start clock (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End clock (HH:MM)")],
    on: Annotated[Optional[str], typer.Option("--on", help="Book a single date (YYYY-MM-DD)")] = None,
    day: Annotated[Optional[str], typer.Option("--day", help="Book this week day across --from/--to")] = None,
    date_from: Annotated[Optional[str], typer.Option("--from", help="First date (defaults to calendar start)")] = None,
    date_to: Annotated[Optional[str], typer.Option("--to", help="Last date (defaults to calendar end)")] = None,
    data: Annotated[Optional[List[str]], typer.Option("--data", help="Payload as key=value (repeatable)")] = None,
    config_file: ConfigOption = None,
    appointments: AppointmentsOption = DEFAULT_APPOINTMENTS_FILE,
    verbose: VerboseOption = False,
):
    """
    Reserve a room and save the appointment file.

    Examples:

        roomschedule book Raf01 10:00 12:00 --on 2023-01-02 --data subject=Math

        roomschedule book Raf01 08:00 10:00 --day MONDAY --from 2023-01-02 --to 2023-03-27
    """
    _setup_logging(verbose)
    try:
        config, service = _open_schedule(config_file, appointments)
        schedule = service.schedule

        appointment = Appointment(
            time=_build_time(config, start, end, on, day, date_from, date_to),
            room=schedule.get_room_by_name(room),
            data=_parse_data(data),
        )
        schedule.add_appointment(appointment)
        service.save(appointments)

        console.print(f"[green]✓ Booked {appointment}[/green]")

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def cancel(
    room: Annotated[str, typer.Argument(help="Room name")],
    start: Annotated[str, typer.Argument(help="Start clock (HH:MM)")],
    end: Annotated[str, typer.Argument(help="End clock (HH:MM)")],
    on: Annotated[Optional[str], typer.Option("--on", help="Reservation date (YYYY-MM-DD)")] = None,
    day: Annotated[Optional[str], typer.Option("--day", help="Reservation week day")] = None,
    date_from: Annotated[Optional[str], typer.Option("--from", help="Reservation first date")] = None,
    date_to: Annotated[Optional[str], typer.Option("--to", help="Reservation last date")] = None,
    config_file: ConfigOption = None,
    appointments: AppointmentsOption = DEFAULT_APPOINTMENTS_FILE,
    verbose: VerboseOption = False,
):
    """
    Cancel a reservation and save the appointment file.
    """
    _setup_logging(verbose)
    try:
        config, service = _open_schedule(config_file, appointments)
        schedule = service.schedule

        appointment = Appointment(
            time=_build_time(config, start, end, on, day, date_from, date_to),
            room=schedule.get_room_by_name(room),
        )
        if appointment not in schedule.reserved_appointments:
            console.print(f"[yellow]⚠ No reservation {appointment}, nothing to cancel.[/yellow]")
            return

        schedule.delete_appointment(appointment)
        service.save(appointments)
        console.print(f"[green]✓ Cancelled {appointment}[/green]")

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def move(
    room: Annotated[str, typer.Argument(help="Room name")],
    start: Annotated[str, typer.Argument(help="Current start clock (HH:MM)")],
    end: Annotated[str, typer.Argument(help="Current end clock (HH:MM)")],
    new_start: Annotated[str, typer.Argument(help="New start clock (HH:MM)")],
    new_end: Annotated[str, typer.Argument(help="New end clock (HH:MM)")],
    on: Annotated[Optional[str], typer.Option("--on", help="Current date (YYYY-MM-DD)")] = None,
    day: Annotated[Optional[str], typer.Option("--day", help="Current week day")] = None,
    date_from: Annotated[Optional[str], typer.Option("--from", help="Current first date")] = None,
    date_to: Annotated[Optional[str], typer.Option("--to", help="Current last date")] = None,
    new_room: Annotated[Optional[str], typer.Option("--new-room", help="Move to another room")] = None,
    new_on: Annotated[Optional[str], typer.Option("--new-on", help="Move to another date (single-date reservations)")] = None,
    config_file: ConfigOption = None,
    appointments: AppointmentsOption = DEFAULT_APPOINTMENTS_FILE,
    verbose: VerboseOption = False,
):
    """
    Move a reservation to another time (and optionally room or date), keeping its data.
    """
    _setup_logging(verbose)
    try:
        config, service = _open_schedule(config_file, appointments)
        schedule = service.schedule

        wanted = Appointment(
            time=_build_time(config, start, end, on, day, date_from, date_to),
            room=schedule.get_room_by_name(room),
        )
        old = next((a for a in schedule.reserved_appointments if a == wanted), wanted)

        if new_on:
            new_time = TimeRange.on(_parse_date(new_on, "date"), new_start, new_end)
        else:
            new_time = old.time.with_clock(new_start, new_end)
        new = Appointment(
            time=new_time,
            room=schedule.get_room_by_name(new_room) if new_room else old.room,
            data=dict(old.data),
        )

        schedule.change_appointment(old, new)
        service.save(appointments)
        console.print(f"[green]✓ Moved {old} → {new}[/green]")

    except (FileNotFoundError, ScheduleError, ValueError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]roomschedule[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
