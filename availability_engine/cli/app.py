"""
Main CLI application using Typer.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Annotated, Any, List, Optional

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..adapters.http_store import HttpSlotStore
from ..adapters.json_file_store import JsonFileSlotStore
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import (
    AvailabilityError,
    InvalidTimeFormat,
    InvalidTimezone,
    SlotStoreError,
    UserNotFound,
)
from ..domain.overlap_calculator import OverlapCalculator
from ..domain.validation import DAY_NAMES
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="availability",
    help="Query weekly availability: overlaps, matches and bookable slots",
    add_completion=False,
)

console = Console()

ERROR_CODES = {
    InvalidTimeFormat: "INVALID_TIME_FORMAT",
    InvalidTimezone: "INVALID_TIMEZONE",
    UserNotFound: "USER_NOT_FOUND",
    SlotStoreError: "STORE_ERROR",
}

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print the result as a JSON response envelope."),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Availability engine command line.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    """
    Load the explicit config file, or ./config.yaml when present.

    Without any config file the bundled sample data is used.
    """
    if config_file is not None:
        return AppConfig.load_from_yaml(config_file)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig()


def _build_store(config: AppConfig):
    if config.store.backend == "http":
        return HttpSlotStore(
            base_url=config.store.base_url,
            api_token=config.store.api_token,
            timeout_seconds=config.store.timeout_seconds,
        )
    return JsonFileSlotStore(config.store.data_file)


def _build_service(config: AppConfig, store) -> AvailabilityService:
    calculator = OverlapCalculator(
        reference_date=config.reference_date,
        display_timezone=config.display_timezone,
    )
    return AvailabilityService(store=store, overlap_calculator=calculator)


def _envelope(data: Any) -> str:
    return json.dumps({"success": True, "data": data}, indent=2)


def _error_envelope(exc: Exception) -> str:
    code = next(
        (code for error_type, code in ERROR_CODES.items() if isinstance(exc, error_type)),
        "VALIDATION_ERROR" if isinstance(exc, ValueError) else "INTERNAL_ERROR",
    )
    return json.dumps(
        {
            "success": False,
            "error": {
                "code": code,
                "message": str(exc),
                "timestamp": pendulum.now("UTC").to_iso8601_string(),
                "requestId": str(uuid.uuid4()),
            },
        },
        indent=2,
    )


def _fail(exc: Exception, json_output: bool) -> None:
    if json_output:
        typer.echo(_error_envelope(exc))
    else:
        console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(1)


@app.command()
def overlap(
    user_id: Annotated[str, typer.Argument(help="First user (output uses their timezone)")],
    other_user_id: Annotated[str, typer.Argument(help="Second user")],
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    Show the weekly windows in which two users are both available.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, _build_store(config))
        windows = service.get_overlap(user_id, other_user_id)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope([window.to_dict() for window in windows]))
        return

    if not windows:
        console.print(f"[yellow]⚠ No overlapping availability between {user_id} and {other_user_id}.[/yellow]")
        return

    table = Table(title=f"Overlap {user_id} ↔ {other_user_id}", header_style="bold cyan")
    table.add_column("Day", style="bold yellow")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Minutes", justify="right")
    table.add_column("Timezone", style="dim")

    for window in windows:
        table.add_row(
            DAY_NAMES[window.day_of_week],
            window.start_time,
            window.end_time,
            str(window.duration_minutes),
            window.timezone,
        )

    console.print(table)
    total = sum(window.duration_minutes for window in windows)
    console.print(f"[bold green]✓ {total} minute(s) of shared availability per week[/bold green]")


@app.command()
def matches(
    user_id: Annotated[str, typer.Argument(help="Target user")],
    candidates: Annotated[
        Optional[List[str]],
        typer.Argument(help="Candidate users. Defaults to every user in the data file."),
    ] = None,
    min_overlap: Annotated[
        Optional[int],
        typer.Option("--min-overlap", "-m", help="Minimum weekly overlap in minutes (15-1440)"),
    ] = None,
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    Rank users by how much weekly availability they share with a target.
    """
    try:
        config = _load_config(config_file)
        store = _build_store(config)
        service = _build_service(config, store)

        candidate_ids = list(candidates or [])
        if not candidate_ids:
            if not isinstance(store, JsonFileSlotStore):
                raise ValueError("Candidate users are required when querying the HTTP store.")
            candidate_ids = store.user_ids()

        threshold = min_overlap if min_overlap is not None else config.defaults.min_overlap_minutes
        results = service.find_matches(user_id, candidate_ids, threshold)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope([match.to_dict() for match in results]))
        return

    if not results:
        console.print(f"[yellow]⚠ No users share at least {threshold} minute(s) with {user_id}.[/yellow]")
        return

    table = Table(title=f"Matches for {user_id} (≥ {threshold} min)", header_style="bold cyan")
    table.add_column("User", style="bold yellow")
    table.add_column("Minutes", justify="right")
    table.add_column("Windows", justify="right")

    for match in results:
        table.add_row(match.user_id, str(match.total_overlap_minutes), str(len(match.overlap_windows)))

    console.print(table)

    for match in results:
        console.print(f"\n[bold]{match.user_id}[/bold]")
        for window in match.overlap_windows:
            console.print(f"  {window.format_display()}")


@app.command("list")
def list_availability(
    user_id: Annotated[str, typer.Argument(help="User whose availability to list")],
    day_of_week: Annotated[
        Optional[int],
        typer.Option("--day", "-d", help="Only this day of week, 0 = Sunday"),
    ] = None,
    is_active: Annotated[
        Optional[bool],
        typer.Option("--active/--inactive", help="Only active or only inactive slots"),
    ] = None,
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    List a user's availability slots by day and start time.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, _build_store(config))
        user_slots = service.get_user_availability(user_id, day_of_week=day_of_week, is_active=is_active)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope([slot.to_dict() for slot in user_slots]))
        return

    if not user_slots:
        console.print(f"[yellow]⚠ No matching availability for {user_id}.[/yellow]")
        return

    table = Table(title=f"Availability of {user_id}", header_style="bold cyan")
    table.add_column("Day", style="bold yellow")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Timezone", style="dim")
    table.add_column("Active")

    for slot in user_slots:
        table.add_row(
            DAY_NAMES[slot.day_of_week],
            slot.start_time,
            slot.end_time,
            slot.timezone,
            "✓" if slot.is_active else "✗",
        )

    console.print(table)


@app.command()
def slots(
    user_id: Annotated[str, typer.Argument(help="User whose slots to list")],
    day_of_week: Annotated[int, typer.Argument(help="Day of week, 0 = Sunday")],
    duration: Annotated[
        Optional[int],
        typer.Option("--duration", "-d", help="Slot length in minutes (15-480)"),
    ] = None,
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    List bookable fixed-length slots of a user on one day.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, _build_store(config))
        slot_duration = duration if duration is not None else config.defaults.slot_duration_minutes
        time_slots = service.get_available_time_slots(user_id, day_of_week, slot_duration)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope([slot.to_dict() for slot in time_slots]))
        return

    if not time_slots:
        console.print(
            f"[yellow]⚠ No {slot_duration}-minute slots for {user_id} on {DAY_NAMES[day_of_week]}.[/yellow]"
        )
        return

    console.print(f"[bold green]✓ {len(time_slots)} slot(s) on {DAY_NAMES[day_of_week]}:[/bold green]\n")
    for slot in time_slots:
        console.print(f"  {slot.start_time} – {slot.end_time} ({slot.timezone})")


@app.command()
def check(
    user_id: Annotated[str, typer.Argument(help="User to check")],
    day_of_week: Annotated[int, typer.Argument(help="Day of week, 0 = Sunday")],
    time: Annotated[str, typer.Argument(help="Time as HH:MM")],
    timezone: Annotated[
        Optional[str],
        typer.Option("--timezone", "-t", help="Timezone of TIME; defaults to each slot's own"),
    ] = None,
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    Check whether a user is available at a weekly point in time.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, _build_store(config))
        available = service.is_user_available_at(user_id, day_of_week, time, timezone)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope({"userId": user_id, "isAvailable": available}))
        return

    when = f"{DAY_NAMES[day_of_week]} {time}" + (f" ({timezone})" if timezone else "")
    if available:
        console.print(f"[green]✓ {user_id} is available on {when}[/green]")
    else:
        console.print(f"[yellow]✗ {user_id} is not available on {when}[/yellow]")


@app.command()
def summary(
    user_id: Annotated[str, typer.Argument(help="User to summarise")],
    config_file: ConfigOption = None,
    json_output: JsonOption = False,
):
    """
    Show a user's weekly availability hours per day.
    """
    try:
        config = _load_config(config_file)
        service = _build_service(config, _build_store(config))
        weekly = service.get_weekly_summary(user_id)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, json_output)

    if json_output:
        typer.echo(_envelope(weekly.to_dict()))
        return

    table = Table(title=f"Weekly availability of {user_id}", header_style="bold cyan")
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours", justify="right")
    table.add_column("Slots", justify="right")

    for day in weekly.daily_summary:
        table.add_row(day.day_name, f"{day.hours:g}", str(day.slots))

    console.print(table)
    console.print(f"Total: {weekly.total_weekly_hours:g} h in {weekly.total_slots} slot(s)")


@app.command()
def users(
    config_file: ConfigOption = None,
):
    """
    List the users available in the configured data file.
    """
    try:
        config = _load_config(config_file)
        store = _build_store(config)
    except (AvailabilityError, FileNotFoundError, ValueError) as e:
        _fail(e, False)

    if not isinstance(store, JsonFileSlotStore):
        console.print("[yellow]Listing users is only supported for the file store.[/yellow]")
        return

    user_ids = store.user_ids()
    if not user_ids:
        console.print("[yellow]No users in the data file.[/yellow]")
        return

    table = Table(title="Users", header_style="bold cyan")
    table.add_column("User", style="bold yellow")
    table.add_column("Slots", justify="right")

    for user_id in user_ids:
        table.add_row(user_id, str(len(store.get_slots_for_user(user_id))))

    console.print(table)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]availability-engine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
