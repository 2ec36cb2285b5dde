"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityEvaluator, AvailabilityState
from ..domain.exceptions import PrayerHallError
from ..services.engine import build_evaluator

app = typer.Typer(
    name="prayerhall",
    help="Check pool hall availability around prayer times",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use the built-in default timetable, ignoring configured prayer times.")]

STATE_LABELS = {
    AvailabilityState.VALID: "[green]open[/green]",
    AvailabilityState.IN_PRAYER_WINDOW: "[yellow]prayer time[/yellow]",
    AvailabilityState.OUTSIDE_HOURS: "[red]closed[/red]",
}


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Pool hall availability engine."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load(config_file: Optional[Path], mock: bool) -> tuple[AppConfig, AvailabilityEvaluator]:
    config_path = config_file or get_default_config_path()
    if config_file is not None:
        config = AppConfig.load_from_yaml(config_path)
    else:
        config = AppConfig.load_or_default(config_path)
    if mock:
        console.print("[yellow]⚠  Mock mode: using the built-in default prayer timetable[/yellow]\n")
    return config, build_evaluator(config, mock=mock)


def _parse_when(value: Optional[str], tz: str):
    if value is None:
        return pendulum.now(tz)
    try:
        return pendulum.parse(value, tz=tz)
    except Exception as e:
        console.print(f"[red]Could not parse date/time '{value}': {e}[/red]")
        raise typer.Exit(1)


def _fail(error: Exception):
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def times(
    day: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD), defaults to today")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show prayer times and blocked windows for a day.
    """
    try:
        config, evaluator = _load(config_file, mock)
        target = _parse_when(day, config.timezone)
        prayer_set = evaluator.get_prayer_times(target.date())

        table = Table(
            title=f"Prayer windows {target.format('dddd DD.MM.YYYY')}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Prayer", style="bold yellow")
        table.add_column("Time")
        table.add_column("Blocked", style="dim")

        for instant, window in zip(prayer_set, prayer_set.windows(evaluator.buffer)):
            table.add_row(
                instant.name,
                instant.time.format("HH:mm"),
                f"{window.start.format('HH:mm')} - {window.end.format('HH:mm')}",
            )

        console.print()
        console.print(table)
        console.print(f"   Business hours: {evaluator.business_hours}\n")

    except (FileNotFoundError, ValueError, PrayerHallError) as e:
        _fail(e)


@app.command()
def check(
    when: Annotated[Optional[str], typer.Argument(help="Date/time to check, e.g. '2024-02-10 12:30'. Defaults to now.")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show whether the hall is open at a given instant.
    """
    try:
        config, evaluator = _load(config_file, mock)
        instant = _parse_when(when, config.timezone)
        state = evaluator.classify(instant)

        lines = [
            f"[bold]Time:[/bold] {instant.format('DD.MM.YYYY HH:mm')}",
            f"[bold]Status:[/bold] {STATE_LABELS[state]}",
        ]
        window = evaluator.get_active_window(instant)
        if window is not None:
            lines.append(f"[bold]Prayer window:[/bold] {window}")
        if state is not AvailabilityState.VALID:
            next_time = evaluator.get_next_available_time(instant)
            lines.append(f"[bold]Next available:[/bold] {next_time.format('DD.MM.YYYY HH:mm')}")

        console.print(Panel.fit("\n".join(lines), title="Availability"))

    except (FileNotFoundError, ValueError, PrayerHallError) as e:
        _fail(e)


@app.command()
def check_interval(
    start: Annotated[str, typer.Argument(help="Interval start, e.g. '2024-02-10 11:00'")],
    end: Annotated[str, typer.Argument(help="Interval end, e.g. '2024-02-10 13:00'")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Check whether an interval overlaps any prayer window.
    """
    try:
        config, evaluator = _load(config_file, mock)
        start_dt = _parse_when(start, config.timezone)
        end_dt = _parse_when(end, config.timezone)

        window = evaluator.first_conflicting_window(start_dt, end_dt)
        if window is None:
            console.print("[green]✓ No prayer conflict[/green]")
        else:
            console.print(f"[yellow]⚠ Conflicts with {window}[/yellow]")
            raise typer.Exit(2)

    except (FileNotFoundError, ValueError, PrayerHallError) as e:
        _fail(e)


@app.command()
def next_available(
    start: Annotated[Optional[str], typer.Option("--from", help="Search start, defaults to now")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the next instant at which the hall is open.
    """
    try:
        config, evaluator = _load(config_file, mock)
        origin = _parse_when(start, config.timezone)
        result = evaluator.get_next_available_time(origin)
        console.print(f"[bold green]✓ Next available:[/bold green] {result.format('dddd DD.MM.YYYY HH:mm')}")

    except (FileNotFoundError, ValueError, PrayerHallError) as e:
        _fail(e)


@app.command()
def next_prayer(
    start: Annotated[Optional[str], typer.Option("--from", help="Reference time, defaults to now")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the next prayer.
    """
    try:
        config, evaluator = _load(config_file, mock)
        origin = _parse_when(start, config.timezone)
        prayer = evaluator.get_next_prayer(origin)
        console.print(f"[bold cyan]Next prayer:[/bold cyan] {prayer.name} at {prayer.time.format('DD.MM.YYYY HH:mm')}")

    except (FileNotFoundError, ValueError, PrayerHallError) as e:
        _fail(e)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]prayerhall[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
