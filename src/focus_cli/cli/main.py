"""Main CLI interface for focus-cli."""

import logging
import uuid
from datetime import datetime
from typing import List, NoReturn, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from focus_cli import __version__
from focus_cli.core.config import DB_PATH_ENV, get_database_path
from focus_cli.core.duration import format_hm, format_hms
from focus_cli.core.errors import ErrorKind, FocusError
from focus_cli.core.filters import SessionFilterField, SummaryFilterField, parse_filter
from focus_cli.core.parsing import (
    DATE_FORMAT,
    parse_clock,
    parse_date,
    parse_time_range,
    plan_edit,
)
from focus_cli.core.sorting import SessionSortField, Sort, SummarySortField, parse_sort
from focus_cli.core.store import SessionStore
from focus_cli.models.session import SHORT_ID_LENGTH, Session
from focus_cli.models.summary import DailySummary

console = Console()
logger = logging.getLogger(__name__)

TIME_FORMAT = "%I:%M %p"


def _now() -> datetime:
    """Current local time; patched in tests."""
    return datetime.now()


def _setup_logging(verbose: bool) -> None:
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    package_logger = logging.getLogger("focus_cli")
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _fail(error: FocusError) -> NoReturn:
    """Report a core error and abort with a non-zero exit code."""
    console.print(f"[red]Error: {escape(error.message)}[/red]")
    if error.kind is ErrorKind.AMBIGUOUS_ID:
        for session_id in error.ids:
            console.print(f"  [yellow]{session_id[:SHORT_ID_LENGTH]}[/yellow]")
    logger.debug("Command failed with %s", error.kind.value)
    raise click.Abort() from error


def _store(ctx_obj: dict) -> SessionStore:
    return SessionStore(ctx_obj["db_path"])


@click.group()
@click.version_option(version=__version__, prog_name="focus")
@click.option(
    "--db",
    "db_path",
    envvar=DB_PATH_ENV,
    type=click.Path(dir_okay=False),
    help=f"Path to the session database (env: {DB_PATH_ENV})",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def main(ctx: click.Context, db_path: Optional[str], verbose: bool):
    """focus - Track focus sessions from the command line."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = get_database_path(db_path)
    logger.debug("Using database %s", ctx.obj["db_path"])


@main.command()
@click.pass_obj
def start(obj: dict):
    """Start a new focus session."""
    try:
        with _store(obj) as store:
            session = store.create_session(str(uuid.uuid4()), _now())
    except FocusError as e:
        _fail(e)

    console.print(
        f"[green]✅ Focus session started at {session.start_time:{TIME_FORMAT}} "
        f"(Session ID: {session.short_id})[/green]"
    )


@main.command()
@click.pass_obj
def stop(obj: dict):
    """Stop the current focus session."""
    try:
        with _store(obj) as store:
            active = store.get_open_session()
            if active is None:
                raise FocusError(ErrorKind.NOT_FOUND, "No active session found to stop")
            session = store.close_session(active.id, _now())
    except FocusError as e:
        _fail(e)

    console.print(
        f"[green]✅ Focus session stopped at {session.stop_time:{TIME_FORMAT}} "
        f"(Session ID: {session.short_id})[/green]"
    )
    console.print(f"⏳ Duration: {format_hms(session.duration)}")


@main.command()
@click.pass_obj
def status(obj: dict):
    """Show the running session, if any."""
    with _store(obj) as store:
        session = store.get_open_session()

    if session is None:
        console.print("[yellow]No active session[/yellow]")
        return

    console.print(f"[bold]Active session:[/bold] {session.short_id}")
    console.print(
        f"[bold]Started:[/bold] {session.start_time:{DATE_FORMAT} {TIME_FORMAT}}"
    )
    console.print(f"[bold]Elapsed:[/bold] {format_hms(session.elapsed(_now()))}")


@main.command()
@click.argument("time_range")
@click.option("--date", "day", help="Date of the session (YYYY-MM-DD), default today")
@click.pass_obj
def add(obj: dict, time_range: str, day: Optional[str]):
    """Add a finished session, e.g. "08:00 AM - 10:00 AM"."""
    try:
        session_day = parse_date(day) if day else _now().date()
        start_time, stop_time = parse_time_range(time_range, session_day)
        with _store(obj) as store:
            session = store.create_closed_session(
                str(uuid.uuid4()), start_time, stop_time
            )
    except FocusError as e:
        _fail(e)

    console.print(
        f"[green]✅ Session added: {session.start_time:{TIME_FORMAT}} - "
        f"{session.stop_time:{TIME_FORMAT}} ({format_hms(session.duration)}) "
        f"(Session ID: {session.short_id})[/green]"
    )


@main.command()
@click.argument("session_id")
@click.option("--start", "start_clock", help='New start time, e.g. "09:00 AM"')
@click.option("--stop", "stop_clock", help='New stop time, e.g. "05:30 PM"')
@click.option("--date", "day", help="Move the session to this date (YYYY-MM-DD)")
@click.pass_obj
def edit(
    obj: dict,
    session_id: str,
    start_clock: Optional[str],
    stop_clock: Optional[str],
    day: Optional[str],
):
    """Edit a session by ID prefix."""
    try:
        new_day = parse_date(day) if day else None
        new_start = parse_clock(start_clock) if start_clock else None
        new_stop = parse_clock(stop_clock) if stop_clock else None

        with _store(obj) as store:
            session = store.resolve_prefix(session_id)
            start_time, stop_time = plan_edit(
                session, new_day, new_start, new_stop, now=_now()
            )
            updated = store.update_session(session.id, start_time, stop_time)
    except FocusError as e:
        _fail(e)

    console.print(f"[green]✅ Session {updated.short_id} updated[/green]")
    _print_sessions([updated])


@main.command(name="list")
@click.option(
    "--sort", "-s", "sort_text", help="Sort by date or duration, e.g. duration:desc"
)
@click.option(
    "--filter", "-f", "filter_text", help="Filter sessions, e.g. duration>=1h30m"
)
@click.pass_obj
def list_command(obj: dict, sort_text: Optional[str], filter_text: Optional[str]):
    """List all focus sessions."""
    try:
        sort = (
            parse_sort(sort_text, SessionSortField)
            if sort_text
            else Sort.default(SessionSortField)
        )
        session_filter = (
            parse_filter(filter_text, SessionFilterField) if filter_text else None
        )
        with _store(obj) as store:
            sessions = store.list_sessions(sort, session_filter)
    except FocusError as e:
        _fail(e)

    if not sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    _print_sessions(sessions)


@main.command()
@click.argument("session_id")
@click.pass_obj
def delete(obj: dict, session_id: str):
    """Delete a session by ID prefix."""
    try:
        with _store(obj) as store:
            session = store.resolve_prefix(session_id)
            store.delete_session(session.id)
    except FocusError as e:
        _fail(e)

    console.print(f"[green]✅ Successfully deleted session: {session.id}[/green]")


@main.command()
@click.option(
    "--sort",
    "-s",
    "sort_text",
    help="Sort by date, total or average, e.g. total:desc",
)
@click.option("--filter", "-f", "filter_text", help="Filter days, e.g. total>=8h")
@click.pass_obj
def summary(obj: dict, sort_text: Optional[str], filter_text: Optional[str]):
    """Show focus time per day."""
    try:
        sort = (
            parse_sort(sort_text, SummarySortField)
            if sort_text
            else Sort.default(SummarySortField)
        )
        day_filter = (
            parse_filter(filter_text, SummaryFilterField) if filter_text else None
        )
        with _store(obj) as store:
            rows = store.summary(sort, day_filter)
    except FocusError as e:
        _fail(e)

    if not rows:
        console.print("[yellow]No session data available.[/yellow]")
        return

    _print_summary(rows)


def _print_sessions(sessions: List[Session]) -> None:
    table = Table(title="Focus Sessions")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Date", style="green")
    table.add_column("Start Time", style="magenta")
    table.add_column("Stop Time", style="magenta")
    table.add_column("Duration", style="blue")

    for session in sessions:
        stop_time = (
            "N/A" if session.stop_time is None else f"{session.stop_time:{TIME_FORMAT}}"
        )
        table.add_row(
            session.short_id,
            f"{session.start_time:{DATE_FORMAT}}",
            f"{session.start_time:{TIME_FORMAT}}",
            stop_time,
            format_hm(session.duration),
        )

    console.print(table)


def _print_summary(rows: List[DailySummary]) -> None:
    table = Table(title="Daily Summary")
    table.add_column("SL", style="dim", justify="right")
    table.add_column("Date", style="green")
    table.add_column("Average", style="blue")
    table.add_column("Total", style="blue")
    table.add_column("Goal")

    for row in rows:
        table.add_row(
            str(row.sl), f"{row.date:{DATE_FORMAT}}", row.average, row.total, row.goal
        )

    console.print(table)


if __name__ == "__main__":
    main()
