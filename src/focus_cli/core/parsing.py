"""Parsing of clock times, time ranges and dates typed on the command line."""

import re
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple

from focus_cli.core.errors import ErrorKind, FocusError
from focus_cli.models.session import Session

_CLOCK_12H_RE = re.compile(r"(\d{1,2}):(\d{2})\s*([ap]m)", re.IGNORECASE)
_CLOCK_24H_RE = re.compile(r"(\d{1,2}):(\d{2})")
_RANGE_RE = re.compile(r"(.+?)\s*-\s*(.+)")

DATE_FORMAT = "%Y-%m-%d"


def parse_clock(text: str) -> time:
    """Parse ``08:30 AM`` / ``8:30pm`` or 24-hour ``20:30`` into a time."""
    value = text.strip()

    match = _CLOCK_12H_RE.fullmatch(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if not 1 <= hours <= 12 or minutes > 59:
            raise _invalid_clock(text)
        hours %= 12
        if match.group(3).lower() == "pm":
            hours += 12
        return time(hours, minutes)

    match = _CLOCK_24H_RE.fullmatch(value)
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise _invalid_clock(text)
        return time(hours, minutes)

    raise _invalid_clock(text)


def parse_time_range(text: str, day: date) -> Tuple[datetime, datetime]:
    """Parse ``"08:00 AM - 10:00 AM"`` into two datetimes on ``day``."""
    match = _RANGE_RE.fullmatch(text.strip())
    if match is None:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid time range '{text}'. Use \"HH:MM AM/PM - HH:MM AM/PM\"",
        )
    start, stop = (parse_clock(part) for part in match.groups())
    return datetime.combine(day, start), datetime.combine(day, stop)


def parse_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError:
        raise FocusError(
            ErrorKind.INVALID_FORMAT, f"Invalid date '{text}'. Use YYYY-MM-DD"
        ) from None


def plan_edit(
    session: Session,
    day: Optional[date] = None,
    start: Optional[time] = None,
    stop: Optional[time] = None,
    now: Optional[datetime] = None,
) -> Tuple[datetime, Optional[datetime]]:
    """Work out the new bounds of ``session`` for an edit request.

    A new ``day`` moves the session by whole days, keeping its time of day.
    Clock times replace the matching bound on ``day`` or, without one, on
    the date the bound already falls on. Bounds not given a clock time are
    only moved by the day shift.

    A session left running must still start before ``now``.
    """
    if day is None and start is None and stop is None:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            "Nothing to edit. Pass --start, --stop or --date",
        )

    shift = timedelta(days=(day - session.date).days) if day else timedelta(0)

    if start is not None:
        new_start = datetime.combine(day or session.start_time.date(), start)
    else:
        new_start = session.start_time + shift

    if stop is not None:
        if day is not None:
            stop_day = day
        elif session.stop_time is not None:
            stop_day = session.stop_time.date()
        else:
            stop_day = new_start.date()
        new_stop = datetime.combine(stop_day, stop)
    elif session.stop_time is not None:
        new_stop = session.stop_time + shift
    else:
        new_stop = None

    if new_stop is None and now is not None and new_start >= now:
        raise FocusError(
            ErrorKind.INVALID_RANGE,
            "Start time of a running session must be before the current time",
        )

    return new_start, new_stop


def _invalid_clock(text: str) -> FocusError:
    return FocusError(
        ErrorKind.INVALID_FORMAT,
        f"Invalid time '{text}'. Use \"HH:MM AM/PM\" or 24-hour \"HH:MM\"",
    )
