"""Tests for the daily summary aggregation."""

from datetime import date, datetime, timedelta

import pytest

from focus_cli.core.errors import ErrorKind, FocusError
from focus_cli.core.filters import SessionFilterField, SummaryFilterField, parse_filter
from focus_cli.core.sorting import SessionSortField, SummarySortField, parse_sort
from focus_cli.core.summary import summarize
from focus_cli.models.session import Session
from focus_cli.models.summary import GOAL_SECONDS


def closed(day: int, hour: int, seconds: int, session_id: str = None) -> Session:
    start = datetime(2024, 1, day, hour)
    return Session(
        id=session_id or f"s-{day}-{hour}",
        start_time=start,
        stop_time=start + timedelta(seconds=seconds),
        duration=seconds,
    )


@pytest.fixture
def sessions():
    return [
        closed(3, 9, 2 * 3600),  # day 3: 2h total
        closed(1, 8, 3600),  # day 1: 1h + 2h = 3h, avg 1h30
        closed(1, 10, 7200),
        closed(2, 8, 4 * 3600),  # day 2: 4h + 4h = 8h, goal met
        closed(2, 13, 4 * 3600),
    ]


def test_single_day():
    """Test that 1h and 2h on one day give 03:00 total and 01:30 average."""
    rows = summarize([closed(1, 8, 3600), closed(1, 10, 7200)])

    assert len(rows) == 1
    row = rows[0]
    assert row.date == date(2024, 1, 1)
    assert row.count == 2
    assert row.total == "03:00"
    assert row.average == "01:30"
    assert row.goal == "❌"
    assert not row.goal_met


def test_groups_by_date_ascending(sessions):
    rows = summarize(sessions)

    assert [row.date.day for row in rows] == [1, 2, 3]
    assert [row.sl for row in rows] == [1, 2, 3]
    assert [row.total_seconds for row in rows] == [10800, 28800, 7200]


def test_goal_threshold(sessions):
    """Test that exactly 8 hours meets the goal."""
    rows = {row.date.day: row for row in summarize(sessions)}
    assert rows[2].total_seconds == GOAL_SECONDS
    assert rows[2].goal_met
    assert rows[2].goal == "✅"
    assert not rows[1].goal_met


def test_open_sessions_ignored():
    running = Session(id="running", start_time=datetime(2024, 1, 1, 12))
    rows = summarize([closed(1, 8, 3600), running])
    assert len(rows) == 1
    assert rows[0].count == 1


def test_empty():
    assert summarize([]) == []


def test_sort_by_total_desc(sessions):
    sort = parse_sort("total:desc", SummarySortField)
    rows = summarize(sessions, sort)

    assert [row.date.day for row in rows] == [2, 1, 3]
    assert [row.sl for row in rows] == [1, 2, 3]


def test_sort_ties_keep_date_order():
    """Test that days with equal totals stay in ascending date order."""
    data = [closed(2, 8, 3600), closed(1, 8, 3600), closed(3, 8, 7200)]

    ascending = summarize(data, parse_sort("total:asc", SummarySortField))
    assert [row.date.day for row in ascending] == [1, 2, 3]

    descending = summarize(data, parse_sort("total:desc", SummarySortField))
    assert [row.date.day for row in descending] == [3, 1, 2]


def test_sort_by_average(sessions):
    rows = summarize(sessions, parse_sort("average:asc", SummarySortField))
    assert [row.date.day for row in rows] == [1, 3, 2]


def test_filter_applied_after_grouping(sessions):
    """Test that a total filter looks at the day total, not single sessions."""
    day_filter = parse_filter("total>=3h", SummaryFilterField)
    rows = summarize(sessions, filter=day_filter)

    assert [row.date.day for row in rows] == [1, 2]
    assert [row.sl for row in rows] == [1, 2]


def test_average_filter_uses_exact_seconds():
    data = [closed(1, 8, 60), closed(1, 9, 61)]  # average 60.5s
    assert summarize(data, filter=parse_filter("average>1m", SummaryFilterField))
    assert not summarize(data, filter=parse_filter("average=1m", SummaryFilterField))


def test_session_sort_rejected(sessions):
    with pytest.raises(FocusError) as exc_info:
        summarize(sessions, parse_sort("duration", SessionSortField))
    assert exc_info.value.kind is ErrorKind.INVALID_FORMAT


def test_session_filter_rejected_without_rows():
    """Test that a session filter is refused even when there is nothing to group."""
    with pytest.raises(FocusError) as exc_info:
        summarize([], filter=parse_filter("duration>=1h", SessionFilterField))
    assert exc_info.value.kind is ErrorKind.INVALID_FORMAT
