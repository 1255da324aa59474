"""Daily aggregation of closed sessions."""

from datetime import date
from typing import Dict, Iterable, List, Optional

from focus_cli.core.errors import ErrorKind, FocusError
from focus_cli.core.filters import Filter, SummaryFilterField
from focus_cli.core.sorting import Sort, SummarySortField
from focus_cli.models.session import Session
from focus_cli.models.summary import DailySummary

_SORT_KEYS = {
    SummarySortField.DATE: lambda row: row.date,
    SummarySortField.TOTAL: lambda row: row.total_seconds,
    SummarySortField.AVERAGE: lambda row: row.average_seconds,
}


def summarize(
    sessions: Iterable[Session],
    sort: Optional[Sort] = None,
    filter: Optional[Filter] = None,
) -> List[DailySummary]:
    """Group closed sessions by start date and total them per day.

    Averages are kept as exact seconds and only floored when displayed.
    The filter is applied to the finished rows, then the rows are sorted
    and numbered from 1.
    """
    sort = sort or Sort.default(SummarySortField)
    if not isinstance(sort.field, SummarySortField):
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid sort field '{sort.field.value}' for summaries",
        )
    if filter is not None and not isinstance(filter.field, SummaryFilterField):
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid filter field '{filter.field.value}' for summaries",
        )

    totals: Dict[date, List[int]] = {}
    for session in sorted(sessions, key=lambda s: s.start_time):
        if session.duration is None:
            continue
        totals.setdefault(session.date, []).append(session.duration)

    rows = [
        DailySummary(
            date=day,
            count=len(durations),
            total_seconds=sum(durations),
            average_seconds=sum(durations) / len(durations),
        )
        for day, durations in totals.items()
    ]

    if filter is not None:
        rows = [row for row in rows if filter.matches(_filter_value(row, filter))]

    # sorted() stays stable with reverse=True, so ties keep date order
    rows = sorted(rows, key=_SORT_KEYS[sort.field], reverse=sort.descending)

    for index, row in enumerate(rows, start=1):
        row.sl = index
    return rows


def _filter_value(row: DailySummary, filter: Filter) -> float:
    if filter.field is SummaryFilterField.TOTAL:
        return row.total_seconds
    return row.average_seconds

