"""Sort specifications such as ``date:asc`` or ``duration``."""

import re
from enum import Enum
from typing import Type, Union

from pydantic import BaseModel

from focus_cli.core.errors import ErrorKind, FocusError


class SessionSortField(str, Enum):
    """Keys a session list can be sorted by."""

    DATE = "date"
    DURATION = "duration"


class SummarySortField(str, Enum):
    """Keys a daily summary can be sorted by."""

    DATE = "date"
    TOTAL = "total"
    AVERAGE = "average"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Order used when a sort token names a field but no direction.
DEFAULT_ORDER = SortOrder.DESC

_SORT_RE = re.compile(r"([a-z]+)(?::([a-z]+))?")

SortFieldSet = Union[Type[SessionSortField], Type[SummarySortField]]


class Sort(BaseModel):
    """A validated sort key and direction."""

    field: Union[SessionSortField, SummarySortField]
    order: SortOrder = DEFAULT_ORDER

    model_config = {"frozen": True}

    @property
    def descending(self) -> bool:
        return self.order is SortOrder.DESC

    @classmethod
    def default(cls, fields: SortFieldSet) -> "Sort":
        """Sort applied when the user gives none: oldest date first."""
        return cls(field=fields("date"), order=SortOrder.ASC)

    def __str__(self) -> str:
        return f"{self.field.value}:{self.order.value}"


def parse_sort(text: str, fields: SortFieldSet) -> Sort:
    """Parse ``<field>[:asc|desc]``; a missing order means descending."""
    match = _SORT_RE.fullmatch(text.strip().lower())
    allowed = ", ".join(f.value for f in fields)
    if match is None:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid sort '{text}'. Use <field>[:asc|desc] with field one of: "
            f"{allowed}",
        )

    name, order = match.groups()
    try:
        field = fields(name)
    except ValueError:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid sort field '{name}'. Allowed: {allowed}",
        ) from None

    if order is None:
        return Sort(field=field)
    try:
        return Sort(field=field, order=SortOrder(order))
    except ValueError:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid sort order '{order}'. Use asc or desc",
        ) from None
