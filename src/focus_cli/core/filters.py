"""Filter expressions such as ``duration>=1h30m`` or ``total<8h``."""

import operator
import re
from enum import Enum
from typing import List, Optional, Tuple, Type, Union

from pydantic import BaseModel

from focus_cli.core.duration import parse_duration
from focus_cli.core.errors import ErrorKind, FocusError


class SessionFilterField(str, Enum):
    """Fields a single session can be filtered on."""

    DURATION = "duration"


class SummaryFilterField(str, Enum):
    """Fields a daily summary row can be filtered on."""

    TOTAL = "total"
    AVERAGE = "average"


class Operator(str, Enum):
    """Comparison operator of a filter expression."""

    GE = ">="
    LE = "<="
    EQ = "="
    GT = ">"
    LT = "<"


_COMPARATORS = {
    Operator.GE: operator.ge,
    Operator.LE: operator.le,
    Operator.EQ: operator.eq,
    Operator.GT: operator.gt,
    Operator.LT: operator.lt,
}

# Two-character operators come first so ">=" is not read as ">" + "=1h".
_FILTER_RE = re.compile(r"([a-z_]+)\s*(>=|<=|=|>|<)\s*(.+)")


class Filter(BaseModel):
    """A validated comparison against a duration in seconds."""

    field: Union[SessionFilterField, SummaryFilterField]
    operator: Operator
    value_seconds: int

    model_config = {"frozen": True}

    def matches(self, seconds: Optional[float]) -> bool:
        """Apply the filter to a value; missing values never match."""
        if seconds is None:
            return False
        return _COMPARATORS[self.operator](seconds, self.value_seconds)

    def where_clause(self, column: str) -> Tuple[str, List[int]]:
        """Render the filter as a SQL condition on ``column``."""
        return f"{column} {self.operator.value} ?", [self.value_seconds]

    def __str__(self) -> str:
        return f"{self.field.value}{self.operator.value}{self.value_seconds}s"


FieldSet = Union[Type[SessionFilterField], Type[SummaryFilterField]]


def parse_filter(text: str, fields: FieldSet) -> Filter:
    """Parse ``<field><operator><duration>`` against the allowed ``fields``."""
    match = _FILTER_RE.fullmatch(text.strip())
    if match is None:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid filter '{text}'. Use e.g. {_example(fields)}",
        )

    name, op, value = match.groups()
    try:
        field = fields(name)
    except ValueError:
        allowed = ", ".join(f.value for f in fields)
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid filter field '{name}'. Allowed: {allowed}",
        ) from None

    try:
        seconds = parse_duration(value)
    except FocusError as e:
        raise FocusError(
            ErrorKind.INVALID_FORMAT, f"Invalid filter '{text}': {e.message}"
        ) from e

    return Filter(field=field, operator=Operator(op), value_seconds=seconds)


def _example(fields: FieldSet) -> str:
    first = next(iter(fields))
    return f"{first.value}>=1h30m"
