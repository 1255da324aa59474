"""Error taxonomy for focus-cli."""

from enum import Enum
from typing import List, Optional


class ErrorKind(str, Enum):
    """Kind of failure reported by the core."""

    INVALID_FORMAT = "invalid_format"
    INVALID_RANGE = "invalid_range"
    OVERLAP_CONFLICT = "overlap_conflict"
    AMBIGUOUS_ID = "ambiguous_id"
    NOT_FOUND = "not_found"
    ALREADY_ACTIVE = "already_active"


class FocusError(Exception):
    """Recoverable error raised by the session core.

    ``ids`` carries the session ids involved, e.g. the conflicting sessions
    of an overlap or the candidates of an ambiguous prefix.
    """

    def __init__(
        self, kind: ErrorKind, message: str, ids: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.ids = list(ids or [])

    def __repr__(self) -> str:
        return f"FocusError({self.kind.value!r}, {self.message!r})"
