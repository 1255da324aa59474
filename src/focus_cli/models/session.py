"""Session model for tracked focus intervals."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, model_validator

SHORT_ID_LENGTH = 8


def compute_duration(start_time: datetime, stop_time: datetime) -> int:
    """Whole seconds between two instants, rounded to nearest."""
    return round((stop_time - start_time).total_seconds())


class Session(BaseModel):
    """Represents a focus session, open while ``stop_time`` is unset."""

    id: str
    start_time: datetime
    stop_time: Optional[datetime] = None
    duration: Optional[int] = None

    @model_validator(mode="after")
    def _check_duration(self) -> "Session":
        if (self.stop_time is None) != (self.duration is None):
            raise ValueError("duration must be set exactly when stop_time is set")
        if self.duration is not None and self.duration < 0:
            raise ValueError("duration must not be negative")
        return self

    @property
    def is_active(self) -> bool:
        """Check if the session is still running."""
        return self.stop_time is None

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_ID_LENGTH]

    @property
    def date(self) -> date:
        """Calendar date the session belongs to."""
        return self.start_time.date()

    def elapsed(self, now: datetime) -> int:
        """Seconds recorded so far, counting up to ``now`` while active."""
        if self.duration is not None:
            return self.duration
        return compute_duration(self.start_time, now)
