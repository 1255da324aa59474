"""Per-day aggregate of closed sessions."""

from datetime import date

from pydantic import BaseModel

from focus_cli.core.duration import format_hm

# Daily focus target in seconds (8 hours).
GOAL_SECONDS = 8 * 3600


class DailySummary(BaseModel):
    """Totals for one calendar date."""

    sl: int = 0
    date: date
    count: int
    total_seconds: int
    average_seconds: float

    @property
    def goal_met(self) -> bool:
        return self.total_seconds >= GOAL_SECONDS

    @property
    def total(self) -> str:
        return format_hm(self.total_seconds)

    @property
    def average(self) -> str:
        return format_hm(self.average_seconds)

    @property
    def goal(self) -> str:
        return "✅" if self.goal_met else "❌"
