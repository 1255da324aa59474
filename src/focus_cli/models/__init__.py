"""Data models for focus-cli."""

from .session import Session
from .summary import DailySummary

__all__ = ["Session", "DailySummary"]
