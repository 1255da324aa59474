"""Conversion between duration strings and seconds."""

import re
from typing import Optional

from focus_cli.core.errors import ErrorKind, FocusError

_DURATION_RE = re.compile(r"(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?")

DURATION_EXAMPLES = "1h, 30m, 1h30m, 2h15m30s"


def parse_duration(text: str) -> int:
    """Parse a duration such as ``1h30m`` or ``45s`` into seconds.

    Components are optional but must appear in h, m, s order. The empty
    string parses to zero.
    """
    match = _DURATION_RE.fullmatch(text.strip())
    if match is None:
        raise FocusError(
            ErrorKind.INVALID_FORMAT,
            f"Invalid duration '{text}'. Examples: {DURATION_EXAMPLES}",
        )

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def format_hm(seconds: Optional[float]) -> str:
    """Format seconds as zero-padded ``HH:MM``, dropping the remainder."""
    if seconds is None:
        return "N/A"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    return f"{hours:02d}:{remainder // 60:02d}"


def format_hms(seconds: int) -> str:
    """Format seconds as ``1h2m3s``, leaving out zero components.

    Negative input is shown as ``0s``.
    """
    hours, remainder = divmod(max(int(seconds), 0), 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)
