"""Text formatting helpers shared by the CLI and the web API."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

PLACEHOLDER = "--:--:--"


def format_duration(seconds: float) -> str:
    """Format seconds as ``HH:MM:SS``, rounding partial seconds up."""
    total_seconds = math.ceil(seconds)
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


def format_optional_duration(seconds: Optional[float]) -> str:
    return PLACEHOLDER if seconds is None else format_duration(seconds)


def parse_duration(value: str) -> float:
    """Parse ``HH:MM[:SS]`` or a plain number of seconds."""
    value = value.strip()
    if ":" not in value:
        seconds = float(value)
        if not math.isfinite(seconds):
            raise ValueError(f"Invalid duration: {value!r}")
        return seconds
    parts = value.split(":")
    if len(parts) not in (2, 3) or not all(part.strip().isdigit() for part in parts):
        raise ValueError(f"Invalid duration: {value!r}")
    hours, minutes, *rest = (int(part) for part in parts)
    secs = rest[0] if rest else 0
    return float(hours * 3600 + minutes * 60 + secs)


def format_day_label(moment: datetime) -> str:
    return moment.strftime("%m/%d")


def format_date_range(first: datetime, last: datetime) -> str:
    """Render a range like ``July 9 - 15, 2023``."""
    if first.year != last.year:
        return (
            f"{first:%B} {first.day}, {first.year} - "
            f"{last:%B} {last.day}, {last.year}"
        )
    if first.month != last.month:
        return f"{first:%B} {first.day} - {last:%B} {last.day}, {last.year}"
    return f"{first:%B} {first.day} - {last.day}, {last.year}"


def format_session_count(count: int) -> str:
    unit = "session" if count == 1 else "sessions"
    return f"{count} {unit} today"
