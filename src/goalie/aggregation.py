"""Elapsed-time and session-count queries over a topic's history.

Every function here assumes ``topic.sessions`` is sorted by start time, oldest
first. :meth:`goalie.models.Topic.with_session` guarantees that on insert; the
scans below stop early instead of re-checking it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from .errors import IntervalOrderError
from .models import Session, Topic, elapsed_seconds


def total_interval_between(
    topic: Topic,
    start: datetime,
    end: datetime,
    *,
    clamp_active_session: bool = False,
) -> float:
    """Return the tracked seconds that fall within ``[start, end]``.

    Usually ``start`` is midnight of some day and ``end`` is either one second
    before the next midnight or, for today, the current time.

    Recorded sessions are clamped to the query bounds. A running session
    contributes ``end - active_session_start`` even when it started before
    ``start`` (or after ``end``, which makes the contribution negative); pass
    ``clamp_active_session=True`` to clamp it like the recorded sessions.
    """
    if start > end:
        raise IntervalOrderError(start, end)

    total = _active_interval(topic, start, end, clamp_active_session)
    for session in sessions_between(topic.sessions, start, end):
        counted_start = max(session.start, start)
        counted_end = min(session.end, end)
        total += elapsed_seconds(counted_start, counted_end)
    return total


def _active_interval(
    topic: Topic, start: datetime, end: datetime, clamp: bool
) -> float:
    session_start = topic.active_session_start
    if session_start is None:
        return 0.0
    if clamp:
        return max(0.0, elapsed_seconds(max(session_start, start), end))
    return elapsed_seconds(session_start, end)


def sessions_between(
    sessions: Sequence[Session], start: datetime, end: datetime
) -> tuple[Session, ...]:
    """Return sessions whose start or end lies within ``[start, end]``, newest first.

    A session that begins before ``start`` and ends after ``end`` is not
    matched, since neither endpoint is inside the range.
    """
    if start > end:
        raise IntervalOrderError(start, end)

    matching: list[Session] = []
    for session in reversed(sessions):
        if start <= session.start <= end or start <= session.end <= end:
            matching.append(session)
        elif matching:
            # Sorted input: once past the matching block nothing older can match.
            break
    return tuple(matching)


def session_count_between(topic: Topic, start: datetime, end: datetime) -> int:
    """Count sessions in ``[start, end]``, plus one for a running session."""
    count = len(sessions_between(topic.sessions, start, end))
    if topic.active_session_start is not None:
        count += 1
    return count


def sessions_before(topic: Topic, date: datetime) -> bool:
    """Report whether any tracking had started at or before ``date``.

    Distinguishes a day with no data yet from a day with zero tracked time.
    """
    if topic.sessions:
        return topic.sessions[0].start <= date
    if topic.active_session_start is not None:
        return topic.active_session_start <= date
    return False


def total_seconds(sessions: Iterable[Session]) -> float:
    return sum(session.duration_seconds for session in sessions)
