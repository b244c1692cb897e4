"""Domain models for tracked topics, sessions, goals and calendar weeks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Optional
from uuid import UUID

from .errors import InvalidGoalError, InvalidSessionError, NotFoundError, OrderingError

DEFAULT_TOPIC_ID = UUID(int=0)


def elapsed_seconds(start: datetime, end: datetime) -> float:
    """Absolute seconds from ``start`` to ``end``.

    Plain subtraction of two datetimes sharing a tzinfo measures wall-clock
    time, which is off by the DST shift on transition days.
    """
    return (end.astimezone(UTC) - start.astimezone(UTC)).total_seconds()


@dataclass(frozen=True, slots=True)
class Session:
    """One completed block of tracked time."""

    id: UUID
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidSessionError(
                f"Session {self.id} ends before it starts: {self.start} > {self.end}"
            )

    @property
    def duration_seconds(self) -> float:
        return elapsed_seconds(self.start, self.end)


@dataclass(frozen=True, slots=True)
class Goal:
    """A change in the daily target, effective from ``start`` onward.

    ``start`` is a local midnight. ``duration`` of ``None`` explicitly unsets
    the goal; any non-positive duration is stored as ``None``. Infinite and NaN
    durations are rejected.
    """

    id: UUID
    start: datetime
    duration: Optional[float] = None

    def __post_init__(self) -> None:
        if self.duration is not None and not math.isfinite(self.duration):
            raise InvalidGoalError(f"goal duration must be finite: {self.duration}")
        if self.duration is not None and self.duration <= 0:
            object.__setattr__(self, "duration", None)


@dataclass(frozen=True, slots=True)
class Topic:
    """A tracked subject with its session and goal history.

    ``sessions`` and ``goals`` are kept sorted by ``start`` (oldest first) with
    unique ids. The ``with_*`` helpers enforce that on insert; the aggregation
    functions rely on it without re-checking.
    """

    id: UUID
    active_session_start: Optional[datetime] = None
    sessions: tuple[Session, ...] = ()
    goals: tuple[Goal, ...] = ()

    @classmethod
    def new(cls, topic_id: UUID = DEFAULT_TOPIC_ID) -> "Topic":
        return cls(id=topic_id)

    @property
    def is_active(self) -> bool:
        return self.active_session_start is not None

    def with_active_session_start(self, start: Optional[datetime]) -> "Topic":
        return replace(self, active_session_start=start)

    def with_session(self, session: Session) -> "Topic":
        _check_append(self.sessions, session)
        return replace(self, sessions=self.sessions + (session,))

    def with_goal(self, goal: Goal) -> "Topic":
        _check_append(self.goals, goal)
        return replace(self, goals=self.goals + (goal,))

    def without_session(self, session_id: UUID) -> "Topic":
        remaining = tuple(s for s in self.sessions if s.id != session_id)
        if len(remaining) == len(self.sessions):
            raise NotFoundError(f"No session found for id={session_id}")
        return replace(self, sessions=remaining)

    def without_goal(self, goal_id: UUID) -> "Topic":
        remaining = tuple(g for g in self.goals if g.id != goal_id)
        if len(remaining) == len(self.goals):
            raise NotFoundError(f"No goal found for id={goal_id}")
        return replace(self, goals=remaining)


def _check_append(existing: tuple, item: Session | Goal) -> None:
    if any(other.id == item.id for other in existing):
        raise OrderingError(f"Duplicate id {item.id}")
    if existing and item.start < existing[-1].start:
        raise OrderingError(
            f"{type(item).__name__} {item.id} starts at {item.start}, "
            f"before the latest entry at {existing[-1].start}"
        )


@dataclass(frozen=True, slots=True)
class DayInterval:
    """A calendar day as a closed range from midnight to one second before the next."""

    start_date: datetime
    end_date: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start_date <= moment <= self.end_date


@dataclass(frozen=True, slots=True)
class Week:
    """Seven contiguous days plus their week-of-year identity."""

    year_for_week_of_year: int
    week_of_year: int
    # Month of the date the week was built from; display only.
    month: int = field(compare=False)
    first_day_of_week: int  # day of month, 9 -> July 9th
    week_day_intervals: tuple[DayInterval, ...]

    @property
    def id(self) -> str:
        return f"{self.year_for_week_of_year}:{self.week_of_year}"

    @property
    def first_moment(self) -> datetime:
        return self.week_day_intervals[0].start_date

    @property
    def last_moment(self) -> datetime:
        return self.week_day_intervals[-1].end_date


@dataclass(frozen=True, slots=True)
class TopicWeek:
    topic: Topic
    week: Week

    @property
    def id(self) -> str:
        return f"{self.topic.id}:{self.week.id}"
