"""Per-day and per-week summaries derived from a topic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .aggregation import session_count_between, sessions_before, total_interval_between
from .goals import current_goal, goal_for, is_goal_complete
from .models import DayInterval, Topic, TopicWeek
from .reporting import (
    format_date_range,
    format_day_label,
    format_optional_duration,
    format_session_count,
)


class CompletionState(str, Enum):
    """How far a day got towards its goal."""

    NONE = "none"  # no data or no goal
    EMPTY = "empty"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass(frozen=True, slots=True)
class DayView:
    start_date: datetime
    day_label: str
    duration: str
    goal_label: str
    completion: CompletionState
    tracked_seconds: Optional[float]
    goal_seconds: Optional[float]

    @property
    def id(self) -> str:
        return self.day_label


@dataclass(frozen=True, slots=True)
class WeekView:
    id: str
    title: str
    subtitle: str
    days: tuple[DayView, ...]


@dataclass(frozen=True, slots=True)
class TodayView:
    timer_title: str
    goal_title: str
    is_goal_complete: bool
    is_running: bool
    start_stop_title: str
    session_count: int
    session_count_title: str
    tracked_seconds: float


def completion_state(
    tracked_seconds: Optional[float], goal_seconds: Optional[float]
) -> CompletionState:
    if tracked_seconds is None or not goal_seconds:
        return CompletionState.NONE
    ratio = tracked_seconds / goal_seconds
    if ratio <= 0:
        return CompletionState.EMPTY
    if ratio < 1:
        return CompletionState.PARTIAL
    return CompletionState.COMPLETE


def project_day(
    topic: Topic,
    interval: DayInterval,
    now: datetime,
    *,
    clamp_active_session: bool = False,
) -> DayView:
    """Summarize one day.

    Days in the future, and days before anything was ever tracked, show a
    placeholder instead of ``00:00:00``. Today is counted up to ``now``.
    """
    day_end = now if interval.contains(now) else interval.end_date
    tracked: Optional[float] = None
    if now >= interval.start_date and sessions_before(topic, day_end):
        tracked = total_interval_between(
            topic,
            interval.start_date,
            day_end,
            clamp_active_session=clamp_active_session,
        )

    goal = goal_for(topic, interval.start_date)
    goal_seconds = goal.duration if goal else None
    return DayView(
        start_date=interval.start_date,
        day_label=format_day_label(interval.start_date),
        duration=format_optional_duration(tracked),
        goal_label=format_optional_duration(goal_seconds),
        completion=completion_state(tracked, goal_seconds),
        tracked_seconds=tracked,
        goal_seconds=goal_seconds,
    )


def project_week(
    topic_week: TopicWeek,
    now: datetime,
    *,
    clamp_active_session: bool = False,
) -> WeekView:
    week = topic_week.week
    days = tuple(
        project_day(
            topic_week.topic,
            interval,
            now,
            clamp_active_session=clamp_active_session,
        )
        for interval in week.week_day_intervals
    )
    return WeekView(
        id=topic_week.id,
        title=f"Week {week.week_of_year}",
        subtitle=format_date_range(week.first_moment, week.last_moment),
        days=days,
    )


def project_today(
    topic: Topic,
    start_of_today: datetime,
    now: datetime,
    *,
    clamp_active_session: bool = False,
) -> TodayView:
    """Summarize the current day: running timer, goal and session count."""
    tracked = total_interval_between(
        topic, start_of_today, now, clamp_active_session=clamp_active_session
    )
    goal = current_goal(topic)
    count = session_count_between(topic, start_of_today, now)
    return TodayView(
        timer_title=format_optional_duration(tracked),
        goal_title=format_optional_duration(goal.duration if goal else None),
        is_goal_complete=is_goal_complete(
            topic, start_of_today, now, clamp_active_session=clamp_active_session
        ),
        is_running=topic.is_active,
        start_stop_title="Stop" if topic.is_active else "Start",
        session_count=count,
        session_count_title=format_session_count(count),
        tracked_seconds=tracked,
    )
