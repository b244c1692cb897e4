"""Resolve which daily goal applies at a point in time."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from .aggregation import total_interval_between
from .models import Goal, Topic


def current_goal(topic: Topic) -> Optional[Goal]:
    """Return the goal with the latest start; the last one added wins a tie."""
    if not topic.goals:
        return None
    return max(reversed(topic.goals), key=lambda goal: goal.start)


def goal_for(topic: Topic, date: datetime) -> Optional[Goal]:
    """Return the goal in effect at ``date``.

    Goal changes apply from their start onward, so past days keep the goal
    that was set at the time.
    """
    for goal in reversed(topic.goals):
        if goal.start <= date:
            return goal
    return None


def is_goal_complete(
    topic: Topic,
    day_start: datetime,
    now: datetime,
    *,
    clamp_active_session: bool = False,
) -> bool:
    goal = current_goal(topic)
    if goal is None or not goal.duration:
        return False
    tracked = total_interval_between(
        topic, day_start, now, clamp_active_session=clamp_active_session
    )
    return tracked >= goal.duration
