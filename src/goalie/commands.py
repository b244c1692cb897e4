"""Topic mutations expressed as commands.

:func:`mutate` never touches storage. It returns the new topic together with
the events the command produced; a non-empty event list is the caller's cue
to persist the topic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, Optional, Union
from uuid import UUID, uuid4

from .calendar import CalendarAdapter
from .goals import current_goal
from .models import Goal, Session, Topic

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Environment:
    """Clock, id source and calendar used by commands."""

    calendar: CalendarAdapter
    now: Callable[[], datetime] = field(default=_utc_now)
    uuid: Callable[[], UUID] = field(default=uuid4)


# Commands


@dataclass(frozen=True, slots=True)
class ToggleSession:
    """Start a session, or stop the running one."""


@dataclass(frozen=True, slots=True)
class CancelActiveSession:
    """Discard the running session without recording it."""


@dataclass(frozen=True, slots=True)
class SetGoal:
    duration: Optional[float]


@dataclass(frozen=True, slots=True)
class DeleteSession:
    session_id: UUID


@dataclass(frozen=True, slots=True)
class DeleteGoal:
    goal_id: UUID


Command = Union[ToggleSession, CancelActiveSession, SetGoal, DeleteSession, DeleteGoal]


# Events


@dataclass(frozen=True, slots=True)
class SessionStarted:
    start: datetime


@dataclass(frozen=True, slots=True)
class SessionStopped:
    session: Session


@dataclass(frozen=True, slots=True)
class SessionCancelled:
    start: datetime


@dataclass(frozen=True, slots=True)
class GoalSet:
    goal: Goal


@dataclass(frozen=True, slots=True)
class SessionDeleted:
    session_id: UUID


@dataclass(frozen=True, slots=True)
class GoalDeleted:
    goal_id: UUID


Event = Union[
    SessionStarted, SessionStopped, SessionCancelled, GoalSet, SessionDeleted, GoalDeleted
]


@dataclass(frozen=True, slots=True)
class MutationResult:
    topic: Topic
    events: tuple[Event, ...] = ()

    @property
    def needs_save(self) -> bool:
        return bool(self.events)


def mutate(topic: Topic, command: Command, env: Environment) -> MutationResult:
    """Apply ``command`` to ``topic`` and return the outcome."""
    if isinstance(command, ToggleSession):
        result = _toggle(topic, env)
    elif isinstance(command, CancelActiveSession):
        result = _cancel(topic)
    elif isinstance(command, SetGoal):
        result = _set_goal(topic, command.duration, env)
    elif isinstance(command, DeleteSession):
        result = MutationResult(
            topic.without_session(command.session_id),
            (SessionDeleted(command.session_id),),
        )
    elif isinstance(command, DeleteGoal):
        result = MutationResult(
            topic.without_goal(command.goal_id), (GoalDeleted(command.goal_id),)
        )
    else:
        raise TypeError(f"Unsupported command: {command!r}")

    logger.debug(
        "Applied %s to topic %s: %d event(s)",
        type(command).__name__,
        topic.id,
        len(result.events),
    )
    return result


def _toggle(topic: Topic, env: Environment) -> MutationResult:
    now = env.now()
    start = topic.active_session_start
    if start is None:
        return MutationResult(
            topic.with_active_session_start(now), (SessionStarted(now),)
        )
    session = Session(id=env.uuid(), start=start, end=now)
    updated = topic.with_session(session).with_active_session_start(None)
    return MutationResult(updated, (SessionStopped(session),))


def _cancel(topic: Topic) -> MutationResult:
    start = topic.active_session_start
    if start is None:
        return MutationResult(topic)
    return MutationResult(
        topic.with_active_session_start(None), (SessionCancelled(start),)
    )


def _set_goal(
    topic: Topic, duration: Optional[float], env: Environment
) -> MutationResult:
    now = env.now()
    goal = Goal(id=env.uuid(), start=env.calendar.start_of_day(now), duration=duration)
    existing = current_goal(topic)
    if (existing.duration if existing else None) == goal.duration:
        # Unchanged goal; nothing to record.
        return MutationResult(topic)
    return MutationResult(topic.with_goal(goal), (GoalSet(goal),))
