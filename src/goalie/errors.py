"""Exception types raised by the goal tracker core."""

from __future__ import annotations


class GoalieError(Exception):
    """Base class for all tracker errors."""


class IntervalOrderError(GoalieError, ValueError):
    """Raised when an interval query is given a start after its end."""

    def __init__(self, start: object, end: object) -> None:
        super().__init__(f"start is not before end: {start} > {end}")
        self.start = start
        self.end = end


class InvalidSessionError(GoalieError, ValueError):
    """Raised when a session would end before it starts."""


class OrderingError(GoalieError, ValueError):
    """Raised when an insert would break ascending start order or id uniqueness."""


class InvalidGoalError(GoalieError, ValueError):
    """Raised when a goal duration is not a finite number of seconds."""


class NotFoundError(GoalieError, LookupError):
    """Raised when a session or goal id is not part of the topic."""


class CalendarAdapterError(GoalieError):
    """Raised when calendar arithmetic cannot produce a date."""


class PersistenceError(GoalieError):
    """Raised when the topic database cannot be read or written."""
