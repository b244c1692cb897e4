import itertools
from datetime import datetime, timedelta
from uuid import UUID

import pytest

from goalie.calendar import CalendarAdapter
from goalie.commands import Environment

NEW_YORK = "America/New_York"


class FakeClock:
    """Settable stand-in for the wall clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class SequentialIds:
    """Deterministic UUIDs: 00000000-...-0001, -0002, ..."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def __call__(self) -> UUID:
        return UUID(int=next(self._counter))


@pytest.fixture
def calendar() -> CalendarAdapter:
    return CalendarAdapter(NEW_YORK)


@pytest.fixture
def utc_calendar() -> CalendarAdapter:
    return CalendarAdapter("UTC")


@pytest.fixture
def at(calendar: CalendarAdapter):
    """Build a New York wall-clock time."""

    def _at(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0):
        return calendar.localize(datetime(year, month, day, hour, minute, second))

    return _at


@pytest.fixture
def clock(at) -> FakeClock:
    return FakeClock(at(2023, 7, 12, 9, 0))


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def env(calendar: CalendarAdapter, clock: FakeClock, ids: SequentialIds) -> Environment:
    return Environment(calendar=calendar, now=clock, uuid=ids)
