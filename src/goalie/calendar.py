"""Timezone-aware Gregorian calendar used for day and week arithmetic.

All week math goes through :class:`CalendarAdapter` so that daylight-saving
transitions are resolved by the timezone database rather than by adding
fixed numbers of seconds. Weekdays follow the 1 = Sunday ... 7 = Saturday
numbering; which of them starts a week, and how many days of a new year the
first week must contain, are configurable (``first_weekday=2`` with
``minimum_days_in_first_week=4`` gives ISO-8601 weeks).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, UTC, date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import CalendarAdapterError


class CalendarUnit(Enum):
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


_ELAPSED_UNITS = {
    CalendarUnit.SECOND: timedelta(seconds=1),
    CalendarUnit.MINUTE: timedelta(minutes=1),
    CalendarUnit.HOUR: timedelta(hours=1),
}

_WALL_CLOCK_DAYS = {
    CalendarUnit.DAY: 1,
    CalendarUnit.WEEK: 7,
}


@dataclass(frozen=True, slots=True)
class DateComponents:
    """Calendar fields of a date; unset fields are ``None``."""

    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    weekday: Optional[int] = None
    week_of_year: Optional[int] = None
    year_for_week_of_year: Optional[int] = None


class CalendarAdapter:
    """Gregorian calendar bound to a timezone and week convention."""

    def __init__(
        self,
        timezone: Union[str, tzinfo] = "UTC",
        *,
        first_weekday: int = 1,
        minimum_days_in_first_week: int = 1,
    ) -> None:
        if not 1 <= first_weekday <= 7:
            raise ValueError(f"first_weekday must be in 1..7, got {first_weekday}")
        if not 1 <= minimum_days_in_first_week <= 7:
            raise ValueError(
                "minimum_days_in_first_week must be in 1..7, "
                f"got {minimum_days_in_first_week}"
            )
        if isinstance(timezone, str):
            try:
                timezone = ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise CalendarAdapterError(f"Unknown timezone: {timezone}") from exc
        self._tz = timezone
        self.first_weekday = first_weekday
        self.minimum_days_in_first_week = minimum_days_in_first_week

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def __repr__(self) -> str:
        return (
            f"CalendarAdapter({self._tz!s}, first_weekday={self.first_weekday}, "
            f"minimum_days_in_first_week={self.minimum_days_in_first_week})"
        )

    # Conversions

    def to_local(self, moment: datetime) -> datetime:
        """Express ``moment`` in the calendar's timezone.

        Naive datetimes are read as wall-clock time in that timezone.
        """
        if moment.tzinfo is None:
            return self.localize(moment)
        return moment.astimezone(self._tz)

    def localize(self, wall_time: datetime) -> datetime:
        """Attach the calendar timezone to a naive wall-clock time.

        Ambiguous times resolve to their first occurrence. Times skipped by a
        forward transition resolve to the matching instant after the jump, so
        a skipped midnight becomes the first moment that exists on that day.
        """
        aware = wall_time.replace(tzinfo=self._tz)
        try:
            return aware.astimezone(UTC).astimezone(self._tz)
        except OverflowError as exc:
            raise CalendarAdapterError(f"Cannot localize {wall_time}") from exc

    # Field decomposition

    @staticmethod
    def weekday(day: date) -> int:
        """1 = Sunday ... 7 = Saturday."""
        return day.isoweekday() % 7 + 1

    def weekday_position(self, weekday: int) -> int:
        """Zero-based offset of ``weekday`` from the start of the week."""
        return (weekday - self.first_weekday) % 7

    def date_components(self, moment: datetime) -> DateComponents:
        local_day = self.to_local(moment).date()
        try:
            year_for_week, week_of_year = self._week_fields(local_day)
        except (OverflowError, ValueError) as exc:
            raise CalendarAdapterError(f"Cannot compute week of {moment}") from exc
        return DateComponents(
            year=local_day.year,
            month=local_day.month,
            day=local_day.day,
            weekday=self.weekday(local_day),
            week_of_year=week_of_year,
            year_for_week_of_year=year_for_week,
        )

    def date_from_components(self, components: DateComponents) -> datetime:
        """Return local midnight of the day the components describe.

        Week-based fields win over year/month/day when both are present; a
        missing weekday means the first day of that week.
        """
        try:
            if (
                components.year_for_week_of_year is not None
                and components.week_of_year is not None
            ):
                weekday = components.weekday or self.first_weekday
                if not 1 <= weekday <= 7:
                    raise CalendarAdapterError(f"Invalid weekday: {weekday}")
                day = self._first_week_start(components.year_for_week_of_year) + timedelta(
                    days=7 * (components.week_of_year - 1) + self.weekday_position(weekday)
                )
            elif None not in (components.year, components.month, components.day):
                day = date(components.year, components.month, components.day)
            else:
                raise CalendarAdapterError(f"Insufficient date components: {components}")
            return self.localize(datetime.combine(day, time()))
        except (OverflowError, ValueError) as exc:
            raise CalendarAdapterError(f"Invalid date components: {components}") from exc

    # Arithmetic

    def start_of_day(self, moment: datetime) -> datetime:
        local_day = self.to_local(moment).date()
        return self.localize(datetime.combine(local_day, time()))

    def add(self, moment: datetime, unit: CalendarUnit, amount: int) -> datetime:
        """Add ``amount`` units to ``moment``.

        Days and weeks move the wall clock, so adding one day to a midnight
        lands on the next midnight even across a DST change. Seconds, minutes
        and hours are elapsed time.
        """
        try:
            if unit in _ELAPSED_UNITS:
                shifted = self.to_local(moment).astimezone(UTC) + _ELAPSED_UNITS[unit] * amount
                return shifted.astimezone(self._tz)
            days = _WALL_CLOCK_DAYS[unit] * amount
            wall_time = self.to_local(moment).replace(tzinfo=None)
            return self.localize(wall_time + timedelta(days=days))
        except OverflowError as exc:
            raise CalendarAdapterError(
                f"Cannot add {amount} {unit.value}(s) to {moment}"
            ) from exc

    def next_start_of_day(self, moment: datetime) -> datetime:
        return self.start_of_day(self.add(self.start_of_day(moment), CalendarUnit.DAY, 1))

    # Week-of-year helpers

    def _first_week_start(self, year: int) -> date:
        jan1 = date(year, 1, 1)
        start = jan1 - timedelta(days=self.weekday_position(self.weekday(jan1)))
        if 7 - (jan1 - start).days < self.minimum_days_in_first_week:
            start += timedelta(days=7)
        return start

    def _week_fields(self, day: date) -> tuple[int, int]:
        week_start = day - timedelta(days=self.weekday_position(self.weekday(day)))
        year = day.year
        if day.month == 1 and year > MINYEAR and week_start < self._first_week_start(year):
            year -= 1
        elif (
            day.month == 12
            and year < MAXYEAR
            and week_start >= self._first_week_start(year + 1)
        ):
            year += 1
        week_of_year = (week_start - self._first_week_start(year)).days // 7 + 1
        return year, week_of_year
