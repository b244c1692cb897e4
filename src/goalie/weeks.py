"""Build calendar weeks and move between them."""

from __future__ import annotations

import logging
from datetime import datetime

from .calendar import CalendarAdapter, CalendarUnit, DateComponents
from .models import DayInterval, Week

logger = logging.getLogger(__name__)


def week_of(date: datetime, calendar: CalendarAdapter) -> Week:
    """Return the week containing ``date``."""
    components = calendar.date_components(date)
    first_day = calendar.date_from_components(
        DateComponents(
            year_for_week_of_year=components.year_for_week_of_year,
            week_of_year=components.week_of_year,
            weekday=calendar.first_weekday,
        )
    )
    return Week(
        year_for_week_of_year=components.year_for_week_of_year,
        week_of_year=components.week_of_year,
        month=components.month,
        first_day_of_week=calendar.date_components(first_day).day,
        week_day_intervals=week_day_intervals(
            components.year_for_week_of_year, components.week_of_year, calendar
        ),
    )


def week_day_intervals(
    year_for_week_of_year: int, week_of_year: int, calendar: CalendarAdapter
) -> tuple[DayInterval, ...]:
    """Return the seven days of a week in order, starting on the first weekday."""
    intervals = []
    for position in range(7):
        weekday = (calendar.first_weekday - 1 + position) % 7 + 1
        midnight = calendar.date_from_components(
            DateComponents(
                year_for_week_of_year=year_for_week_of_year,
                week_of_year=week_of_year,
                weekday=weekday,
            )
        )
        intervals.append(day_interval(midnight, calendar))
    return tuple(intervals)


def day_interval(midnight: datetime, calendar: CalendarAdapter) -> DayInterval:
    """Span ``midnight`` up to one second before the following midnight."""
    next_midnight = calendar.start_of_day(calendar.add(midnight, CalendarUnit.DAY, 1))
    end = calendar.add(next_midnight, CalendarUnit.SECOND, -1)
    return DayInterval(start_date=midnight, end_date=end)


def first_day_date(week: Week, calendar: CalendarAdapter) -> datetime:
    return calendar.date_from_components(
        DateComponents(
            year_for_week_of_year=week.year_for_week_of_year,
            week_of_year=week.week_of_year,
            weekday=calendar.first_weekday,
        )
    )


def shift_week(week: Week, calendar: CalendarAdapter, weeks: int) -> Week:
    """Return the week ``weeks`` weeks after ``week`` (before, if negative).

    Raises :class:`goalie.errors.CalendarAdapterError` when the target date is
    outside the calendar's range.
    """
    target = calendar.add(first_day_date(week, calendar), CalendarUnit.WEEK, weeks)
    shifted = week_of(target, calendar)
    logger.debug("Shifted week %s by %d to %s", week.id, weeks, shifted.id)
    return shifted


def previous_week(week: Week, calendar: CalendarAdapter) -> Week:
    return shift_week(week, calendar, -1)


def next_week(week: Week, calendar: CalendarAdapter) -> Week:
    return shift_week(week, calendar, 1)
