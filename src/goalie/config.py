"""Configuration models and helpers for the goal tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from uuid import UUID

from .calendar import CalendarAdapter
from .models import DEFAULT_TOPIC_ID


def _default_timezone() -> str:
    return os.environ.get("TZ") or "UTC"


@dataclass(slots=True)
class TrackerSettings:
    """Calendar and aggregation options shared by the CLI and the web app."""

    timezone: str = field(default_factory=_default_timezone)
    first_weekday: int = 1  # Sunday
    minimum_days_in_first_week: int = 1
    # Clamp a running session to the queried range like recorded sessions.
    clamp_active_session: bool = False
    default_topic_id: UUID = DEFAULT_TOPIC_ID

    @classmethod
    def from_options(
        cls,
        timezone: str | None = None,
        first_weekday: int | None = None,
        iso_weeks: bool = False,
        clamp_active_session: bool = False,
        topic_id: UUID | None = None,
    ) -> "TrackerSettings":
        settings = cls(clamp_active_session=clamp_active_session)
        if timezone:
            settings.timezone = timezone
        if iso_weeks:
            settings.first_weekday = 2
            settings.minimum_days_in_first_week = 4
        if first_weekday is not None:
            settings.first_weekday = first_weekday
        if topic_id is not None:
            settings.default_topic_id = topic_id
        return settings

    def calendar(self) -> CalendarAdapter:
        return CalendarAdapter(
            self.timezone,
            first_weekday=self.first_weekday,
            minimum_days_in_first_week=self.minimum_days_in_first_week,
        )
