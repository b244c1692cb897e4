"""Keep a cached "start of today" current across midnight."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Callable, Optional

from .calendar import CalendarAdapter
from .models import elapsed_seconds

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class DayRollover:
    """Refresh the start of the current day at each local midnight.

    ``start()`` runs a daemon thread that sleeps until the next midnight,
    refreshes the cached value, and repeats until ``stop()`` is called.
    """

    def __init__(
        self,
        calendar: CalendarAdapter,
        now: Callable[[], datetime] = _utc_now,
        on_rollover: Optional[Callable[[datetime], None]] = None,
    ) -> None:
        self._calendar = calendar
        self._now = now
        self._on_rollover = on_rollover
        self._lock = threading.Lock()
        self._start_of_today = calendar.start_of_day(now())
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def start_of_today(self) -> datetime:
        with self._lock:
            return self._start_of_today

    def refresh(self) -> datetime:
        """Recompute the start of today; notify if the day changed."""
        current = self._calendar.start_of_day(self._now())
        with self._lock:
            changed = current != self._start_of_today
            self._start_of_today = current
        if changed:
            logger.info("Day rolled over to %s.", current.date().isoformat())
            if self._on_rollover:
                self._on_rollover(current)
        return current

    def seconds_until_rollover(self) -> float:
        now = self._now()
        return max(elapsed_seconds(now, self._calendar.next_start_of_day(now)), 0.0)

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(target=self._run, args=(stop_event,), daemon=True)
            self._thread = thread
            self._stop_event = stop_event
        thread.start()
        logger.debug("Day rollover timer started.")

    def stop(self) -> None:
        with self._lock:
            thread, stop_event = self._thread, self._stop_event
            self._thread = None
            self._stop_event = None
        if not thread or not stop_event:
            return
        stop_event.set()
        thread.join(timeout=10)
        logger.debug("Day rollover timer stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.refresh()
            # Sleep in an interruptible manner.
            if stop_event.wait(self.seconds_until_rollover() + 0.5):
                break
