"""Timers that remove holds once they pass ``expires_at``."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable

from ...models.domain import Hold

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _daemon_timer(interval: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class HoldExpiryScheduler:
    """Keeps one timer per active hold.

    Timers are an optimization only: expired holds are also filtered on
    every read, and ``recover`` rebuilds the timers from stored holds after
    a restart.
    """

    def __init__(
        self,
        on_expire: Callable[[str], None],
        clock: Callable[[], datetime],
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self._on_expire = on_expire
        self._clock = clock
        self._timer_factory = timer_factory
        self._timers: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def schedule(self, hold: Hold) -> None:
        delay = (hold.expires_at - self._clock()).total_seconds()
        if delay <= 0:
            self._fire(hold.id)
            return
        timer = self._timer_factory(delay, lambda: self._fire(hold.id))
        with self._lock:
            previous = self._timers.pop(hold.id, None)
            if previous is not None:
                previous.cancel()
            self._timers[hold.id] = timer
        timer.start()

    def cancel(self, hold_id: str) -> None:
        with self._lock:
            timer = self._timers.pop(hold_id, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def pending(self) -> list[str]:
        with self._lock:
            return list(self._timers)

    def recover(self, holds: list[Hold]) -> int:
        """Reschedule timers for stored holds; returns how many were rescheduled."""

        now = self._clock()
        rescheduled = 0
        for hold in holds:
            if hold.is_active(now):
                self.schedule(hold)
                rescheduled += 1
            else:
                self._fire(hold.id)
        return rescheduled

    def _fire(self, hold_id: str) -> None:
        with self._lock:
            self._timers.pop(hold_id, None)
        try:
            self._on_expire(hold_id)
        except Exception:
            logger.exception(f"Failed to expire hold {hold_id}")
