"""
Once-a-day refresh of the cached prayer set.

The calculator already recomputes lazily on a cache miss, so this is an
optimisation and a cache janitor, not a correctness requirement: ``tick``
may be driven by the host application's own scheduler, or ``start`` arms a
timer that fires at every local midnight until ``stop`` is called.
"""

import logging
import threading
from datetime import date
from typing import Callable, Optional

import pendulum
from pendulum import DateTime

from ..domain.models import DailyPrayerSet, localize
from .prayer_calculator import PrayerWindowCalculator

logger = logging.getLogger(__name__)


class DailyRefresher:
    """Keeps today's prayer set fresh and evicts past days from the cache."""

    def __init__(
        self,
        calculator: PrayerWindowCalculator,
        clock: Optional[Callable[[], DateTime]] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ) -> None:
        self._calculator = calculator
        self._clock = clock or (lambda: pendulum.now(calculator.timezone))
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self.last_refreshed: Optional[date] = None

    @property
    def running(self) -> bool:
        return self._timer is not None

    def _now(self) -> DateTime:
        return localize(self._clock(), self._calculator.timezone)

    def tick(self, now: Optional[DateTime] = None) -> Optional[DailyPrayerSet]:
        """
        Refresh today's set if the local date changed since the last refresh.

        Returns:
            The new prayer set, or None when nothing had to be done
        """
        local = localize(now, self._calculator.timezone) if now is not None else self._now()
        today = date(local.year, local.month, local.day)

        with self._lock:
            if self.last_refreshed == today:
                return None
            prayer_set = self._calculator.refresh(today)
            evicted = self._calculator.evict_before(today)
            self.last_refreshed = today

        logger.info("Daily prayer refresh for %s done (%d stale day(s) evicted)", today, evicted)
        return prayer_set

    def seconds_until_midnight(self, now: Optional[DateTime] = None) -> float:
        local = localize(now, self._calculator.timezone) if now is not None else self._now()
        midnight = local.start_of("day").add(days=1)
        return max((midnight - local).total_seconds(), 0.0)

    def start(self) -> None:
        """Refresh now and arm the midnight timer. Calling twice is a no-op."""
        if self.running:
            return
        self.tick()
        self._schedule()

    def stop(self) -> None:
        """Cancel the pending timer; must be called on shutdown."""
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            logger.debug("Daily prayer refresh timer stopped")

    def _schedule(self) -> None:
        delay = self.seconds_until_midnight()
        # a second of slack so the callback lands on the new date
        timer = self._timer_factory(delay + 1, self._on_timer)
        timer.daemon = True
        self._timer = timer
        timer.start()
        logger.debug("Next prayer refresh in %.0f seconds", delay + 1)

    def _on_timer(self) -> None:
        if self._timer is None:
            return
        try:
            self.tick()
        except Exception:
            logger.exception("Daily prayer refresh failed; will retry at next midnight")
        if self._timer is not None:
            self._schedule()
