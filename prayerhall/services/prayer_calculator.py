"""
Prayer window calculator: caches one prayer set per calendar date.

The astronomical work is delegated to a prayer-times client matching
``PrayerTimesClientProtocol``; this service normalises timezones, validates
the result and keeps it keyed by date so repeated availability checks for
the same day do not recompute it.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, Protocol

from pendulum import DateTime

from ..domain.exceptions import PrayerCalculationError, PrayerHallError
from ..domain.models import Coordinates, DailyPrayerSet, Prayer, localize

logger = logging.getLogger(__name__)


class PrayerTimesClientProtocol(Protocol):
    """Protocol describing the astronomical calculation the calculator needs."""

    def get_prayer_times(
        self,
        coordinates: Coordinates,
        day: date,
        timezone: str,
    ) -> Dict[Prayer, DateTime]:
        """Return the five prayer instants of ``day`` at ``coordinates``."""


class PrayerWindowCalculator:
    """
    Computes and caches the daily prayer set for a fixed location.

    The cache is read-mostly and keyed by calendar date. A miss always
    triggers a computation, so readers never depend on the daily refresh
    having run.
    """

    def __init__(
        self,
        client: PrayerTimesClientProtocol,
        coordinates: Coordinates,
        timezone: str = "Asia/Riyadh",
        max_cached_days: int = 31,
    ) -> None:
        self._client = client
        self.coordinates = coordinates
        self.timezone = timezone
        self.max_cached_days = max_cached_days
        self._cache: "OrderedDict[date, DailyPrayerSet]" = OrderedDict()
        # guards the cache against the midnight refresh timer
        self._lock = threading.RLock()

    def get_prayer_set(self, day: date) -> DailyPrayerSet:
        """Return the prayer set for ``day``, computing it on a cache miss."""
        key = _as_date(day)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached
            return self.refresh(key)

    def prayer_set_for(self, instant: datetime) -> DailyPrayerSet:
        """Prayer set of the local calendar date ``instant`` falls on."""
        local = localize(instant, self.timezone)
        return self.get_prayer_set(local.date())

    def refresh(self, day: date) -> DailyPrayerSet:
        """
        Recompute the prayer set for ``day`` and store it.

        Raises:
            PrayerCalculationError: If the client fails or returns unusable times
        """
        key = _as_date(day)
        prayer_set = self._compute(key)
        with self._lock:
            self._cache[key] = prayer_set
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_cached_days:
                self._cache.popitem(last=False)
        logger.info(
            "Prayer times for %s at %s: %s",
            key,
            self.coordinates,
            ", ".join(f"{i.name} {i.time.format('HH:mm')}" for i in prayer_set),
        )
        return prayer_set

    def evict_before(self, day: date) -> int:
        """Drop cached sets older than ``day``; returns the number removed."""
        cutoff = _as_date(day)
        with self._lock:
            stale = [key for key in self._cache if key < cutoff]
            for key in stale:
                del self._cache[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def cached_days(self) -> list[date]:
        with self._lock:
            return sorted(self._cache)

    def _compute(self, day: date) -> DailyPrayerSet:
        try:
            raw_times = self._client.get_prayer_times(
                coordinates=self.coordinates,
                day=day,
                timezone=self.timezone,
            )
        except PrayerHallError:
            raise
        except Exception as exc:
            raise PrayerCalculationError(
                f"Could not calculate prayer times for {day} at {self.coordinates}: {exc}"
            ) from exc

        local_times = {
            prayer: localize(value, self.timezone)
            for prayer, value in raw_times.items()
        }
        return DailyPrayerSet.from_mapping(day, local_times)


def _as_date(day: date) -> date:
    """Normalise pendulum/stdlib dates and datetimes to a plain ``date`` key."""
    return date(day.year, day.month, day.day)
