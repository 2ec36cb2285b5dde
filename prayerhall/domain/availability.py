"""
Availability rules for the hall: prayer windows, business hours and the
search for the next instant at which business may resume.

Pure domain logic. Prayer times come from a ``PrayerSetProvider``; this
module never computes astronomy itself.
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Optional, Protocol

import pendulum
from pendulum import DateTime

from .exceptions import ConfigurationError
from .models import (
    BusinessHours,
    DailyPrayerSet,
    PrayerBuffer,
    PrayerInstant,
    PrayerWindow,
    localize,
)

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


class PrayerSetProvider(Protocol):
    """Anything able to hand out the prayer set of a calendar date."""

    def get_prayer_set(self, day: date) -> DailyPrayerSet:
        """Return the five prayer instants for ``day``."""


class AvailabilityState(str, Enum):
    OUTSIDE_HOURS = "outside_hours"
    IN_PRAYER_WINDOW = "in_prayer_window"
    VALID = "valid"


class AvailabilityEvaluator:
    """
    Decides whether an instant or interval is open for business.

    Every check looks up the prayer set of the instant's own local date, so
    future-dated reservations are judged against their own day's prayers.

    Search algorithm (``get_next_available_time``):
    1. Classify the candidate instant
    2. OUTSIDE_HOURS before opening -> jump to that day's opening
    3. OUTSIDE_HOURS at/after closing -> jump to next day's opening
    4. IN_PRAYER_WINDOW -> jump to the window end + 1 minute
    5. VALID -> done
    """

    def __init__(
        self,
        prayer_sets: PrayerSetProvider,
        buffer: Optional[PrayerBuffer] = None,
        business_hours: Optional[BusinessHours] = None,
        timezone: str = "Asia/Riyadh",
        max_search_days: int = 14,
        clock: Optional[Callable[[], DateTime]] = None,
    ):
        self.prayer_sets = prayer_sets
        self.buffer = buffer or PrayerBuffer()
        self.business_hours = business_hours or BusinessHours()
        self.timezone = timezone
        self.max_search_days = max_search_days
        self._clock = clock or (lambda: pendulum.now(self.timezone))

        if self.buffer.total_minutes >= MINUTES_PER_DAY:
            raise ConfigurationError(
                f"Prayer buffers cover {self.buffer.total_minutes} minutes; "
                f"they must span less than a day"
            )
        if self.business_hours.open_hour >= self.business_hours.close_hour:
            raise ConfigurationError(f"Business hours {self.business_hours} are empty")
        if max_search_days < 1:
            raise ConfigurationError("max_search_days must be at least 1")

    def now(self) -> DateTime:
        return localize(self._clock(), self.timezone)

    def to_local(self, dt: Optional[datetime]) -> DateTime:
        """Localize ``dt`` to the hall timezone; None means now."""
        if dt is None:
            return self.now()
        return localize(dt, self.timezone)

    # ------------------------------------------------------------------
    # Prayer set lookups
    # ------------------------------------------------------------------

    def get_prayer_times(self, day: date) -> DailyPrayerSet:
        """Prayer instants for a calendar date."""
        return self.prayer_sets.get_prayer_set(date(day.year, day.month, day.day))

    def get_prayer_windows(self, day: date) -> List[PrayerWindow]:
        """Buffered prayer windows for a calendar date, in prayer order."""
        return self.get_prayer_times(day).windows(self.buffer)

    def get_active_window(self, instant: Optional[datetime] = None) -> Optional[PrayerWindow]:
        """
        Return the window containing ``instant``, or None.

        When windows overlap the one ending last is returned, since that is
        the earliest point at which the instant's blackout is over.
        """
        local = self.to_local(instant)
        containing = [w for w in self.get_prayer_windows(local.date()) if w.contains(local)]
        if not containing:
            return None
        return max(containing, key=lambda w: w.end)

    # ------------------------------------------------------------------
    # Point and interval checks
    # ------------------------------------------------------------------

    def is_in_prayer_time(self, instant: Optional[datetime] = None) -> bool:
        """
        True iff ``instant`` falls inside any prayer window of its local date.

        Only the instant's own date is consulted: a window that spills past
        midnight (e.g. a late Isha) does not block the first minutes of the
        next day.
        """
        window = self.get_active_window(instant)
        if window is not None:
            logger.debug("%s falls within %s", self.to_local(instant), window)
        return window is not None

    def first_conflicting_window(self, start: datetime, end: datetime) -> Optional[PrayerWindow]:
        """
        Return the earliest prayer window intersecting the closed interval
        [start, end], or None.

        Windows are clipped to their own calendar date so that the answer
        agrees with ``is_in_prayer_time`` for every instant of the interval.
        """
        local_start = self.to_local(start)
        local_end = self.to_local(end)
        if local_start > local_end:
            raise ValueError(f"Interval start {local_start} is after its end {local_end}")

        day = local_start.start_of("day")
        while day <= local_end:
            day_end = day.end_of("day")
            for window in self.get_prayer_windows(day.date()):
                clipped = window.clipped(day, day_end)
                if clipped is not None and clipped.intersects(local_start, local_end):
                    return clipped
            day = day.add(days=1)
        return None

    def is_during_prayer_interval(self, start: datetime, end: datetime) -> bool:
        """True iff the closed interval [start, end] overlaps any prayer window."""
        window = self.first_conflicting_window(start, end)
        if window is not None:
            logger.debug("Interval %s - %s conflicts with %s", start, end, window)
        return window is not None

    def classify(self, instant: Optional[datetime] = None) -> AvailabilityState:
        local = self.to_local(instant)
        if not self.business_hours.contains(local):
            return AvailabilityState.OUTSIDE_HOURS
        if self.is_in_prayer_time(local):
            return AvailabilityState.IN_PRAYER_WINDOW
        return AvailabilityState.VALID

    def is_valid_business_hour(self, instant: Optional[datetime] = None) -> bool:
        """True iff ``instant`` is inside business hours and outside every prayer window."""
        return self.classify(instant) is AvailabilityState.VALID

    # ------------------------------------------------------------------
    # Searches
    # ------------------------------------------------------------------

    def get_next_available_time(self, start: Optional[datetime] = None) -> DateTime:
        """
        Earliest instant at or after ``start`` that is valid for business.

        Raises:
            ConfigurationError: If nothing valid is found within max_search_days
        """
        origin = self.to_local(start)
        limit = origin.add(days=self.max_search_days)
        candidate = origin

        while True:
            if candidate > limit:
                raise ConfigurationError(
                    f"No valid business time within {self.max_search_days} days of {origin}; "
                    f"check prayer buffers and business hours"
                )

            state = self.classify(candidate)

            if state is AvailabilityState.VALID:
                logger.info("Next available time from %s is %s", origin, candidate)
                return candidate

            if state is AvailabilityState.OUTSIDE_HOURS:
                if candidate.hour < self.business_hours.open_hour:
                    candidate = self.business_hours.opening_on(candidate)
                else:
                    candidate = self.business_hours.opening_on(candidate.add(days=1))
                continue

            window = self.get_active_window(candidate)
            candidate = window.end.add(minutes=1)

    def get_next_prayer(self, start: Optional[datetime] = None) -> PrayerInstant:
        """
        Earliest prayer instant strictly after ``start``.

        Before today's Fajr, yesterday's Isha is consulted as well: at high
        latitudes it can fall after midnight and still be ahead of ``start``.
        """
        local = self.to_local(start)
        today = self.get_prayer_times(local.date())

        if local < today.first.time:
            yesterday = self.get_prayer_times(local.subtract(days=1).date())
            if yesterday.last.time > local:
                return yesterday.last
            return today.first

        for instant in today:
            if instant.time > local:
                return instant

        return self.get_prayer_times(local.add(days=1).date()).first
