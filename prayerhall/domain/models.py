"""
Domain models for prayer instants, prayer windows and business hours.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Iterator, List, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import PrayerCalculationError


class Prayer(str, Enum):
    """The five daily prayers, declared in their daily order."""
    FAJR = "fajr"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @classmethod
    def ordered(cls) -> List["Prayer"]:
        return list(cls)


@dataclass(frozen=True)
class Coordinates:
    """
    Geographic position used for the astronomical calculation.

    Invariant: latitude in [-90, 90], longitude in [-180, 180].
    """
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {self.longitude}")

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def __str__(self) -> str:
        return f"({self.latitude}, {self.longitude})"


@dataclass(frozen=True)
class PrayerBuffer:
    """Minutes blocked before and after each prayer instant."""
    before_minutes: int = 15
    after_minutes: int = 15

    def __post_init__(self):
        if self.before_minutes < 0 or self.after_minutes < 0:
            raise ValueError("Prayer buffers must not be negative")

    @property
    def total_minutes(self) -> int:
        return self.before_minutes + self.after_minutes


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains_range(self, other: "TimeRange") -> bool:
        """Check if ``other`` lies completely inside this range."""
        return self.start <= other.start and other.end <= self.end

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class PrayerInstant:
    """A named prayer at a point in time on a specific date."""
    prayer: Prayer
    time: DateTime

    @property
    def name(self) -> str:
        return self.prayer.display_name

    def window(self, buffer: PrayerBuffer) -> "PrayerWindow":
        return PrayerWindow(
            prayer=self.prayer,
            prayer_time=self.time,
            start=self.time.subtract(minutes=buffer.before_minutes),
            end=self.time.add(minutes=buffer.after_minutes),
        )


@dataclass(frozen=True)
class PrayerWindow:
    """
    Closed interval [prayer_time - before, prayer_time + after].

    Both bounds are inclusive. Windows of one day may overlap each other.
    """
    prayer: Prayer
    prayer_time: DateTime
    start: DateTime
    end: DateTime

    def contains(self, instant: DateTime) -> bool:
        return self.start <= instant <= self.end

    def intersects(self, start: DateTime, end: DateTime) -> bool:
        """Check if the closed interval [start, end] shares any instant with the window."""
        return start <= self.end and end >= self.start

    def clipped(self, lower: DateTime, upper: DateTime) -> "PrayerWindow | None":
        """Clip the window to [lower, upper]; None when nothing remains."""
        start = max(self.start, lower)
        end = min(self.end, upper)
        if start > end:
            return None
        return PrayerWindow(prayer=self.prayer, prayer_time=self.prayer_time, start=start, end=end)

    def __str__(self) -> str:
        return (
            f"{self.prayer.display_name} {self.prayer_time.format('HH:mm')} "
            f"[{self.start.format('HH:mm')} - {self.end.format('HH:mm')}]"
        )


@dataclass(frozen=True)
class DailyPrayerSet:
    """
    The five prayer instants of one calendar date.

    Invariant: instants are listed in daily order and strictly increasing.
    """
    day: date
    instants: Tuple[PrayerInstant, ...]

    def __post_init__(self):
        names = [instant.prayer for instant in self.instants]
        if names != Prayer.ordered():
            raise PrayerCalculationError(
                f"Prayer set for {self.day} must list {[p.value for p in Prayer]}, got {[p.value for p in names]}"
            )
        for earlier, later in zip(self.instants, self.instants[1:]):
            if not earlier.time < later.time:
                raise PrayerCalculationError(
                    f"Prayer times for {self.day} are not increasing: "
                    f"{earlier.name} {earlier.time} >= {later.name} {later.time}"
                )

    @classmethod
    def from_mapping(cls, day: date, times: Dict[Prayer, DateTime]) -> "DailyPrayerSet":
        """Build a set from a prayer -> datetime mapping, rejecting gaps."""
        missing = [prayer.value for prayer in Prayer if prayer not in times]
        if missing:
            raise PrayerCalculationError(f"Missing prayer times for {day}: {', '.join(missing)}")
        return cls(
            day=day,
            instants=tuple(PrayerInstant(prayer=prayer, time=times[prayer]) for prayer in Prayer),
        )

    def __iter__(self) -> Iterator[PrayerInstant]:
        return iter(self.instants)

    def get(self, prayer: Prayer) -> PrayerInstant:
        return self.instants[Prayer.ordered().index(prayer)]

    @property
    def first(self) -> PrayerInstant:
        return self.instants[0]

    @property
    def last(self) -> PrayerInstant:
        return self.instants[-1]

    def windows(self, buffer: PrayerBuffer) -> List[PrayerWindow]:
        return [instant.window(buffer) for instant in self.instants]


@dataclass(frozen=True)
class BusinessHours:
    """
    Daily operating hours in local time.

    An instant is inside iff open_hour <= local hour < close_hour.
    """
    open_hour: int = 9
    close_hour: int = 23

    def __post_init__(self):
        if not 0 <= self.open_hour <= 23:
            raise ValueError(f"open_hour must be between 0 and 23, got {self.open_hour}")
        if not 1 <= self.close_hour <= 24:
            raise ValueError(f"close_hour must be between 1 and 24, got {self.close_hour}")

    def contains(self, dt: DateTime) -> bool:
        """Check if a local datetime falls inside operating hours."""
        return self.open_hour <= dt.hour < self.close_hour

    def opening_on(self, dt: DateTime) -> DateTime:
        """Opening time on the calendar day of ``dt``."""
        return dt.set(hour=self.open_hour, minute=0, second=0, microsecond=0)

    def closing_on(self, dt: DateTime) -> DateTime:
        """Closing time on the calendar day of ``dt`` (midnight when close_hour is 24)."""
        if self.close_hour == 24:
            return dt.start_of("day").add(days=1)
        return dt.set(hour=self.close_hour, minute=0, second=0, microsecond=0)

    def get_hours_for_day(self, dt: DateTime) -> TimeRange:
        """Get the operating hours range for the day of ``dt``."""
        return TimeRange(start=self.opening_on(dt), end=self.closing_on(dt))

    def __str__(self) -> str:
        return f"{self.open_hour:02d}:00 - {self.close_hour:02d}:00"


def localize(dt, timezone: str) -> DateTime:
    """
    Convert ``dt`` to a pendulum DateTime in ``timezone``.

    Naive datetimes are read as wall-clock time in ``timezone``.
    """
    if dt.tzinfo is None:
        return pendulum.datetime(
            dt.year, dt.month, dt.day,
            dt.hour, dt.minute, dt.second, dt.microsecond,
            tz=timezone,
        )
    return pendulum.instance(dt).in_timezone(timezone)
