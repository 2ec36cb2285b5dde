"""
Fixed-timetable prayer-times client.

Some halls follow the times posted by their neighbourhood mosque instead
of an astronomical calculation; the same client also backs ``--mock`` runs
and tests, where deterministic times are needed.
"""

from datetime import date, datetime, time
from typing import Dict, Mapping, Union

import pendulum
from pendulum import DateTime

from ..domain.models import Coordinates, Prayer

# Approximate Makkah times in February, used when no timetable is configured.
DEFAULT_TIMETABLE: Dict[Prayer, time] = {
    Prayer.FAJR: time(5, 38),
    Prayer.DHUHR: time(12, 33),
    Prayer.ASR: time(15, 51),
    Prayer.MAGHRIB: time(18, 19),
    Prayer.ISHA: time(19, 49),
}


def parse_clock_time(value: Union[str, time]) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS' into a ``time``."""
    if isinstance(value, time):
        return value
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time '{value}', expected HH:MM")


class FixedPrayerTimesClient:
    """
    Returns the same local clock times for every date.

    Coordinates are accepted for interface compatibility and ignored.
    """

    def __init__(self, timetable: Mapping[Union[Prayer, str], Union[str, time]] | None = None):
        if not timetable:
            self.timetable = dict(DEFAULT_TIMETABLE)
        else:
            self.timetable = {
                Prayer(key.lower() if isinstance(key, str) else key): parse_clock_time(value)
                for key, value in timetable.items()
            }
        missing = [prayer.value for prayer in Prayer if prayer not in self.timetable]
        if missing:
            raise ValueError(f"Fixed timetable is missing: {', '.join(missing)}")

    def get_prayer_times(
        self,
        coordinates: Coordinates,
        day: date,
        timezone: str,
    ) -> Dict[Prayer, DateTime]:
        return {
            prayer: pendulum.datetime(
                day.year, day.month, day.day,
                clock.hour, clock.minute, clock.second,
                tz=timezone,
            )
            for prayer, clock in self.timetable.items()
        }
