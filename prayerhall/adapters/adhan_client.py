"""
Astronomical prayer-times client backed by the adhanpy library.
"""

from datetime import date, datetime
from typing import Dict

import pendulum
from adhanpy.PrayerTimes import PrayerTimes
from adhanpy.calculation.CalculationMethod import CalculationMethod
from pendulum import DateTime

from ..domain.models import Coordinates, Prayer


class AdhanPrayerTimesClient:
    """
    Computes prayer times locally (no network) with adhanpy.

    The calculation method is fixed per client; Umm al-Qura is the method
    used across Saudi Arabia and the default for the hall.
    """

    def __init__(self, calculation_method: str = "UMM_AL_QURA"):
        """
        Args:
            calculation_method: Name of an adhanpy ``CalculationMethod`` member
        """
        try:
            self.calculation_method = CalculationMethod[calculation_method.upper()]
        except KeyError:
            known = ", ".join(member.name for member in CalculationMethod)
            raise ValueError(
                f"Unknown calculation method '{calculation_method}'. Known methods: {known}"
            ) from None

    def get_prayer_times(
        self,
        coordinates: Coordinates,
        day: date,
        timezone: str,
    ) -> Dict[Prayer, DateTime]:
        """
        Calculate the five prayer instants for ``day``.

        Returns:
            Dictionary mapping Prayer -> aware DateTime in ``timezone``
        """
        tz = pendulum.timezone(timezone)
        prayer_times = PrayerTimes(
            coordinates.as_tuple(),
            datetime(day.year, day.month, day.day, tzinfo=tz),
            calculation_method=self.calculation_method,
            time_zone=tz,
        )

        return {
            Prayer.FAJR: pendulum.instance(prayer_times.fajr).in_timezone(timezone),
            Prayer.DHUHR: pendulum.instance(prayer_times.dhuhr).in_timezone(timezone),
            Prayer.ASR: pendulum.instance(prayer_times.asr).in_timezone(timezone),
            Prayer.MAGHRIB: pendulum.instance(prayer_times.maghrib).in_timezone(timezone),
            Prayer.ISHA: pendulum.instance(prayer_times.isha).in_timezone(timezone),
        }
