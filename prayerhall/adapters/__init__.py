"""
Adapters layer - prayer-time sources.
"""

from .adhan_client import AdhanPrayerTimesClient
from .fixed_client import FixedPrayerTimesClient

__all__ = ["AdhanPrayerTimesClient", "FixedPrayerTimesClient"]
