"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityEvaluator, AvailabilityState, PrayerSetProvider
from .exceptions import (
    ConfigurationError,
    PrayerCalculationError,
    PrayerConflictError,
    PrayerHallError,
    ReservationRejected,
)
from .models import (
    BusinessHours,
    Coordinates,
    DailyPrayerSet,
    Prayer,
    PrayerBuffer,
    PrayerInstant,
    PrayerWindow,
    TimeRange,
)
from .reservations import Reservation, ReservationStatus

__all__ = [
    "AvailabilityEvaluator",
    "AvailabilityState",
    "BusinessHours",
    "ConfigurationError",
    "Coordinates",
    "DailyPrayerSet",
    "Prayer",
    "PrayerBuffer",
    "PrayerCalculationError",
    "PrayerConflictError",
    "PrayerHallError",
    "PrayerInstant",
    "PrayerSetProvider",
    "PrayerWindow",
    "Reservation",
    "ReservationRejected",
    "ReservationStatus",
    "TimeRange",
]
