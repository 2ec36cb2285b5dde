"""
Domain-specific exception hierarchy for the prayerhall application.
"""

from typing import Optional


class PrayerHallError(Exception):
    """Base class for all application-level errors."""


class PrayerCalculationError(PrayerHallError):
    """Raised when prayer times cannot be computed for a date and location."""


class ConfigurationError(PrayerHallError):
    """Raised when buffers or business hours make scheduling impossible."""


class ReservationRejected(PrayerHallError):
    """
    Raised when a reservation or session violates a business rule.

    ``code`` is a stable identifier callers can switch on; the message is
    meant for staff.
    """

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class PrayerConflictError(ReservationRejected):
    """Raised when a requested interval overlaps a prayer window."""

    def __init__(self, message: str, window=None, override_allowed: bool = False):
        super().__init__("prayer_conflict", message)
        self.window = window
        self.override_allowed = override_allowed

    @property
    def prayer_name(self) -> Optional[str]:
        return self.window.prayer.display_name if self.window else None
