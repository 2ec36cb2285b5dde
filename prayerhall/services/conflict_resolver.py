"""
Reservation and session guard.

Reservation and session flows call the ``ConflictResolver`` before they
commit anything. It combines the booking rules of the hall (advance
notice, table clashes) with the availability rules of the
``AvailabilityEvaluator`` and reports violations as ``ReservationRejected``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from pendulum import DateTime

from ..domain.availability import AvailabilityEvaluator, AvailabilityState
from ..domain.exceptions import ConfigurationError, PrayerConflictError, ReservationRejected
from ..domain.models import PrayerWindow, TimeRange
from ..domain.reservations import Reservation

logger = logging.getLogger(__name__)


class ConflictPolicy(str, Enum):
    """What happens when a request overlaps a prayer window."""
    BLOCK = "block"
    OVERRIDE = "override"  # allowed only with an explicit manager override


class ReservationBookProtocol(Protocol):
    """Protocol describing the reservation lookups the resolver needs."""

    def get_table_reservations(
        self,
        table_id: int,
        start: DateTime,
        end: DateTime,
    ) -> Sequence[Reservation]:
        """Return reservations of ``table_id`` touching [start, end]."""


class ConflictResolver:
    """
    Validates reservations and walk-in sessions against business rules.

    Dependency inversion toward ``ReservationBookProtocol`` keeps the
    persistence layer out of this package; tests plug in a list-backed stub.
    """

    def __init__(
        self,
        evaluator: AvailabilityEvaluator,
        reservation_book: Optional[ReservationBookProtocol] = None,
        policy: ConflictPolicy = ConflictPolicy.BLOCK,
        min_advance_minutes: int = 30,
        max_advance_days: int = 7,
        default_duration_minutes: int = 120,
    ) -> None:
        self._evaluator = evaluator
        self._reservation_book = reservation_book
        self.policy = ConflictPolicy(policy)
        self.min_advance_minutes = min_advance_minutes
        self.max_advance_days = max_advance_days
        self.default_duration_minutes = default_duration_minutes

    def check_reservation(
        self,
        *,
        table_id: int,
        start: datetime,
        duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
        manager_override: bool = False,
    ) -> TimeRange:
        """
        Validate a reservation request and return its interval.

        Raises:
            ReservationRejected: If any booking or availability rule fails
            PrayerConflictError: If the interval overlaps a prayer window
        """
        current = self._evaluator.to_local(now)
        interval = self._interval(start, duration_minutes)

        earliest = current.add(minutes=self.min_advance_minutes)
        if interval.start < earliest:
            self._reject(
                "too_soon",
                f"Reservations must be made at least {self.min_advance_minutes} minutes in advance",
            )

        latest = current.add(days=self.max_advance_days)
        if interval.start > latest:
            self._reject(
                "too_far_ahead",
                f"Reservations cannot be made more than {self.max_advance_days} days in advance",
            )

        hours = self._evaluator.business_hours.get_hours_for_day(interval.start)
        if not hours.contains_range(interval):
            self._reject(
                "outside_business_hours",
                f"Reservation {interval} is outside business hours ({self._evaluator.business_hours})",
            )

        window = self._evaluator.first_conflicting_window(interval.start, interval.end)
        if window is not None:
            self._handle_prayer_conflict(window, manager_override, f"Reservation {interval}")

        clashes = self._clashing_reservations(table_id, interval)
        if clashes:
            self._reject(
                "table_reserved",
                f"Table {table_id} is already reserved for {clashes[0].time_range}",
            )

        logger.info("Reservation for table %s at %s accepted", table_id, interval)
        return interval

    def check_session_start(
        self,
        at: Optional[datetime] = None,
        manager_override: bool = False,
    ) -> DateTime:
        """
        Validate that a walk-in session may start at ``at`` (default: now).

        Raises:
            ReservationRejected: Outside business hours
            PrayerConflictError: Inside a prayer window
        """
        instant = self._evaluator.to_local(at)
        state = self._evaluator.classify(instant)

        if state is AvailabilityState.OUTSIDE_HOURS:
            self._reject(
                "outside_business_hours",
                f"Sessions cannot start at {instant.format('HH:mm')}; "
                f"business hours are {self._evaluator.business_hours}",
            )
        if state is AvailabilityState.IN_PRAYER_WINDOW:
            window = self._evaluator.get_active_window(instant)
            self._handle_prayer_conflict(window, manager_override, "Session start")

        return instant

    def suggest_next_slot(
        self,
        *,
        table_id: int,
        after: Optional[datetime] = None,
        duration_minutes: Optional[int] = None,
    ) -> TimeRange:
        """
        Earliest interval starting at or after ``after`` that fits business
        hours, avoids every prayer window and does not clash on the table.

        Raises:
            ConfigurationError: If no slot exists within the search horizon
        """
        origin = self._evaluator.to_local(after)
        duration = self.default_duration_minutes if duration_minutes is None else duration_minutes
        if duration <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        limit = origin.add(days=self._evaluator.max_search_days)
        hours = self._evaluator.business_hours

        candidate = self._evaluator.get_next_available_time(origin)
        while candidate <= limit:
            interval = TimeRange(start=candidate, end=candidate.add(minutes=duration))

            if interval.end > hours.closing_on(candidate):
                candidate = self._evaluator.get_next_available_time(
                    hours.opening_on(candidate.add(days=1))
                )
                continue

            window = self._evaluator.first_conflicting_window(interval.start, interval.end)
            if window is not None:
                candidate = self._evaluator.get_next_available_time(window.end.add(minutes=1))
                continue

            clashes = self._clashing_reservations(table_id, interval)
            if clashes:
                candidate = self._evaluator.get_next_available_time(
                    max(r.time_range.end for r in clashes)
                )
                continue

            logger.info("Suggested slot for table %s: %s", table_id, interval)
            return interval

        raise ConfigurationError(
            f"No {duration}-minute slot for table {table_id} within "
            f"{self._evaluator.max_search_days} days of {origin}"
        )

    def _interval(self, start: datetime, duration_minutes: Optional[int]) -> TimeRange:
        duration = self.default_duration_minutes if duration_minutes is None else duration_minutes
        if duration <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        local_start = self._evaluator.to_local(start)
        return TimeRange(start=local_start, end=local_start.add(minutes=duration))

    def _clashing_reservations(self, table_id: int, interval: TimeRange) -> List[Reservation]:
        if self._reservation_book is None:
            return []
        existing = self._reservation_book.get_table_reservations(
            table_id, interval.start, interval.end
        )
        return [r for r in existing if r.conflicts_with(table_id, interval)]

    def _handle_prayer_conflict(
        self,
        window: PrayerWindow,
        manager_override: bool,
        subject: str,
    ) -> None:
        if self.policy is ConflictPolicy.OVERRIDE and manager_override:
            logger.warning("%s overlaps %s; allowed by manager override", subject, window)
            return

        override_allowed = self.policy is ConflictPolicy.OVERRIDE
        message = f"{subject} overlaps {window.prayer.display_name} prayer time ({window})"
        if override_allowed:
            message += "; a manager override is required"
        logger.warning("%s", message)
        raise PrayerConflictError(message, window=window, override_allowed=override_allowed)

    @staticmethod
    def _reject(code: str, message: str) -> None:
        logger.warning("Rejected (%s): %s", code, message)
        raise ReservationRejected(code, message)
