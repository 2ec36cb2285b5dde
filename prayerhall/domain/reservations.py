"""
Reservation records as seen by the availability guard.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import TimeRange


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"

    @property
    def blocks_table(self) -> bool:
        """Only pending and confirmed reservations hold a table."""
        return self in (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)


@dataclass(frozen=True)
class Reservation:
    """A booked interval on one pool table."""
    table_id: int
    time_range: TimeRange
    status: ReservationStatus = ReservationStatus.PENDING
    reservation_id: Optional[int] = None

    def conflicts_with(self, table_id: int, time_range: TimeRange) -> bool:
        return (
            self.table_id == table_id
            and self.status.blocks_table
            and self.time_range.overlaps(time_range)
        )
