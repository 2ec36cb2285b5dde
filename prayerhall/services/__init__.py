"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .conflict_resolver import ConflictPolicy, ConflictResolver, ReservationBookProtocol
from .daily_refresh import DailyRefresher
from .engine import (
    build_calculator,
    build_conflict_resolver,
    build_evaluator,
    build_prayer_client,
)
from .prayer_calculator import PrayerTimesClientProtocol, PrayerWindowCalculator

__all__ = [
    "ConflictPolicy",
    "ConflictResolver",
    "DailyRefresher",
    "PrayerTimesClientProtocol",
    "PrayerWindowCalculator",
    "ReservationBookProtocol",
    "build_calculator",
    "build_conflict_resolver",
    "build_evaluator",
    "build_prayer_client",
]
