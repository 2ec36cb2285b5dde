"""
Wiring helpers that turn an ``AppConfig`` into ready-to-use services.
"""

from typing import Callable, Optional

from pendulum import DateTime

from ..adapters.adhan_client import AdhanPrayerTimesClient
from ..adapters.fixed_client import FixedPrayerTimesClient
from ..config import AppConfig
from ..domain.availability import AvailabilityEvaluator
from .conflict_resolver import ConflictPolicy, ConflictResolver, ReservationBookProtocol
from .prayer_calculator import PrayerTimesClientProtocol, PrayerWindowCalculator


def build_prayer_client(config: AppConfig, mock: bool = False) -> PrayerTimesClientProtocol:
    """Pick the prayer-times source; ``mock`` forces the built-in default timetable."""
    if mock:
        return FixedPrayerTimesClient()
    if config.prayer.source == "fixed":
        return FixedPrayerTimesClient(config.prayer.fixed_times or None)
    return AdhanPrayerTimesClient(config.prayer.calculation_method)


def build_calculator(
    config: AppConfig,
    client: Optional[PrayerTimesClientProtocol] = None,
    mock: bool = False,
) -> PrayerWindowCalculator:
    return PrayerWindowCalculator(
        client=client or build_prayer_client(config, mock=mock),
        coordinates=config.location.to_coordinates(),
        timezone=config.timezone,
    )


def build_evaluator(
    config: AppConfig,
    calculator: Optional[PrayerWindowCalculator] = None,
    clock: Optional[Callable[[], DateTime]] = None,
    mock: bool = False,
) -> AvailabilityEvaluator:
    return AvailabilityEvaluator(
        prayer_sets=calculator or build_calculator(config, mock=mock),
        buffer=config.prayer.buffer.to_buffer(),
        business_hours=config.business_hours.to_business_hours(),
        timezone=config.timezone,
        max_search_days=config.max_search_days,
        clock=clock,
    )


def build_conflict_resolver(
    config: AppConfig,
    evaluator: AvailabilityEvaluator,
    reservation_book: Optional[ReservationBookProtocol] = None,
) -> ConflictResolver:
    rules = config.reservations
    return ConflictResolver(
        evaluator=evaluator,
        reservation_book=reservation_book,
        policy=ConflictPolicy(config.prayer.conflict_policy),
        min_advance_minutes=rules.min_advance_minutes,
        max_advance_days=rules.max_advance_days,
        default_duration_minutes=rules.duration_minutes,
    )
