"""
Tests for domain models.
"""

from datetime import date

import pendulum
import pytest

from prayerhall.domain.exceptions import PrayerCalculationError
from prayerhall.domain.models import (
    BusinessHours,
    Coordinates,
    DailyPrayerSet,
    Prayer,
    PrayerBuffer,
    PrayerInstant,
    TimeRange,
    localize,
)

TZ = "Asia/Riyadh"


def _at(text: str):
    return pendulum.parse(text, tz=TZ)


def _prayer_set(day: str = "2024-02-10", **overrides) -> DailyPrayerSet:
    clocks = {"fajr": "05:00", "dhuhr": "12:00", "asr": "15:30", "maghrib": "18:00", "isha": "19:30"}
    clocks.update(overrides)
    times = {Prayer(name): _at(f"{day} {clock}") for name, clock in clocks.items()}
    return DailyPrayerSet.from_mapping(date.fromisoformat(day), times)


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = _at("2024-02-10 09:00")
        end = _at("2024-02-10 17:00")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=_at("2024-02-10 17:00"), end=_at("2024-02-10 09:00"))

    def test_overlaps_is_half_open(self):
        """Back-to-back ranges do not overlap."""
        tr1 = TimeRange(start=_at("2024-02-10 09:00"), end=_at("2024-02-10 12:00"))
        tr2 = TimeRange(start=_at("2024-02-10 11:00"), end=_at("2024-02-10 14:00"))
        tr3 = TimeRange(start=_at("2024-02-10 12:00"), end=_at("2024-02-10 17:00"))

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_contains_range(self):
        outer = TimeRange(start=_at("2024-02-10 09:00"), end=_at("2024-02-10 23:00"))
        inner = TimeRange(start=_at("2024-02-10 21:00"), end=_at("2024-02-10 23:00"))
        spill = TimeRange(start=_at("2024-02-10 22:00"), end=_at("2024-02-11 00:00"))

        assert outer.contains_range(inner)
        assert not outer.contains_range(spill)


class TestCoordinates:
    def test_valid_coordinates(self):
        coords = Coordinates(latitude=21.422487, longitude=39.826206)
        assert coords.as_tuple() == (21.422487, 39.826206)

    @pytest.mark.parametrize("lat,lon", [(91.0, 0.0), (-90.5, 0.0), (0.0, 181.0)])
    def test_out_of_range_coordinates(self, lat, lon):
        with pytest.raises(ValueError):
            Coordinates(latitude=lat, longitude=lon)


class TestPrayerWindow:
    def test_window_bounds_follow_buffer(self):
        instant = PrayerInstant(prayer=Prayer.DHUHR, time=_at("2024-02-10 12:00"))
        window = instant.window(PrayerBuffer(before_minutes=10, after_minutes=30))

        assert window.start == _at("2024-02-10 11:50")
        assert window.end == _at("2024-02-10 12:30")

    def test_contains_is_inclusive(self):
        window = PrayerInstant(Prayer.DHUHR, _at("2024-02-10 12:00")).window(PrayerBuffer())

        assert window.contains(_at("2024-02-10 11:45"))
        assert window.contains(_at("2024-02-10 12:15"))
        assert not window.contains(_at("2024-02-10 12:16"))
        assert not window.contains(_at("2024-02-10 11:44"))

    def test_intersects_when_window_lies_inside_interval(self):
        window = PrayerInstant(Prayer.DHUHR, _at("2024-02-10 12:00")).window(PrayerBuffer())

        assert window.intersects(_at("2024-02-10 11:00"), _at("2024-02-10 13:00"))
        assert window.intersects(_at("2024-02-10 12:15"), _at("2024-02-10 13:00"))
        assert not window.intersects(_at("2024-02-10 12:16"), _at("2024-02-10 13:00"))

    def test_clipped(self):
        window = PrayerInstant(Prayer.FAJR, _at("2024-02-10 00:05")).window(PrayerBuffer())

        clipped = window.clipped(_at("2024-02-10 00:00"), _at("2024-02-10 23:59"))
        assert clipped.start == _at("2024-02-10 00:00")
        assert clipped.end == _at("2024-02-10 00:20")
        assert window.clipped(_at("2024-02-10 01:00"), _at("2024-02-10 02:00")) is None


class TestDailyPrayerSet:
    def test_set_is_ordered(self):
        prayer_set = _prayer_set()

        assert [i.prayer for i in prayer_set] == Prayer.ordered()
        assert prayer_set.first.prayer is Prayer.FAJR
        assert prayer_set.last.prayer is Prayer.ISHA
        assert prayer_set.get(Prayer.ASR).time == _at("2024-02-10 15:30")

    def test_non_increasing_times_rejected(self):
        with pytest.raises(PrayerCalculationError, match="not increasing"):
            _prayer_set(asr="11:00")

    def test_equal_times_rejected(self):
        with pytest.raises(PrayerCalculationError):
            _prayer_set(maghrib="19:30")

    def test_missing_prayer_rejected(self):
        times = {Prayer.FAJR: _at("2024-02-10 05:00")}
        with pytest.raises(PrayerCalculationError, match="Missing prayer times"):
            DailyPrayerSet.from_mapping(date(2024, 2, 10), times)

    def test_windows_may_overlap(self):
        prayer_set = _prayer_set(asr="12:20")
        windows = prayer_set.windows(PrayerBuffer())

        assert windows[1].end > windows[2].start


class TestBusinessHours:
    def test_contains(self):
        hours = BusinessHours(open_hour=9, close_hour=23)

        assert not hours.contains(_at("2024-02-10 08:59"))
        assert hours.contains(_at("2024-02-10 09:00"))
        assert hours.contains(_at("2024-02-10 22:59"))
        assert not hours.contains(_at("2024-02-10 23:00"))

    def test_get_hours_for_day(self):
        hours = BusinessHours(open_hour=9, close_hour=23)
        day_range = hours.get_hours_for_day(_at("2024-02-10 15:42"))

        assert day_range.start == _at("2024-02-10 09:00")
        assert day_range.end == _at("2024-02-10 23:00")

    def test_close_at_midnight(self):
        hours = BusinessHours(open_hour=10, close_hour=24)

        assert hours.closing_on(_at("2024-02-10 15:00")) == _at("2024-02-11 00:00")
        assert hours.contains(_at("2024-02-10 23:59"))

    def test_invalid_hours(self):
        with pytest.raises(ValueError):
            BusinessHours(open_hour=25, close_hour=23)
        with pytest.raises(ValueError):
            BusinessHours(open_hour=9, close_hour=0)


class TestLocalize:
    def test_naive_is_read_as_local(self):
        local = localize(pendulum.naive(2024, 2, 10, 12, 0), TZ)
        assert local == _at("2024-02-10 12:00")

    def test_aware_is_converted(self):
        utc = pendulum.datetime(2024, 2, 10, 9, 0, tz="UTC")
        local = localize(utc, TZ)

        assert local.hour == 12
        assert local.timezone_name == TZ
