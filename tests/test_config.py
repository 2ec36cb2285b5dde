"""
Tests for configuration loading and validation.
"""

from datetime import time

import pytest

from prayerhall.adapters.adhan_client import AdhanPrayerTimesClient
from prayerhall.adapters.fixed_client import FixedPrayerTimesClient
from prayerhall.config import AppConfig, BufferConfig, BusinessHoursConfig, PrayerConfig
from prayerhall.domain.models import Prayer
from prayerhall.services.conflict_resolver import ConflictPolicy
from prayerhall.services.engine import build_conflict_resolver, build_evaluator, build_prayer_client


def test_defaults():
    config = AppConfig()

    assert config.timezone == "Asia/Riyadh"
    assert config.location.latitude == pytest.approx(21.422487)
    assert config.location.longitude == pytest.approx(39.826206)
    assert config.prayer.buffer.before_minutes == 15
    assert config.prayer.buffer.after_minutes == 15
    assert config.business_hours.open_hour == 9
    assert config.business_hours.close_hour == 23


def test_load_from_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "timezone: Asia/Dubai\n"
        "location:\n"
        "  latitude: 25.2\n"
        "  longitude: 55.27\n"
        "prayer:\n"
        "  buffer:\n"
        "    before_minutes: 10\n"
        "    after_minutes: 30\n"
        "  conflict_policy: override\n"
        "business_hours:\n"
        "  open_hour: 10\n"
        "  close_hour: 24\n",
        encoding="utf-8",
    )

    config = AppConfig.load_from_yaml(config_file)

    assert config.timezone == "Asia/Dubai"
    assert config.prayer.buffer.to_buffer().total_minutes == 40
    assert config.business_hours.to_business_hours().close_hour == 24
    assert config.prayer.conflict_policy == "override"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_yaml(tmp_path / "nope.yaml")


def test_load_or_default_without_file(tmp_path):
    assert AppConfig.load_or_default(tmp_path / "nope.yaml") == AppConfig()


def test_invalid_yaml(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("timezone: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        AppConfig.load_from_yaml(config_file)


def test_non_mapping_root(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        AppConfig.load_from_yaml(config_file)


def test_unknown_timezone():
    with pytest.raises(ValueError):
        AppConfig(timezone="Mars/Olympus_Mons")


def test_day_long_buffer_rejected():
    with pytest.raises(ValueError):
        BufferConfig(before_minutes=720, after_minutes=720)


def test_negative_buffer_rejected():
    with pytest.raises(ValueError):
        BufferConfig(before_minutes=-1)


def test_business_hours_order():
    with pytest.raises(ValueError):
        BusinessHoursConfig(open_hour=23, close_hour=9)


def test_fixed_times_validation():
    with pytest.raises(ValueError, match="Unknown prayer"):
        PrayerConfig(source="fixed", fixed_times={"Tahajjud": "03:00"})
    with pytest.raises(ValueError, match="all five"):
        PrayerConfig(source="fixed", fixed_times={"fajr": "05:00"})


def test_prayer_client_selection():
    assert isinstance(build_prayer_client(AppConfig()), AdhanPrayerTimesClient)
    assert isinstance(build_prayer_client(AppConfig(), mock=True), FixedPrayerTimesClient)

    fixed = AppConfig(prayer={
        "source": "fixed",
        "fixed_times": {"Fajr": "05:10", "Dhuhr": "12:10", "Asr": "15:40", "Maghrib": "18:10", "Isha": "19:40"},
    })
    client = build_prayer_client(fixed)
    assert isinstance(client, FixedPrayerTimesClient)
    assert client.timetable[Prayer.FAJR] == time(5, 10)


def test_wiring_carries_settings():
    config = AppConfig(
        prayer={"buffer": {"before_minutes": 10, "after_minutes": 30}, "conflict_policy": "override"},
        reservations={"duration_minutes": 90},
    )
    evaluator = build_evaluator(config, mock=True)
    resolver = build_conflict_resolver(config, evaluator)

    assert evaluator.buffer.before_minutes == 10
    assert evaluator.buffer.after_minutes == 30
    assert resolver.policy is ConflictPolicy.OVERRIDE
    assert resolver.default_duration_minutes == 90
