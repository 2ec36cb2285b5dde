"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Dict, Literal

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import BusinessHours, Coordinates, PrayerBuffer

MECCA_LATITUDE = 21.422487
MECCA_LONGITUDE = 39.826206


class LocationConfig(BaseModel):
    """Coordinates of the hall; defaults to Makkah."""
    latitude: float = MECCA_LATITUDE
    longitude: float = MECCA_LONGITUDE

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v: float) -> float:
        if not -90 <= v <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {v}")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v: float) -> float:
        if not -180 <= v <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {v}")
        return v

    def to_coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class BufferConfig(BaseModel):
    """Minutes blocked around every prayer instant."""
    before_minutes: int = 15
    after_minutes: int = 15

    @field_validator("before_minutes", "after_minutes")
    @classmethod
    def validate_minutes(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Buffer minutes must not be negative, got {v}")
        return v

    @model_validator(mode="after")
    def validate_total(self) -> "BufferConfig":
        """A window spanning a whole day would leave no bookable time."""
        if self.before_minutes + self.after_minutes >= 24 * 60:
            raise ValueError("before_minutes + after_minutes must be less than 1440")
        return self

    def to_buffer(self) -> PrayerBuffer:
        return PrayerBuffer(before_minutes=self.before_minutes, after_minutes=self.after_minutes)


class PrayerConfig(BaseModel):
    """Where prayer times come from and how they block business."""
    source: Literal["adhan", "fixed"] = "adhan"
    calculation_method: str = "UMM_AL_QURA"
    fixed_times: Dict[str, str] = Field(default_factory=dict)
    buffer: BufferConfig = Field(default_factory=BufferConfig)
    conflict_policy: Literal["block", "override"] = "block"

    @field_validator("fixed_times")
    @classmethod
    def validate_fixed_times(cls, value: Dict[str, str]) -> Dict[str, str]:
        """Normalise prayer names to lower case and reject unknown ones."""
        allowed = {"fajr", "dhuhr", "asr", "maghrib", "isha"}
        normalized = {name.lower(): clock for name, clock in value.items()}
        unknown = sorted(set(normalized) - allowed)
        if unknown:
            raise ValueError(f"Unknown prayer name(s) in fixed_times: {', '.join(unknown)}")
        return normalized

    @model_validator(mode="after")
    def validate_fixed_source(self) -> "PrayerConfig":
        if self.source == "fixed" and self.fixed_times and len(self.fixed_times) != 5:
            raise ValueError("fixed_times must list all five prayers")
        return self


class BusinessHoursConfig(BaseModel):
    """Daily operating hours in local time."""
    open_hour: int = 9
    close_hour: int = 23

    @field_validator("open_hour")
    @classmethod
    def validate_open_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("close_hour")
    @classmethod
    def validate_close_hour(cls, v: int) -> int:
        if not 1 <= v <= 24:
            raise ValueError(f"close_hour must be between 1 and 24, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "BusinessHoursConfig":
        """Ensure the hall opens before it closes."""
        if self.close_hour <= self.open_hour:
            raise ValueError("close_hour must be later than open_hour")
        return self

    def to_business_hours(self) -> BusinessHours:
        return BusinessHours(open_hour=self.open_hour, close_hour=self.close_hour)


class ReservationRulesConfig(BaseModel):
    """Booking rules applied by the conflict resolver."""
    min_advance_minutes: int = 30
    max_advance_days: int = 7
    duration_minutes: int = 120

    @field_validator("min_advance_minutes")
    @classmethod
    def validate_min_advance(cls, v: int) -> int:
        if v < 0:
            raise ValueError("min_advance_minutes must not be negative")
        return v

    @field_validator("max_advance_days", "duration_minutes")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than zero")
        return v


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Asia/Riyadh"
    location: LocationConfig = Field(default_factory=LocationConfig)
    prayer: PrayerConfig = Field(default_factory=PrayerConfig)
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    reservations: ReservationRulesConfig = Field(default_factory=ReservationRulesConfig)
    max_search_days: int = 14

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Reject names pendulum cannot resolve."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @field_validator("max_search_days")
    @classmethod
    def validate_search_days(cls, v: int) -> int:
        if not 1 <= v <= 366:
            raise ValueError(f"max_search_days must be between 1 and 366, got {v}")
        return v

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Path) -> "AppConfig":
        """Load ``config_path`` when it exists, otherwise use built-in defaults."""
        if config_path.exists():
            return cls.load_from_yaml(config_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
