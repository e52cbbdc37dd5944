"""
Domain models for daily-videos.

This module contains the core data structures shared by the grid builder,
the media index, the preference stores and the calendar view-model.
"""

from __future__ import annotations

import calendar
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4
import json

from .exceptions import ConfigurationError
from .paths import get_path_manager


def _normalize_path(path: str) -> str:
    """Expand user and convert to absolute path."""
    return os.path.abspath(os.path.expanduser(path))


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _coerce_bool(value: Any, default: bool) -> bool:
    """Read a boolean setting written by hand as true/false, yes/no or 1/0."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
    return default


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # Feb 29 has no counterpart in a non-leap year
        return moment.replace(year=moment.year - years, day=28)


class MediaType(Enum):
    """Kind of media item shown on the calendar."""

    VIDEO = "video"
    LIVE_PHOTO = "live_photo"


class WeekStart(Enum):
    """First day of the calendar week."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def firstweekday(self) -> int:
        """Weekday number as used by the ``calendar`` module (Monday == 0)."""
        return list(WeekStart).index(self)

    @classmethod
    def parse(cls, value: str) -> WeekStart:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown week start '{value}'. "
                f"Expected one of: {', '.join(ws.value for ws in cls)}"
            )


class CleanupTimeframe(Enum):
    """Timeframe options for cleaning up old preferences and pins."""

    ALL = "all"
    OLDER_THAN_ONE_YEAR = "1y"
    OLDER_THAN_TWO_YEARS = "2y"

    def cutoff(self, now: datetime) -> Optional[datetime]:
        """Return the moment before which records are removed, or None for all."""
        if self is CleanupTimeframe.ALL:
            return None
        if self is CleanupTimeframe.OLDER_THAN_ONE_YEAR:
            return _years_before(now, 1)
        return _years_before(now, 2)


@dataclass(frozen=True)
class CalendarDay:
    """A single cell of a month grid."""

    date: date
    day_number: int
    is_in_current_month: bool
    media_count: int = 0
    representative_asset_identifier: Optional[str] = None
    has_pinned_media: bool = False
    id: str = field(default_factory=lambda: str(uuid4()), compare=False)

    @property
    def has_media(self) -> bool:
        return self.media_count > 0


@dataclass(frozen=True)
class CalendarMonth:
    """A month of calendar data, padded to complete weeks."""

    year: int
    month: int
    days: List[CalendarDay] = field(default_factory=list)

    @property
    def key(self) -> tuple:
        return (self.year, self.month)

    @property
    def month_name(self) -> str:
        """The name of the month (e.g. "January")."""
        return calendar.month_name[self.month]

    @property
    def display_string(self) -> str:
        """Full display string (e.g. "January 2024")."""
        return f"{self.month_name} {self.year}"

    @property
    def current_month_days(self) -> List[CalendarDay]:
        return [day for day in self.days if day.is_in_current_month]

    @property
    def first_date(self) -> Optional[date]:
        """First date shown in the grid, including leading days."""
        return self.days[0].date if self.days else None

    @property
    def last_date(self) -> Optional[date]:
        """Last date shown in the grid, including trailing days."""
        return self.days[-1].date if self.days else None

    @property
    def weeks(self) -> List[List[CalendarDay]]:
        return [self.days[i:i + 7] for i in range(0, len(self.days), 7)]

    def day_for(self, target: date) -> Optional[CalendarDay]:
        """Find the grid cell for a date, or None if it is not shown."""
        for day in self.days:
            if day.date == target:
                return day
        return None


@dataclass(frozen=True)
class MediaItem:
    """A video or Live Photo reported by the media library.

    Only the stable identifier and the metadata needed for grouping and
    display are kept; heavier asset handles are fetched by identifier.
    """

    asset_identifier: str
    date: datetime
    media_type: MediaType
    duration: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_identifier": self.asset_identifier,
            "date": self.date.isoformat(),
            "media_type": self.media_type.value,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> MediaItem:
        media_type = MediaType(data["media_type"])
        duration = data.get("duration")
        return cls(
            asset_identifier=str(data["asset_identifier"]),
            date=datetime.fromisoformat(data["date"]),
            media_type=media_type,
            duration=float(duration) if duration is not None and media_type is MediaType.VIDEO else None,
        )


@dataclass(frozen=True)
class PreferredMedia:
    """User's preferred media for one day."""

    day: date
    asset_identifier: str
    selected_at: Optional[datetime] = None


@dataclass(frozen=True)
class PinnedMedia:
    """A media item the user pinned."""

    asset_identifier: str
    pinned_at: datetime


@dataclass(frozen=True)
class DayMediaEntry:
    """A day's media item merged with the user's preference/pin state."""

    item: MediaItem
    is_preferred: bool = False
    is_pinned: bool = False
    pinned_at: Optional[datetime] = None

    @property
    def asset_identifier(self) -> str:
        return self.item.asset_identifier


@dataclass
class AppConfig:
    """Configuration for the calendar and its stores."""

    week_start: WeekStart = WeekStart.SUNDAY
    six_week_grid: bool = True
    timezone: Optional[str] = None
    preferences_path: Optional[str] = None
    pins_path: Optional[str] = None
    library_export_path: Optional[str] = None

    def __post_init__(self) -> None:
        manager = get_path_manager()

        if isinstance(self.week_start, str):
            self.week_start = WeekStart.parse(self.week_start)

        if self.preferences_path is None:
            self.preferences_path = str(manager.preferences_path)
        else:
            self.preferences_path = _normalize_path(self.preferences_path)

        if self.pins_path is None:
            self.pins_path = str(manager.pins_path)
        else:
            self.pins_path = _normalize_path(self.pins_path)

        if self.library_export_path:
            self.library_export_path = _normalize_path(self.library_export_path)

    def tzinfo(self):
        """Resolve the configured timezone (None means system local)."""
        if not self.timezone:
            return None
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigurationError(f"Unknown timezone '{self.timezone}'")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "calendar": {
                "week_start": self.week_start.value,
                "six_week_grid": self.six_week_grid,
                "timezone": self.timezone,
            },
            "paths": {
                "preferences": self.preferences_path,
                "pins": self.pins_path,
                "library_export": self.library_export_path,
            },
        }

    @classmethod
    def load_from_file(cls, config_path: str) -> AppConfig:
        config_path = _normalize_path(config_path)
        if not os.path.exists(config_path):
            return cls()

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except json.JSONDecodeError:
            return cls()
        if not isinstance(data, dict):
            return cls()

        calendar_settings = _section(data, "calendar")
        paths = _section(data, "paths")

        return cls(
            week_start=WeekStart.parse(calendar_settings.get("week_start", WeekStart.SUNDAY.value)),
            six_week_grid=_coerce_bool(calendar_settings.get("six_week_grid"), True),
            timezone=calendar_settings.get("timezone"),
            preferences_path=paths.get("preferences"),
            pins_path=paths.get("pins"),
            library_export_path=paths.get("library_export"),
        )

    def save_to_file(self, config_path: str) -> None:
        config_path = _normalize_path(config_path)
        os.makedirs(os.path.dirname(config_path), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2)
