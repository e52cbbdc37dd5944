"""
Core module for daily-videos - contains domain models, configuration, and exceptions.
"""

from .models import (
    AppConfig,
    CalendarDay,
    CalendarMonth,
    CleanupTimeframe,
    DayMediaEntry,
    MediaItem,
    MediaType,
    PinnedMedia,
    PreferredMedia,
    WeekStart
)

from .exceptions import (
    DailyVideosError,
    ConfigurationError,
    MediaLibraryError,
    PermissionDenied,
    LibraryUnavailable,
    PhotoKitImportError,
    PersistenceUnavailable
)

__all__ = [
    # Models
    'AppConfig',
    'CalendarDay',
    'CalendarMonth',
    'CleanupTimeframe',
    'DayMediaEntry',
    'MediaItem',
    'MediaType',
    'PinnedMedia',
    'PreferredMedia',
    'WeekStart',
    # Exceptions
    'DailyVideosError',
    'ConfigurationError',
    'MediaLibraryError',
    'PermissionDenied',
    'LibraryUnavailable',
    'PhotoKitImportError',
    'PersistenceUnavailable'
]
