"""
Command implementations for daily-videos.
"""

from .calendar import MonthCommand, DayCommand
from .media import PreferCommand, PinCommand, CleanupCommand

__all__ = [
    'MonthCommand',
    'DayCommand',
    'PreferCommand',
    'PinCommand',
    'CleanupCommand',
]
