"""
Utility functions for daily-videos.
"""

from .io import read_json, write_json, update_json
from .date import parse_date, format_date, day_key, start_of_day, to_local, local_now
from .macos import is_macos, photokit_available, set_process_name

__all__ = [
    # I/O utilities
    'read_json',
    'write_json',
    'update_json',
    # Date utilities
    'parse_date',
    'format_date',
    'day_key',
    'start_of_day',
    'to_local',
    'local_now',
    # macOS helpers
    'is_macos',
    'photokit_available',
    'set_process_name'
]
