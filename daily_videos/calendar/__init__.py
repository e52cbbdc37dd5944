"""Calendar grid module."""

from .grid import (
    CalendarGridBuilder,
    days_in_month,
    month_of,
    next_month,
    previous_month,
    weekday_symbols
)

__all__ = [
    'CalendarGridBuilder',
    'days_in_month',
    'month_of',
    'next_month',
    'previous_month',
    'weekday_symbols'
]
