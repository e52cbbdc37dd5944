"""Month grid generation and month arithmetic."""

import calendar
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import List, Tuple

from ..core.models import CalendarDay, CalendarMonth, WeekStart

DAYS_PER_WEEK = 7
SIX_WEEK_CELLS = 42

YearMonth = Tuple[int, int]


def _validate_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")


def _validate_year(year: int) -> None:
    if not MINYEAR <= year <= MAXYEAR:
        raise ValueError(f"year must be in {MINYEAR}..{MAXYEAR}, got {year}")


def days_in_month(year: int, month: int) -> int:
    _validate_year(year)
    _validate_month(month)
    return calendar.monthrange(year, month)[1]


def next_month(current: YearMonth) -> YearMonth:
    """Calculate the month after ``(year, month)``."""
    year, month = current
    _validate_month(month)
    if month == 12:
        return (year + 1, 1)
    return (year, month + 1)


def previous_month(current: YearMonth) -> YearMonth:
    """Calculate the month before ``(year, month)``."""
    year, month = current
    _validate_month(month)
    if month == 1:
        return (year - 1, 12)
    return (year, month - 1)


def month_of(day: date) -> YearMonth:
    return (day.year, day.month)


def weekday_symbols(week_start: WeekStart = WeekStart.SUNDAY) -> List[str]:
    """Short weekday labels starting at ``week_start``."""
    symbols = list(calendar.day_abbr)  # Monday first
    first = week_start.firstweekday
    return symbols[first:] + symbols[:first]


class CalendarGridBuilder:
    """Builds the ordered day grid shown for one month.

    The grid always covers complete weeks starting on ``week_start``. With
    ``six_week_grid`` enabled it is padded to six rows so every month has the
    same height.
    """

    def __init__(self, week_start: WeekStart = WeekStart.SUNDAY, six_week_grid: bool = True):
        self.week_start = week_start
        self.six_week_grid = six_week_grid

    def build(self, year: int, month: int) -> CalendarMonth:
        """
        Generate calendar data for a specific month.

        Args:
            year: The year
            month: The month (1-12)

        Returns:
            CalendarMonth containing leading, current and trailing days

        Raises:
            ValueError: if month is outside 1..12, year is outside
                MINYEAR..MAXYEAR, or the padded grid would run past the
                first or last representable date
        """
        _validate_year(year)
        _validate_month(month)

        first_of_month = date(year, month, 1)
        leading = (first_of_month.weekday() - self.week_start.firstweekday) % DAYS_PER_WEEK
        month_length = days_in_month(year, month)

        cells = leading + month_length
        if cells % DAYS_PER_WEEK:
            cells += DAYS_PER_WEEK - cells % DAYS_PER_WEEK
        if self.six_week_grid:
            cells = max(cells, SIX_WEEK_CELLS)

        first_ordinal = first_of_month.toordinal() - leading
        if first_ordinal < date.min.toordinal() or first_ordinal + cells - 1 > date.max.toordinal():
            raise ValueError(
                f"grid for {year}-{month:02d} extends past the supported date range "
                f"({date.min} to {date.max})"
            )
        grid_start = date.fromordinal(first_ordinal)

        days = []
        for offset in range(cells):
            current = grid_start + timedelta(days=offset)
            days.append(CalendarDay(
                date=current,
                day_number=current.day,
                is_in_current_month=(current.year == year and current.month == month),
            ))

        return CalendarMonth(year=year, month=month, days=days)

    def weekday_symbols(self) -> List[str]:
        return weekday_symbols(self.week_start)
