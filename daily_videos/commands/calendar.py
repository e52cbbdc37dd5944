"""Calendar commands - show a month grid or one day's media."""

import asyncio
import logging
from datetime import MAXYEAR, MINYEAR
from typing import List, Optional

from ..core.exceptions import DailyVideosError
from ..core.models import AppConfig, CalendarMonth, DayMediaEntry, MediaType
from ..library.gateway import MediaLibraryGateway, create_gateway
from ..utils.date import day_key, format_date, local_now, parse_date, to_local
from ..viewmodel.calendar import CalendarViewModel


def format_month(month: CalendarMonth, weekday_symbols: List[str], today=None) -> str:
    """Render a month grid as text. Days outside the month are bracketed."""
    lines = [month.display_string.center(7 * 8).rstrip(), ""]
    lines.append("".join(symbol[:3].rjust(7) + " " for symbol in weekday_symbols).rstrip())
    for week in month.weeks:
        cells = []
        for day in week:
            label = f"{day.day_number}"
            if day.has_media:
                label += f"·{day.media_count}"
            if not day.is_in_current_month:
                label = f"[{label}]"
            if today is not None and day.date == today:
                label = f"*{label}"
            cells.append(label.rjust(7) + " ")
        lines.append("".join(cells).rstrip())

    total = sum(day.media_count for day in month.current_month_days)
    active = sum(1 for day in month.current_month_days if day.has_media)
    lines.append("")
    lines.append(f"{total} items across {active} days")
    return "\n".join(lines)


def format_entry(entry: DayMediaEntry, tz=None) -> str:
    item = entry.item
    kind = "Video" if item.media_type is MediaType.VIDEO else "Live Photo"
    parts = [to_local(item.date, tz).strftime("%H:%M"), kind]
    if item.duration is not None:
        parts.append(f"{item.duration:.1f}s")
    parts.append(item.asset_identifier)
    if entry.is_preferred:
        parts.append("★ preferred")
    if entry.is_pinned:
        parts.append("📌 pinned")
    return "  - " + "  ".join(parts)


class _CalendarCommandBase:
    def __init__(self, config: AppConfig, verbose: bool = False,
                 gateway: Optional[MediaLibraryGateway] = None):
        self.config = config
        self.verbose = verbose
        self.gateway = gateway
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    async def _load_month(self, year: int, month: int) -> CalendarViewModel:
        gateway = self.gateway or create_gateway(self.config, logger=self.logger)
        view_model = CalendarViewModel.from_config(self.config, gateway, logger=self.logger)
        view_model.go_to_month(year, month)
        await view_model.wait_until_idle()
        return view_model


class MonthCommand(_CalendarCommandBase):
    """Print the annotated grid for one month."""

    def run(self, year: Optional[int] = None, month: Optional[int] = None) -> bool:
        try:
            if month is not None and not 1 <= month <= 12:
                print(f"Invalid month {month}. Use a value from 1 to 12.")
                return False
            if year is not None and not MINYEAR <= year <= MAXYEAR:
                print(f"Invalid year {year}. Use a value from {MINYEAR} to {MAXYEAR}.")
                return False

            tz = self.config.tzinfo()
            today = day_key(local_now(tz), tz)
            view_model = asyncio.run(self._load_month(year or today.year, month or today.month))
            if view_model.last_error:
                print(f"Error: Could not load media: {view_model.last_error}")
                return False

            print(format_month(view_model.current_month, view_model.weekday_symbols(), view_model.today()))
            return True
        except ValueError as e:
            print(f"Error: {e}")
            return False
        except DailyVideosError as e:
            self.logger.error(f"Month command failed: {e}")
            print(f"Error: {e}")
            return False


class DayCommand(_CalendarCommandBase):
    """List one day's media with preference and pin markers."""

    def run(self, date_str: str) -> bool:
        target = parse_date(date_str)
        if target is None:
            print(f"Invalid date '{date_str}'. Use YYYY-MM-DD.")
            return False

        try:
            view_model = asyncio.run(self._load_month(target.year, target.month))
            if view_model.last_error:
                print(f"Error: Could not load media: {view_model.last_error}")
                return False

            entries = view_model.get_media_items(target)
            print(f"{len(entries)} items on {format_date(target)}.")
            for entry in entries:
                print(format_entry(entry, view_model.tz))
            return True
        except ValueError as e:
            print(f"Error: {e}")
            return False
        except DailyVideosError as e:
            self.logger.error(f"Day command failed: {e}")
            print(f"Error: {e}")
            return False
