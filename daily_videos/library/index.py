"""Per-day grouping of media items."""

from collections import OrderedDict
from datetime import date, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core.models import MediaItem, MediaType
from ..utils.date import day_key


def group_by_day(items: Iterable[MediaItem], tz: Optional[tzinfo] = None) -> Dict[date, List[MediaItem]]:
    """
    Group media items by the calendar day of their timestamp.

    Items keep their arrival order within a day. Anything that is not a
    video or Live Photo is dropped, as is a repeated asset identifier.
    """
    grouped: Dict[date, List[MediaItem]] = OrderedDict()
    seen = set()
    for item in items:
        if not isinstance(item.media_type, MediaType):
            continue
        if item.asset_identifier in seen:
            continue
        seen.add(item.asset_identifier)
        grouped.setdefault(day_key(item.date, tz), []).append(item)
    return grouped


def select_default_representative(items: Iterable[MediaItem]) -> Optional[str]:
    """
    Pick the asset that represents a day when the user has no preference.

    Priority: earliest video, then earliest Live Photo, then earliest item.
    """
    ordered = sorted(items, key=lambda item: item.date.timestamp())
    if not ordered:
        return None
    for wanted in (MediaType.VIDEO, MediaType.LIVE_PHOTO):
        for item in ordered:
            if item.media_type is wanted:
                return item.asset_identifier
    return ordered[0].asset_identifier


class MediaIndex:
    """Media items of one loaded date window, keyed by calendar day.

    ``tz`` must be the same timezone the grid's days are interpreted in so
    that an item and its grid cell agree on the day.
    """

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz
        self._by_day: Dict[date, List[MediaItem]] = {}
        self._window: Optional[Tuple[date, date]] = None

    def index(self, items: Iterable[MediaItem],
              window: Optional[Tuple[date, date]] = None) -> Dict[date, List[MediaItem]]:
        """Replace the index contents with ``items`` and return the grouping.

        When ``window`` is given, items outside it are ignored.
        """
        grouped = group_by_day(items, self.tz)
        if window is not None:
            start, end = window
            grouped = OrderedDict(
                (day, day_items) for day, day_items in grouped.items()
                if start <= day <= end
            )
        self._by_day = grouped
        self._window = window
        return {day: list(day_items) for day, day_items in grouped.items()}

    @property
    def window(self) -> Optional[Tuple[date, date]]:
        return self._window

    @property
    def total(self) -> int:
        return sum(len(day_items) for day_items in self._by_day.values())

    def covers(self, day: Any) -> bool:
        if self._window is None:
            return False
        start, end = self._window
        return start <= day_key(day, self.tz) <= end

    def count_for(self, day: Any) -> int:
        return len(self._by_day.get(day_key(day, self.tz), ()))

    def items_for(self, day: Any) -> List[MediaItem]:
        return list(self._by_day.get(day_key(day, self.tz), ()))

    def counts(self) -> Dict[date, int]:
        return {day: len(day_items) for day, day_items in self._by_day.items()}

    def days_with_media(self) -> List[date]:
        return sorted(self._by_day)

    def clear(self) -> None:
        self._by_day = {}
        self._window = None
