"""Calendar view-model: month navigation, media aggregation and selection.

The view-model is owned by one event loop. Navigation and refresh swap the
grid in immediately and start an aggregation task; only the most recently
started aggregation may publish its result. Earlier ones finish quietly and
are discarded, so the counts on screen always belong to the month on screen.
"""

import asyncio
from dataclasses import dataclass, replace
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Set, Tuple
import logging

from ..calendar.grid import SIX_WEEK_CELLS, CalendarGridBuilder, next_month, previous_month
from ..core.exceptions import LibraryUnavailable, MediaLibraryError, PersistenceUnavailable
from ..core.models import AppConfig, CalendarDay, CalendarMonth, DayMediaEntry, MediaItem
from ..library.gateway import MediaLibraryGateway
from ..library.index import MediaIndex, select_default_representative
from ..preferences.store import JsonFileStore, PinStore, PreferenceStore
from ..utils.date import day_key, local_now


class ViewPhase(Enum):
    IDLE = "idle"
    LOADING = "loading"


@dataclass(frozen=True)
class ViewState:
    """Snapshot published to subscribers after every transition."""

    phase: ViewPhase
    month: CalendarMonth
    selected_day: Optional[CalendarDay] = None
    last_error: Optional[MediaLibraryError] = None

    @property
    def is_loading(self) -> bool:
        return self.phase is ViewPhase.LOADING


class _DaySummary(NamedTuple):
    count: int
    representative: Optional[str]
    has_pinned: bool


_EMPTY_DAY = _DaySummary(0, None, False)

# Summaries of days this far outside the loaded grid are dropped
_KNOWN_MARGIN_DAYS = SIX_WEEK_CELLS

StateCallback = Callable[[ViewState], None]


class CalendarViewModel:
    """Navigable, loading-aware calendar backed by a media library."""

    def __init__(self, gateway: MediaLibraryGateway,
                 preferences: PreferenceStore,
                 pins: PinStore,
                 grid_builder: Optional[CalendarGridBuilder] = None,
                 tz: Optional[tzinfo] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 logger: Optional[logging.Logger] = None):
        self.gateway = gateway
        self.preferences = preferences
        self.pins = pins
        self.grid_builder = grid_builder or CalendarGridBuilder()
        self.tz = tz
        self.clock = clock or (lambda: local_now(tz))
        self.logger = logger or logging.getLogger(__name__)

        self._index = MediaIndex(tz)
        self._known: Dict[date, _DaySummary] = {}
        self._generation = 0
        self._current_task: Optional[asyncio.Task] = None
        self._subscribers: List[StateCallback] = []

        today = self.today()
        self._state = ViewState(
            phase=ViewPhase.IDLE,
            month=self.grid_builder.build(today.year, today.month),
        )

    @classmethod
    def from_config(cls, config: AppConfig, gateway: MediaLibraryGateway,
                    logger: Optional[logging.Logger] = None) -> "CalendarViewModel":
        tz = config.tzinfo()
        return cls(
            gateway=gateway,
            preferences=PreferenceStore(JsonFileStore(config.preferences_path), tz=tz),
            pins=PinStore(JsonFileStore(config.pins_path)),
            grid_builder=CalendarGridBuilder(config.week_start, config.six_week_grid),
            tz=tz,
            logger=logger,
        )

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------
    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def current_month(self) -> CalendarMonth:
        return self._state.month

    @property
    def selected_day(self) -> Optional[CalendarDay]:
        return self._state.selected_day

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def last_error(self) -> Optional[MediaLibraryError]:
        return self._state.last_error

    def subscribe(self, callback: StateCallback) -> Callable[[], None]:
        """Register for state snapshots; returns a function that unsubscribes."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _set_state(self, state: ViewState) -> None:
        self._state = state
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception as e:
                self.logger.warning(f"State subscriber failed: {e}")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def go_to_next_month(self) -> asyncio.Task:
        return self.go_to_month(*next_month(self.current_month.key))

    def go_to_previous_month(self) -> asyncio.Task:
        return self.go_to_month(*previous_month(self.current_month.key))

    def go_to_today(self) -> asyncio.Task:
        today = self.today()
        return self.go_to_month(today.year, today.month)

    def go_to_month(self, year: int, month: int) -> asyncio.Task:
        """Show ``(year, month)`` now and start loading its media."""
        grid = self._annotate(self.grid_builder.build(year, month))
        return self._start_aggregation(grid, self._reselect(grid, self.selected_day))

    def refresh_media_data(self) -> asyncio.Task:
        """Reload media for the month on screen without changing the grid."""
        return self._start_aggregation(self.current_month, self.selected_day)

    async def wait_until_idle(self) -> ViewState:
        """Wait for the current aggregation (and any that replace it)."""
        while self._current_task is not None and not self._current_task.done():
            await asyncio.wait({self._current_task})
        return self._state

    # ------------------------------------------------------------------
    # Selection and pure helpers
    # ------------------------------------------------------------------
    def select_day(self, day: Any) -> None:
        """Select the grid cell with the same date as ``day``."""
        target = day_key(day, self.tz)
        match = self.current_month.day_for(target)
        if match is None:
            if isinstance(day, CalendarDay):
                match = day
            else:
                match = CalendarDay(
                    date=target,
                    day_number=target.day,
                    is_in_current_month=(target.year, target.month) == self.current_month.key,
                )
        self._set_state(replace(self._state, selected_day=match))

    def today(self) -> date:
        return day_key(self.clock(), self.tz)

    def is_today(self, value: Any) -> bool:
        return day_key(value, self.tz) == self.today()

    def weekday_symbols(self) -> List[str]:
        return self.grid_builder.weekday_symbols()

    def get_media_items(self, day: Any) -> List[DayMediaEntry]:
        """Media loaded for ``day`` with preference and pin flags. Never raises."""
        if not self._index.covers(day):
            return []
        items = self._index.items_for(day)
        if not items:
            return []

        preferred = None
        try:
            preferred = self.preferences.get_preferred(day)
        except PersistenceUnavailable as e:
            self.logger.warning(f"Preferences unavailable: {e}")

        pinned: Dict[str, datetime] = {}
        try:
            pinned = {pin.asset_identifier: pin.pinned_at for pin in self.pins.all_pins()}
        except PersistenceUnavailable as e:
            self.logger.warning(f"Pins unavailable: {e}")

        return [
            DayMediaEntry(
                item=item,
                is_preferred=item.asset_identifier == preferred,
                is_pinned=item.asset_identifier in pinned,
                pinned_at=pinned.get(item.asset_identifier),
            )
            for item in items
        ]

    # ------------------------------------------------------------------
    # Preference and pin actions
    # ------------------------------------------------------------------
    def set_preferred_media(self, day: Any, asset_identifier: str) -> asyncio.Task:
        """Persist a day's preferred media, then refresh the grid."""
        self.preferences.set_preferred(day, asset_identifier)
        return self.refresh_media_data()

    def pin_media(self, asset_identifier: str) -> asyncio.Task:
        self.pins.pin(asset_identifier)
        return self.refresh_media_data()

    def unpin_media(self, asset_identifier: str) -> asyncio.Task:
        self.pins.unpin(asset_identifier)
        return self.refresh_media_data()

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------
    def _start_aggregation(self, month: CalendarMonth,
                           selected_day: Optional[CalendarDay]) -> asyncio.Task:
        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        self._set_state(ViewState(
            phase=ViewPhase.LOADING,
            month=month,
            selected_day=selected_day,
        ))
        task = loop.create_task(self._aggregate(generation, month))
        self._current_task = task
        return task

    def _is_stale(self, generation: int, month: CalendarMonth) -> bool:
        if generation != self._generation:
            self.logger.debug(
                f"Discarding stale aggregation for {month.display_string} "
                f"(now showing {self.current_month.display_string})"
            )
            return True
        return False

    async def _aggregate(self, generation: int, month: CalendarMonth) -> None:
        start, end = month.first_date, month.last_date
        loop = asyncio.get_running_loop()
        try:
            items = await self.gateway.fetch_media(start, end)
            if self._is_stale(generation, month):
                return
            preferred, pinned = await loop.run_in_executor(
                None, self._read_annotations, start, end
            )
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(replace(self._state, phase=ViewPhase.IDLE))
            raise
        except MediaLibraryError as e:
            if not self._is_stale(generation, month):
                self.logger.warning(f"Media aggregation for {month.display_string} failed: {e}")
                self._set_state(replace(self._state, phase=ViewPhase.IDLE, last_error=e))
            return
        except Exception as e:
            if not self._is_stale(generation, month):
                self.logger.exception(f"Unexpected error aggregating {month.display_string}")
                self._set_state(replace(
                    self._state, phase=ViewPhase.IDLE, last_error=LibraryUnavailable(str(e))
                ))
            return

        if self._is_stale(generation, month):
            return

        grouped = self._index.index(items, window=(start, end))
        stale_preferences = self._remember(month, grouped, preferred, pinned)
        self._prune_known(start, end)
        grid = self._annotate(month)
        self.logger.debug(
            f"Aggregated {self._index.total} items across {len(grouped)} days "
            f"for {month.display_string}"
        )
        self._set_state(ViewState(
            phase=ViewPhase.IDLE,
            month=grid,
            selected_day=self._reselect(grid, self.selected_day),
        ))

        if stale_preferences:
            await loop.run_in_executor(None, self._remove_preferences, stale_preferences)

    def _read_annotations(self, start: date, end: date) -> Tuple[Dict[date, str], Set[str]]:
        """Snapshot preferences inside ``start..end`` and all pins. Runs in an executor."""
        preferred: Dict[date, str] = {}
        try:
            preferred = {
                pref.day: pref.asset_identifier
                for pref in self.preferences.all_preferred()
                if start <= pref.day <= end
            }
        except PersistenceUnavailable as e:
            self.logger.warning(f"Preferences unavailable during aggregation: {e}")

        pinned: Set[str] = set()
        try:
            pinned = self.pins.get_pinned()
        except PersistenceUnavailable as e:
            self.logger.warning(f"Pins unavailable during aggregation: {e}")
        return preferred, pinned

    def _remember(self, month: CalendarMonth, grouped: Dict[date, List[MediaItem]],
                  preferred: Dict[date, str], pinned: Set[str]) -> List[Tuple[date, str]]:
        """Cache per-day summaries; returns preferences whose asset is gone."""
        stale: List[Tuple[date, str]] = []
        for day in month.days:
            day_items = grouped.get(day.date)
            if not day_items:
                self._known[day.date] = _EMPTY_DAY
                continue

            representative = select_default_representative(day_items)
            choice = preferred.get(day.date)
            if choice is not None:
                if any(item.asset_identifier == choice for item in day_items):
                    representative = choice
                else:
                    stale.append((day.date, choice))

            self._known[day.date] = _DaySummary(
                count=len(day_items),
                representative=representative,
                has_pinned=any(item.asset_identifier in pinned for item in day_items),
            )
        return stale

    def _remove_preferences(self, stale: List[Tuple[date, str]]) -> None:
        # Preferred asset is gone from the library
        for day, asset_identifier in stale:
            try:
                if self.preferences.get_preferred(day) != asset_identifier:
                    continue
                self.logger.info(f"Removing stale preference {asset_identifier} for {day}")
                self.preferences.remove_preferred(day)
            except PersistenceUnavailable as e:
                self.logger.warning(f"Could not remove stale preference for {day}: {e}")

    def _prune_known(self, start: date, end: date) -> None:
        """Keep summaries for the loaded grid and roughly one grid either side."""
        low = date.fromordinal(max(start.toordinal() - _KNOWN_MARGIN_DAYS, date.min.toordinal()))
        high = date.fromordinal(min(end.toordinal() + _KNOWN_MARGIN_DAYS, date.max.toordinal()))
        for day in [day for day in self._known if not low <= day <= high]:
            del self._known[day]

    def _annotate(self, month: CalendarMonth) -> CalendarMonth:
        days = []
        for day in month.days:
            summary = self._known.get(day.date, _EMPTY_DAY)
            days.append(replace(
                day,
                media_count=summary.count,
                representative_asset_identifier=summary.representative,
                has_pinned_media=summary.has_pinned,
            ))
        return replace(month, days=days)

    @staticmethod
    def _reselect(month: CalendarMonth, selected: Optional[CalendarDay]) -> Optional[CalendarDay]:
        if selected is None:
            return None
        return month.day_for(selected.date)
