"""Preference and pin commands."""

import logging
from typing import Optional

from ..core.exceptions import DailyVideosError
from ..core.models import AppConfig, CleanupTimeframe
from ..preferences.store import JsonFileStore, PinStore, PreferenceStore
from ..utils.date import format_date, parse_date


class _StoreCommandBase:
    def __init__(self, config: AppConfig, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)
        if verbose:
            self.logger.setLevel(logging.DEBUG)

    def preference_store(self) -> PreferenceStore:
        return PreferenceStore(
            JsonFileStore(self.config.preferences_path, logger=self.logger),
            tz=self.config.tzinfo(),
            logger=self.logger,
        )

    def pin_store(self) -> PinStore:
        return PinStore(JsonFileStore(self.config.pins_path, logger=self.logger), logger=self.logger)


class PreferCommand(_StoreCommandBase):
    """Set, show or clear the preferred media for a day."""

    def run(self, date_str: str, asset_identifier: Optional[str] = None, clear: bool = False) -> bool:
        target = parse_date(date_str)
        if target is None:
            print(f"Invalid date '{date_str}'. Use YYYY-MM-DD.")
            return False

        try:
            store = self.preference_store()
            if clear:
                removed = store.remove_preferred(target)
                print(f"Cleared preference for {format_date(target)}." if removed
                      else f"No preference set for {format_date(target)}.")
            elif asset_identifier:
                store.set_preferred(target, asset_identifier)
                print(f"Preferred media for {format_date(target)}: {asset_identifier}")
            else:
                current = store.get_preferred(target)
                print(f"Preferred media for {format_date(target)}: {current or '(none)'}")
            return True
        except DailyVideosError as e:
            self.logger.error(f"Prefer command failed: {e}")
            print(f"Error: {e}")
            return False


class PinCommand(_StoreCommandBase):
    """Pin, unpin or list pinned media."""

    def run(self, action: str, asset_identifier: Optional[str] = None) -> bool:
        try:
            store = self.pin_store()
            if action == 'list':
                pins = store.all_pins()
                print(f"{len(pins)} pinned items.")
                for pin in pins:
                    print(f"  - {pin.asset_identifier}  (pinned {pin.pinned_at.isoformat(timespec='seconds')})")
                return True

            if not asset_identifier:
                print(f"An asset identifier is required to {action}.")
                return False

            if action == 'pin':
                store.pin(asset_identifier)
                print(f"Pinned {asset_identifier}.")
            elif action == 'unpin':
                if store.unpin(asset_identifier):
                    print(f"Unpinned {asset_identifier}.")
                else:
                    print(f"{asset_identifier} was not pinned.")
            else:
                print(f"Unknown pin action '{action}'.")
                return False
            return True
        except DailyVideosError as e:
            self.logger.error(f"Pin command failed: {e}")
            print(f"Error: {e}")
            return False


class CleanupCommand(_StoreCommandBase):
    """Remove old preferences or pins."""

    def run(self, target: str, older_than: str = CleanupTimeframe.OLDER_THAN_ONE_YEAR.value,
            dry_run: bool = True) -> bool:
        try:
            timeframe = CleanupTimeframe(older_than)
        except ValueError:
            print(f"Unknown timeframe '{older_than}'. Use one of: "
                  f"{', '.join(tf.value for tf in CleanupTimeframe)}")
            return False

        try:
            if target == 'preferences':
                store = self.preference_store()
                total = store.count()
                if dry_run:
                    print(f"{total} preferences stored. Re-run with --apply to clean up ({timeframe.value}).")
                    return True
                removed = store.cleanup(timeframe)
            elif target == 'pins':
                store = self.pin_store()
                total = store.count()
                if dry_run:
                    print(f"{total} pins stored. Re-run with --apply to clean up ({timeframe.value}).")
                    return True
                removed = store.cleanup(timeframe)
            else:
                print(f"Unknown cleanup target '{target}'.")
                return False

            print(f"Removed {removed} of {total} {target}.")
            return True
        except DailyVideosError as e:
            self.logger.error(f"Cleanup command failed: {e}")
            print(f"Error: {e}")
            return False
