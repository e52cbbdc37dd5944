"""Media library gateways: Apple Photos via PhotoKit, and JSON library exports."""

import asyncio
import json
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional
import logging

from ..core.exceptions import (
    LibraryUnavailable,
    PermissionDenied,
    PhotoKitImportError
)
from ..core.models import AppConfig, MediaItem, MediaType
from ..utils.date import day_key, start_of_day
from ..utils.io import read_json
from ..utils.macos import photokit_available


class MediaLibraryGateway(ABC):
    """Read-only access to the videos and Live Photos of a media library."""

    @abstractmethod
    async def fetch_media(self, start: date, end: date) -> List[MediaItem]:
        """
        Fetch media captured between two days, both inclusive.

        Only videos and Live Photos are returned. No ordering is guaranteed.

        Raises:
            PermissionDenied: library access has not been granted
            LibraryUnavailable: the library cannot be queried right now
        """


class JsonLibraryGateway(MediaLibraryGateway):
    """Gateway over a JSON export of a media library.

    The file holds a list of objects with ``asset_identifier``, ``date``
    (ISO-8601), ``media_type`` and optional ``duration``. Entries of any
    other media type (plain photos, audio) are skipped.
    """

    def __init__(self, export_path: str, tz: Optional[tzinfo] = None,
                 logger: Optional[logging.Logger] = None):
        self.export_path = export_path
        self.tz = tz
        self.logger = logger or logging.getLogger(__name__)

    async def fetch_media(self, start: date, end: date) -> List[MediaItem]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._load_range, start, end)

    def _load_range(self, start: date, end: date) -> List[MediaItem]:
        try:
            data = read_json(self.export_path)
        except FileNotFoundError:
            raise LibraryUnavailable(f"Library export not found: {self.export_path}")
        except (OSError, TimeoutError, json.JSONDecodeError) as e:
            raise LibraryUnavailable(f"Failed to read library export {self.export_path}: {e}")

        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise LibraryUnavailable(f"Unexpected library export layout in {self.export_path}")

        supported = {media_type.value for media_type in MediaType}
        items = []
        for entry in data:
            if not isinstance(entry, dict) or entry.get("media_type") not in supported:
                continue
            try:
                item = MediaItem.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning(f"Skipping malformed library entry {entry!r}: {e}")
                continue
            if start <= day_key(item.date, self.tz) <= end:
                items.append(item)

        self.logger.debug(f"Loaded {len(items)} items for {start}..{end} from {self.export_path}")
        return items


# PHAuthorizationStatus values
_STATUS_NOT_DETERMINED = 0
_STATUS_RESTRICTED = 1
_STATUS_DENIED = 2
_STATUS_AUTHORIZED = 3
_STATUS_LIMITED = 4

_STATUS_LABELS = {
    _STATUS_NOT_DETERMINED: "not_determined",
    _STATUS_RESTRICTED: "restricted",
    _STATUS_DENIED: "denied",
    _STATUS_AUTHORIZED: "authorized",
    _STATUS_LIMITED: "limited",
}


class PhotoKitGateway(MediaLibraryGateway):
    """Gateway for the Apple Photos library via PhotoKit."""

    def __init__(self, tz: Optional[tzinfo] = None,
                 logger: Optional[logging.Logger] = None,
                 authorization_timeout: float = 30.0):
        self.tz = tz
        self.logger = logger or logging.getLogger(__name__)
        self.authorization_timeout = authorization_timeout
        self._photos = None

    def _ensure_photokit(self):
        """Import the Photos and Foundation bindings."""
        if self._photos is not None:
            return self._photos
        try:
            import objc  # noqa: F401
            import Photos
            import Foundation
        except ImportError as e:
            self.logger.error(f"PhotoKit import failed: {e}")
            raise PhotoKitImportError(
                "PhotoKit not available. Please install PyObjC framework:\n"
                "  pip install pyobjc-core pyobjc-framework-Photos\n"
                f"Import error details: {e}"
            )

        self._photos = Photos
        self._foundation = Foundation
        return self._photos

    def permission_status(self) -> str:
        """Current authorization status label (e.g. "authorized", "denied")."""
        photos = self._ensure_photokit()
        status = int(photos.PHPhotoLibrary.authorizationStatusForAccessLevel_(
            photos.PHAccessLevelReadWrite
        ))
        return _STATUS_LABELS.get(status, f"unknown({status})")

    def request_permission(self) -> bool:
        """Ask the user for library access. Blocks until answered or timed out."""
        photos = self._ensure_photokit()
        done = threading.Event()
        result = {'status': _STATUS_NOT_DETERMINED}

        def completion(status):
            result['status'] = int(status)
            done.set()

        self.logger.info("Requesting Photos library authorization...")
        photos.PHPhotoLibrary.requestAuthorizationForAccessLevel_handler_(
            photos.PHAccessLevelReadWrite, completion
        )

        if not done.wait(self.authorization_timeout):
            raise PermissionDenied(
                f"Authorization request timed out after {self.authorization_timeout} seconds.\n"
                "The system may be showing an authorization dialog."
            )

        return result['status'] in (_STATUS_AUTHORIZED, _STATUS_LIMITED)

    def _check_authorization(self) -> None:
        status = self.permission_status()
        if status in ("authorized", "limited"):
            return
        if status == "not_determined" and self.request_permission():
            return
        if status == "restricted":
            raise PermissionDenied(
                "Access to Photos is restricted by system policy.\n"
                "This may be due to parental controls or device management profiles."
            )
        raise PermissionDenied(
            "Access to Photos was denied.\n"
            "To fix this:\n"
            "  1. Open System Settings > Privacy & Security > Photos\n"
            "  2. Enable access for this application\n"
            "  3. Restart the application"
        )

    async def fetch_media(self, start: date, end: date) -> List[MediaItem]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._fetch_range, start, end)

    def _fetch_range(self, start: date, end: date) -> List[MediaItem]:
        photos = self._ensure_photokit()
        self._check_authorization()

        foundation = self._foundation
        range_start = start_of_day(start, self.tz)
        range_end = start_of_day(end + timedelta(days=1), self.tz)
        start_ns = foundation.NSDate.dateWithTimeIntervalSince1970_(range_start.timestamp())
        end_ns = foundation.NSDate.dateWithTimeIntervalSince1970_(range_end.timestamp())

        try:
            video_options = photos.PHFetchOptions.alloc().init()
            video_options.setPredicate_(foundation.NSPredicate.predicateWithFormat_argumentArray_(
                "(creationDate >= %@) AND (creationDate < %@)", [start_ns, end_ns]
            ))
            videos = photos.PHAsset.fetchAssetsWithMediaType_options_(
                photos.PHAssetMediaTypeVideo, video_options
            )

            live_options = photos.PHFetchOptions.alloc().init()
            live_options.setPredicate_(foundation.NSPredicate.predicateWithFormat_argumentArray_(
                "(creationDate >= %@) AND (creationDate < %@) AND (mediaSubtypes & %d) != 0",
                [start_ns, end_ns, int(photos.PHAssetMediaSubtypePhotoLive)]
            ))
            live_photos = photos.PHAsset.fetchAssetsWithMediaType_options_(
                photos.PHAssetMediaTypeImage, live_options
            )
        except Exception as e:
            self.logger.error(f"PhotoKit fetch failed: {e}")
            raise LibraryUnavailable(f"Failed to query the Photos library: {e}")

        items: Dict[str, MediaItem] = {}
        for result in (videos, live_photos):
            for index in range(int(result.count())):
                asset = result.objectAtIndex_(index)
                try:
                    item = self._to_media_item(asset)
                except Exception as e:
                    self.logger.warning(f"Failed to process asset: {e}")
                    continue
                if item is not None:
                    items.setdefault(item.asset_identifier, item)

        self.logger.debug(f"Fetched {len(items)} PhotoKit assets for {start}..{end}")
        return list(items.values())

    def _to_media_item(self, asset) -> Optional[MediaItem]:
        photos = self._photos
        creation = asset.creationDate()
        if creation is None:
            return None

        is_video = int(asset.mediaType()) == int(photos.PHAssetMediaTypeVideo)
        is_live = bool(int(asset.mediaSubtypes()) & int(photos.PHAssetMediaSubtypePhotoLive))

        return MediaItem(
            asset_identifier=str(asset.localIdentifier()),
            date=datetime.fromtimestamp(creation.timeIntervalSince1970(), tz=timezone.utc),
            media_type=MediaType.LIVE_PHOTO if is_live and not is_video else MediaType.VIDEO,
            duration=float(asset.duration()) if is_video else None,
        )


def create_gateway(config: AppConfig, logger: Optional[logging.Logger] = None) -> MediaLibraryGateway:
    """Pick the gateway for this host: a configured export, else PhotoKit."""
    tz = config.tzinfo()
    if config.library_export_path:
        return JsonLibraryGateway(config.library_export_path, tz=tz, logger=logger)
    if photokit_available():
        return PhotoKitGateway(tz=tz, logger=logger)
    raise PhotoKitImportError(
        "No media library available. Install the 'macos' extra on macOS "
        "or pass --library with a JSON library export."
    )


__all__ = [
    'MediaLibraryGateway',
    'JsonLibraryGateway',
    'PhotoKitGateway',
    'create_gateway',
]
