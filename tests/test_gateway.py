"""Tests for media library gateways."""

import json
import os
from datetime import date, datetime, timezone

import pytest

from daily_videos.core.exceptions import LibraryUnavailable, PhotoKitImportError
from daily_videos.core.models import AppConfig, MediaType
from daily_videos.library import gateway as gateway_module
from daily_videos.library.gateway import JsonLibraryGateway, PhotoKitGateway, create_gateway


def write_export(directory: str, payload) -> str:
    path = os.path.join(directory, "library.json")
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(payload, handle)
    return path


EXPORT_ENTRIES = [
    {"asset_identifier": "v1", "date": "2024-03-15T12:00:00+00:00", "media_type": "video", "duration": 8.5},
    {"asset_identifier": "l1", "date": "2024-03-16T09:00:00+00:00", "media_type": "live_photo", "duration": 3.0},
    {"asset_identifier": "p1", "date": "2024-03-15T13:00:00+00:00", "media_type": "photo"},
    {"asset_identifier": "v-april", "date": "2024-04-02T12:00:00+00:00", "media_type": "video"},
    {"asset_identifier": "broken", "media_type": "video"},
]


class TestJsonLibraryGateway:
    """Test suite for JsonLibraryGateway."""

    @pytest.mark.asyncio
    async def test_fetch_filters_range_and_type(self, temp_dir):
        gateway = JsonLibraryGateway(write_export(temp_dir, EXPORT_ENTRIES), tz=timezone.utc)
        items = await gateway.fetch_media(date(2024, 3, 1), date(2024, 3, 31))

        assert sorted(item.asset_identifier for item in items) == ["l1", "v1"]
        by_id = {item.asset_identifier: item for item in items}
        assert by_id["v1"].media_type is MediaType.VIDEO
        assert by_id["v1"].duration == 8.5
        assert by_id["l1"].media_type is MediaType.LIVE_PHOTO
        assert by_id["l1"].duration is None

    @pytest.mark.asyncio
    async def test_range_is_inclusive(self, temp_dir):
        gateway = JsonLibraryGateway(write_export(temp_dir, EXPORT_ENTRIES), tz=timezone.utc)
        items = await gateway.fetch_media(date(2024, 3, 16), date(2024, 4, 2))
        assert sorted(item.asset_identifier for item in items) == ["l1", "v-april"]

    @pytest.mark.asyncio
    async def test_items_wrapper_accepted(self, temp_dir):
        gateway = JsonLibraryGateway(write_export(temp_dir, {"items": EXPORT_ENTRIES}), tz=timezone.utc)
        items = await gateway.fetch_media(date(2024, 4, 1), date(2024, 4, 30))
        assert [item.asset_identifier for item in items] == ["v-april"]

    @pytest.mark.asyncio
    async def test_missing_export(self, temp_dir):
        gateway = JsonLibraryGateway(os.path.join(temp_dir, "missing.json"))
        with pytest.raises(LibraryUnavailable):
            await gateway.fetch_media(date(2024, 3, 1), date(2024, 3, 31))

    @pytest.mark.asyncio
    async def test_unexpected_layout(self, temp_dir):
        gateway = JsonLibraryGateway(write_export(temp_dir, "not a list"))
        with pytest.raises(LibraryUnavailable):
            await gateway.fetch_media(date(2024, 3, 1), date(2024, 3, 31))

    @pytest.mark.asyncio
    async def test_corrupt_export(self, temp_dir):
        path = os.path.join(temp_dir, "library.json")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("[{")
        with pytest.raises(LibraryUnavailable):
            await JsonLibraryGateway(path).fetch_media(date(2024, 3, 1), date(2024, 3, 31))


class TestCreateGateway:
    """Test suite for gateway selection."""

    def test_export_path_wins(self, app_home, temp_dir):
        config = AppConfig(library_export_path=write_export(temp_dir, []))
        assert isinstance(create_gateway(config), JsonLibraryGateway)

    def test_photokit_when_available(self, app_home, monkeypatch):
        monkeypatch.setattr(gateway_module, "photokit_available", lambda: True)
        assert isinstance(create_gateway(AppConfig()), PhotoKitGateway)

    def test_no_library_available(self, app_home, monkeypatch):
        monkeypatch.setattr(gateway_module, "photokit_available", lambda: False)
        with pytest.raises(PhotoKitImportError):
            create_gateway(AppConfig())


@pytest.mark.macos
@pytest.mark.photokit
class TestPhotoKitGateway:
    """Smoke tests against the real Photos framework."""

    def test_permission_status_label(self):
        status = PhotoKitGateway().permission_status()
        assert status in ("not_determined", "restricted", "denied", "authorized", "limited")
