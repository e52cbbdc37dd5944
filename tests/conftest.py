#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Platform-specific test skipping (macOS/PhotoKit tests)
- An isolated DAILY_VIDEOS_HOME for every test that asks for one
- In-memory preference/pin stores and a controllable media gateway
"""

import os
import platform
import shutil
import sys
import tempfile
from datetime import datetime, timezone
from typing import Generator, List

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from daily_videos.core.models import MediaItem, MediaType
from daily_videos.core.paths import reset_path_manager
from daily_videos.preferences.store import MemoryStore, PinStore, PreferenceStore
from daily_videos.utils.macos import photokit_available

from tests.fake_media_gateway import FakeMediaGateway

HAS_PHOTOKIT = photokit_available()


def pytest_configure(config):
    """Configure pytest environment."""
    config.addinivalue_line("markers", "macos: test requires macOS")
    config.addinivalue_line("markers", "photokit: test requires the PyObjC Photos bindings")


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to skip platform-specific tests.

    Automatically skip macOS/PhotoKit tests on non-Darwin platforms.
    """
    skip_macos = pytest.mark.skip(reason="macOS tests require Darwin platform")
    skip_photokit = pytest.mark.skip(reason="Test requires PyObjC Photos bindings")

    for item in items:
        if "macos" in item.keywords and platform.system() != "Darwin":
            item.add_marker(skip_macos)

        if "photokit" in item.keywords and not HAS_PHOTOKIT:
            item.add_marker(skip_photokit)


class FixedClock:
    """Callable clock that tests can move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_item(asset_identifier: str, when: datetime,
              media_type: MediaType = MediaType.VIDEO, duration=None) -> MediaItem:
    if duration is None and media_type is MediaType.VIDEO:
        duration = 12.0
    return MediaItem(
        asset_identifier=asset_identifier,
        date=when,
        media_type=media_type,
        duration=duration,
    )


# Common test fixtures

@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for test isolation."""
    temp_path = tempfile.mkdtemp(prefix="daily_videos_test_")
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def app_home(temp_dir: str, monkeypatch) -> Generator[str, None, None]:
    """Point DAILY_VIDEOS_HOME at a temporary directory."""
    home = os.path.join(temp_dir, "home")
    monkeypatch.setenv("DAILY_VIDEOS_HOME", home)
    reset_path_manager()
    try:
        yield home
    finally:
        reset_path_manager()


@pytest.fixture
def utc_clock() -> FixedClock:
    """Clock frozen at 2024-03-15 12:00 UTC."""
    return FixedClock(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def preference_store(utc_clock) -> PreferenceStore:
    return PreferenceStore(MemoryStore(), tz=timezone.utc, clock=utc_clock)


@pytest.fixture
def pin_store(utc_clock) -> PinStore:
    return PinStore(MemoryStore(), clock=utc_clock)


@pytest.fixture
def march_items() -> List[MediaItem]:
    """Media spread over March 2024 plus the grid's leading/trailing days."""
    return [
        make_item("feb-25-video", datetime(2024, 2, 25, 9, 0, tzinfo=timezone.utc)),
        make_item("mar-01-live", datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc), MediaType.LIVE_PHOTO),
        make_item("mar-01-video", datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)),
        make_item("mar-15-video-a", datetime(2024, 3, 15, 7, 30, tzinfo=timezone.utc)),
        make_item("mar-15-video-b", datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)),
        make_item("mar-15-live", datetime(2024, 3, 15, 6, 0, tzinfo=timezone.utc), MediaType.LIVE_PHOTO),
        make_item("mar-31-live", datetime(2024, 3, 31, 23, 0, tzinfo=timezone.utc), MediaType.LIVE_PHOTO),
        make_item("apr-06-video", datetime(2024, 4, 6, 12, 0, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def fake_gateway(march_items) -> FakeMediaGateway:
    """Gateway that answers immediately with ``march_items``."""
    return FakeMediaGateway(march_items, tz=timezone.utc)
