"""Tests for the daily-videos command line."""

import json
import os

import pytest

from daily_videos.core.config import load_config
from daily_videos.core.models import WeekStart
from daily_videos.library import gateway as gateway_module
from daily_videos.main import main


@pytest.fixture
def library_export(temp_dir):
    """Library export with media on 2024-03-15 and 2024-03-20 (noon UTC)."""
    path = os.path.join(temp_dir, "library.json")
    entries = [
        {"asset_identifier": "clip-a", "date": "2024-03-15T12:00:00+00:00", "media_type": "video", "duration": 4.0},
        {"asset_identifier": "live-b", "date": "2024-03-15T12:30:00+00:00", "media_type": "live_photo"},
        {"asset_identifier": "clip-c", "date": "2024-03-20T12:00:00+00:00", "media_type": "video", "duration": 9.0},
    ]
    with open(path, "w", encoding="utf-8") as handle:
        json.dump(entries, handle)
    return path


class TestMainCLI:
    """Test suite for main() argument handling and dispatch."""

    def test_no_command_prints_help(self, app_home, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_month(self, app_home, library_export, capsys):
        assert main(["--library", library_export, "month", "--year", "2024", "--month", "3"]) == 0
        out = capsys.readouterr().out
        assert "March 2024" in out
        assert "15·2" in out
        assert "20·1" in out
        assert "3 items across 2 days" in out

    def test_month_invalid(self, app_home, library_export, capsys):
        assert main(["--library", library_export, "month", "--year", "2024", "--month", "13"]) == 1
        assert "Invalid month" in capsys.readouterr().out

    @pytest.mark.parametrize("year", ["0", "10000"])
    def test_month_year_out_of_range(self, app_home, library_export, capsys, year):
        assert main(["--library", library_export, "month", "--year", year, "--month", "1"]) == 1
        assert "Invalid year" in capsys.readouterr().out

    def test_month_past_last_date(self, app_home, library_export, capsys):
        assert main(["--library", library_export, "month", "--year", "9999", "--month", "12"]) == 1
        assert "supported date range" in capsys.readouterr().out

    def test_day_past_last_date(self, app_home, library_export, capsys):
        assert main(["--library", library_export, "day", "9999-12-31"]) == 1
        assert "supported date range" in capsys.readouterr().out

    def test_month_missing_export(self, app_home, temp_dir, capsys):
        missing = os.path.join(temp_dir, "missing.json")
        assert main(["--library", missing, "month", "--year", "2024", "--month", "3"]) == 1
        assert "Error" in capsys.readouterr().out

    def test_month_without_library(self, app_home, monkeypatch, capsys):
        monkeypatch.setattr(gateway_module, "photokit_available", lambda: False)
        assert main(["month", "--year", "2024", "--month", "3"]) == 1
        assert "No media library available" in capsys.readouterr().out

    def test_day_lists_media(self, app_home, library_export, capsys):
        assert main(["--library", library_export, "day", "2024-03-15"]) == 0
        out = capsys.readouterr().out
        assert "2 items on 2024-03-15." in out
        assert "clip-a" in out
        assert "live-b" in out

    def test_day_invalid_date(self, app_home, capsys):
        assert main(["day", "yesterday"]) == 1
        assert "Invalid date" in capsys.readouterr().out

    def test_prefer_then_day(self, app_home, library_export, capsys):
        assert main(["prefer", "2024-03-15", "live-b"]) == 0
        assert main(["prefer", "2024-03-15"]) == 0
        assert "live-b" in capsys.readouterr().out

        assert main(["--library", library_export, "day", "2024-03-15"]) == 0
        preferred = [line for line in capsys.readouterr().out.splitlines() if "preferred" in line]
        assert len(preferred) == 1
        assert "live-b" in preferred[0]

    def test_prefer_clear(self, app_home, capsys):
        main(["prefer", "2024-03-15", "clip-a"])
        assert main(["prefer", "2024-03-15", "--clear"]) == 0
        assert "Cleared preference" in capsys.readouterr().out
        assert main(["prefer", "2024-03-15"]) == 0
        assert "(none)" in capsys.readouterr().out

    def test_pin_unpin_and_list(self, app_home, capsys):
        assert main(["pin", "clip-a"]) == 0
        assert main(["pin", "clip-c"]) == 0
        assert main(["pins"]) == 0
        assert "2 pinned items." in capsys.readouterr().out

        assert main(["unpin", "clip-a"]) == 0
        assert main(["unpin", "clip-a"]) == 0
        out = capsys.readouterr().out
        assert "Unpinned clip-a." in out
        assert "clip-a was not pinned." in out

    def test_cleanup_dry_run_and_apply(self, app_home, capsys):
        main(["pin", "clip-a"])
        capsys.readouterr()

        assert main(["cleanup", "pins", "--older-than", "all"]) == 0
        assert "1 pins stored." in capsys.readouterr().out

        assert main(["cleanup", "pins", "--older-than", "all", "--apply"]) == 0
        assert "Removed 1 of 1 pins." in capsys.readouterr().out

    def test_cleanup_keeps_recent_preferences(self, app_home, capsys):
        main(["prefer", "2001-01-01", "old"])
        main(["prefer", "2999-01-01", "future"])
        capsys.readouterr()
        assert main(["cleanup", "preferences", "--older-than", "1y", "--apply"]) == 0
        assert "Removed 1 of 2 preferences." in capsys.readouterr().out

    def test_save_week_start(self, app_home, capsys):
        assert main(["--week-start", "monday", "--save", "pins"]) == 0
        assert load_config().week_start is WeekStart.MONDAY
