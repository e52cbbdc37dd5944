"""Tests for per-day media grouping and representative selection."""

from datetime import date, datetime, timedelta, timezone

from daily_videos.core.models import MediaType
from daily_videos.library.index import MediaIndex, group_by_day, select_default_representative

from tests.conftest import make_item


class TestGroupByDay:
    """Test suite for group_by_day."""

    def test_groups_by_calendar_day(self, march_items):
        grouped = group_by_day(march_items, timezone.utc)
        assert len(grouped[date(2024, 3, 15)]) == 3
        assert len(grouped[date(2024, 3, 1)]) == 2
        assert date(2024, 3, 2) not in grouped

    def test_total_is_preserved(self, march_items):
        grouped = group_by_day(march_items, timezone.utc)
        assert sum(len(items) for items in grouped.values()) == len(march_items)

    def test_keeps_arrival_order(self, march_items):
        grouped = group_by_day(march_items, timezone.utc)
        identifiers = [item.asset_identifier for item in grouped[date(2024, 3, 15)]]
        assert identifiers == ["mar-15-video-a", "mar-15-video-b", "mar-15-live"]

    def test_duplicate_identifiers_counted_once(self):
        when = datetime(2024, 3, 1, 9, tzinfo=timezone.utc)
        grouped = group_by_day([make_item("a", when), make_item("a", when)], timezone.utc)
        assert len(grouped[date(2024, 3, 1)]) == 1

    def test_day_depends_on_timezone(self):
        """23:00 UTC on the 31st is already April 1st at UTC+2."""
        item = make_item("late", datetime(2024, 3, 31, 23, 0, tzinfo=timezone.utc))
        plus_two = timezone(timedelta(hours=2))
        assert list(group_by_day([item], timezone.utc)) == [date(2024, 3, 31)]
        assert list(group_by_day([item], plus_two)) == [date(2024, 4, 1)]

    def test_empty_input(self):
        assert group_by_day([], timezone.utc) == {}


class TestSelectDefaultRepresentative:
    """Test suite for select_default_representative."""

    def test_prefers_earliest_video(self):
        base = datetime(2024, 3, 15, 6, tzinfo=timezone.utc)
        items = [
            make_item("live-early", base, MediaType.LIVE_PHOTO),
            make_item("video-late", base + timedelta(hours=5)),
            make_item("video-early", base + timedelta(hours=1)),
        ]
        assert select_default_representative(items) == "video-early"

    def test_falls_back_to_earliest_live_photo(self):
        base = datetime(2024, 3, 15, 6, tzinfo=timezone.utc)
        items = [
            make_item("live-b", base + timedelta(hours=2), MediaType.LIVE_PHOTO),
            make_item("live-a", base, MediaType.LIVE_PHOTO),
        ]
        assert select_default_representative(items) == "live-a"

    def test_no_items(self):
        assert select_default_representative([]) is None


class TestMediaIndex:
    """Test suite for MediaIndex."""

    def test_counts_per_day(self, march_items):
        index = MediaIndex(timezone.utc)
        index.index(march_items)
        assert index.count_for(date(2024, 3, 15)) == 3
        assert index.count_for(date(2024, 3, 2)) == 0
        assert index.total == len(march_items)
        assert sum(index.counts().values()) == index.total

    def test_window_filters_items(self, march_items):
        index = MediaIndex(timezone.utc)
        grouped = index.index(march_items, window=(date(2024, 3, 1), date(2024, 3, 31)))
        assert date(2024, 2, 25) not in grouped
        assert date(2024, 4, 6) not in grouped
        assert index.total == 6
        assert index.window == (date(2024, 3, 1), date(2024, 3, 31))

    def test_covers_window(self, march_items):
        index = MediaIndex(timezone.utc)
        assert not index.covers(date(2024, 3, 1))
        index.index(march_items, window=(date(2024, 3, 1), date(2024, 3, 31)))
        assert index.covers(date(2024, 3, 1))
        assert index.covers(datetime(2024, 3, 31, 12, tzinfo=timezone.utc))
        assert not index.covers(date(2024, 4, 1))

    def test_items_for_returns_copy(self, march_items):
        index = MediaIndex(timezone.utc)
        index.index(march_items)
        items = index.items_for(date(2024, 3, 1))
        items.clear()
        assert index.count_for(date(2024, 3, 1)) == 2

    def test_reindex_replaces_contents(self, march_items):
        index = MediaIndex(timezone.utc)
        index.index(march_items)
        index.index(march_items[:1])
        assert index.total == 1
        assert index.days_with_media() == [date(2024, 2, 25)]

    def test_clear(self, march_items):
        index = MediaIndex(timezone.utc)
        index.index(march_items, window=(date(2024, 3, 1), date(2024, 3, 31)))
        index.clear()
        assert index.total == 0
        assert index.window is None
