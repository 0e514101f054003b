"""
Unit tests for the stats log compaction.
"""

import pytest

from rtmetrics.models import BootEntry, CloseEntry, DataEntry, OptimizerConfig, ThreadPerf
from rtmetrics.stats.log_optimizer import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    ResolutionTier,
    build_resolution_tiers,
    merge_data_entries,
    optimize_stats_log,
)

# Aligned on every tier resolution, so slot boundaries are predictable.
NOW_MS = 20_000 * DAY_MS


@pytest.mark.unit
class TestResolutionTiers:
    """Test cases for build_resolution_tiers."""

    def test_default_tiers(self):
        tiers = build_resolution_tiers(OptimizerConfig())

        assert tiers == [
            ResolutionTier(max_age_ms=DAY_MS, resolution_ms=15 * MINUTE_MS),
            ResolutionTier(max_age_ms=7 * DAY_MS, resolution_ms=30 * MINUTE_MS),
            ResolutionTier(max_age_ms=14 * DAY_MS, resolution_ms=HOUR_MS),
            ResolutionTier(max_age_ms=30 * DAY_MS, resolution_ms=4 * HOUR_MS),
        ]

    def test_short_retention_cuts_tiers(self):
        """Tiers never reach past the retention age."""
        tiers = build_resolution_tiers(OptimizerConfig(full_resolution_hours=12, retention_days=3))

        assert tiers == [
            ResolutionTier(max_age_ms=DAY_MS, resolution_ms=15 * MINUTE_MS),
            ResolutionTier(max_age_ms=3 * DAY_MS, resolution_ms=30 * MINUTE_MS),
        ]


@pytest.mark.unit
class TestMergeDataEntries:
    """Test cases for merging data points."""

    def test_merge_arithmetic(self, test_utils):
        entries = [
            test_utils.make_data_entry(ts=1000, players=1, fxs_memory=100.0, count=600, buckets=(500, 100, 0, 0)),
            test_utils.make_data_entry(ts=2000, players=2, fxs_memory=None, count=700, buckets=(600, 50, 50, 0)),
            test_utils.make_data_entry(ts=3000, players=4, fxs_memory=200.0, count=800, buckets=(790, 0, 0, 10)),
        ]

        merged = merge_data_entries(entries)

        assert merged.ts == 3000
        assert merged.players == 2
        assert merged.fxs_memory == 150.0
        assert merged.node_memory is None
        assert merged.perf.svMain == ThreadPerf(2100, (1890, 150, 50, 10))
        assert merged.perf.svSync == ThreadPerf(2100, (1890, 150, 50, 10))

    def test_single_entry_is_returned_unchanged(self, test_utils):
        entry = test_utils.make_data_entry(ts=1000, players=3)

        assert merge_data_entries([entry]) is entry

    def test_empty_list_raises(self):
        with pytest.raises(ValueError):
            merge_data_entries([])


@pytest.mark.unit
class TestOptimizeStatsLog:
    """Test cases for optimize_stats_log."""

    def test_recent_entries_are_untouched(self, test_utils):
        entries = [
            test_utils.make_data_entry(ts=NOW_MS - 11 * HOUR_MS + i * 5 * MINUTE_MS, players=i)
            for i in range(100)
        ]

        result = optimize_stats_log(entries, NOW_MS)

        assert result == entries

    def test_merges_points_in_same_slot(self, test_utils):
        base = NOW_MS - 13 * HOUR_MS
        entries = [
            test_utils.make_data_entry(ts=base, players=2),
            test_utils.make_data_entry(ts=base + 5 * MINUTE_MS, players=4),
            test_utils.make_data_entry(ts=base + 10 * MINUTE_MS, players=6),
            test_utils.make_data_entry(ts=base + 15 * MINUTE_MS, players=8),
        ]

        result = optimize_stats_log(entries, NOW_MS)

        assert len(result) == 2
        assert result[0].ts == base + 10 * MINUTE_MS
        assert result[0].players == 4
        assert result[0].perf.svMain.count == 3000
        assert result[1] == entries[3]

    def test_boot_and_close_split_groups_and_are_kept(self, test_utils):
        base = NOW_MS - 13 * HOUR_MS
        close = CloseEntry(ts=base + 4 * MINUTE_MS, reason="restart")
        boot = BootEntry(ts=base + 5 * MINUTE_MS, duration=20.0)
        entries = [
            test_utils.make_data_entry(ts=base),
            test_utils.make_data_entry(ts=base + 3 * MINUTE_MS),
            close,
            boot,
            test_utils.make_data_entry(ts=base + 7 * MINUTE_MS),
            test_utils.make_data_entry(ts=base + 9 * MINUTE_MS),
        ]

        result = optimize_stats_log(entries, NOW_MS)

        assert len(result) == 4
        assert result[1] is close
        assert result[2] is boot
        assert isinstance(result[0], DataEntry) and result[0].perf.svMain.count == 2000
        assert isinstance(result[3], DataEntry) and result[3].perf.svMain.count == 2000

    def test_expired_data_is_dropped_but_events_kept(self, test_utils):
        old = NOW_MS - 31 * DAY_MS
        boot = BootEntry(ts=old, duration=5.0)
        entries = [
            boot,
            test_utils.make_data_entry(ts=old + MINUTE_MS),
            test_utils.make_data_entry(ts=old + 2 * MINUTE_MS),
            test_utils.make_data_entry(ts=NOW_MS - HOUR_MS),
        ]

        result = optimize_stats_log(entries, NOW_MS)

        assert result == [boot, entries[3]]

    def test_input_is_not_mutated(self, test_utils):
        base = NOW_MS - 2 * DAY_MS
        entries = [test_utils.make_data_entry(ts=base + i * MINUTE_MS) for i in range(10)]
        original = list(entries)

        result = optimize_stats_log(entries, NOW_MS)

        assert entries == original
        assert result is not entries
        assert len(result) < len(entries)

    def test_size_is_bounded_and_stable(self, test_utils):
        """Forty days of five-minute points compact to a bounded, stable log."""
        step = 5 * MINUTE_MS
        entries = [
            test_utils.make_data_entry(ts=NOW_MS - 40 * DAY_MS + i * step, players=i % 7)
            for i in range(40 * 24 * 12)
        ]

        result = optimize_stats_log(entries, NOW_MS)

        # 12h raw + 12h @15min + 6d @30min + 7d @1h + 16d @4h, plus slot edges
        assert len(result) <= 144 + 48 + 288 + 168 + 96 + 5
        assert all(NOW_MS - entry.ts < 30 * DAY_MS for entry in result)
        assert sum(e.perf.svMain.count for e in result) < sum(e.perf.svMain.count for e in entries)
        assert optimize_stats_log(result, NOW_MS) == result
