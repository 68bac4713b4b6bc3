# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit tests for DownloadAggregator

Tests per-version counters, the running total and the 7-day recent window.
"""

import pytest

from extension_registry.services.registry.downloads import (
    RECENT_WINDOW_DAYS,
    DownloadAggregator,
    merge_recent_downloads,
)

from tests.unit.fakes import FakeStorage, loaded_store, make_entry


class TestMergeRecentDownloads:
    """Test the pure recent-window merge"""

    def test_sums_overlapping_days(self):
        merged, changed = merge_recent_downloads({"20240101": 3}, {"20240101": 1, "20240102": 4})
        assert merged == {"20240101": 4, "20240102": 4}
        assert changed

    def test_no_incoming_data_is_unchanged(self):
        merged, changed = merge_recent_downloads({"20240101": 3}, {})
        assert merged == {"20240101": 3}
        assert not changed

    def test_keeps_only_newest_days(self):
        current = {f"2024010{d}": d for d in range(1, 8)}
        merged, changed = merge_recent_downloads(current, {"20240108": 8, "20240109": 9})

        assert changed
        assert len(merged) == RECENT_WINDOW_DAYS
        assert min(merged) == "20240103"
        # Dropped days are not folded into the kept ones
        assert merged["20240103"] == 3

    def test_oversized_window_is_trimmed_without_new_data(self):
        current = {f"202401{d:02d}": 1 for d in range(1, 10)}
        merged, changed = merge_recent_downloads(current, None)

        assert changed
        assert len(merged) == RECENT_WINDOW_DAYS
        assert min(merged) == "20240103"

    def test_non_positive_day_counts_are_ignored(self):
        merged, changed = merge_recent_downloads({"20240101": 3}, {"20240101": -2, "20240102": 0})
        assert merged == {"20240101": 3}
        assert not changed

    def test_old_incoming_day_is_dropped_when_window_full(self):
        current = {f"2024010{d}": 1 for d in range(3, 10)}
        merged, _ = merge_recent_downloads(current, {"20240101": 50})
        assert "20240101" not in merged


class TestRecordDownloads:
    """Test recording downloads against registry entries"""

    @pytest.mark.asyncio
    async def test_two_reports_accumulate(self):
        store = await loaded_store(make_entry("foo"))
        aggregator = DownloadAggregator(store)

        assert await aggregator.record_downloads("foo", {"1.0.0": 5}, {"20240101": 3})
        assert await aggregator.record_downloads("foo", {"1.0.0": 2}, {"20240101": 1, "20240102": 4})

        entry = store.get("foo")
        assert entry.find_version("1.0.0").downloads == 7
        assert entry.total_downloads == 7
        assert entry.recent == {"20240101": 4, "20240102": 4}

    @pytest.mark.asyncio
    async def test_same_delta_twice_doubles(self):
        store = await loaded_store(make_entry("foo"))
        aggregator = DownloadAggregator(store)

        await aggregator.record_downloads("foo", {"1.0.0": 10})
        await aggregator.record_downloads("foo", {"1.0.0": 10})

        assert store.get("foo").find_version("1.0.0").downloads == 20
        assert store.get("foo").total_downloads == 20

    @pytest.mark.asyncio
    async def test_counts_spread_across_versions(self):
        store = await loaded_store(make_entry("foo", versions=["0.3.0", "0.3.1"]))
        aggregator = DownloadAggregator(store)

        await aggregator.record_downloads("foo", {"0.3.0": 6, "0.3.1": 276})

        entry = store.get("foo")
        assert entry.find_version("0.3.0").downloads == 6
        assert entry.find_version("0.3.1").downloads == 276
        assert entry.total_downloads == 282

    @pytest.mark.asyncio
    async def test_unknown_version_is_ignored(self):
        store = await loaded_store(make_entry("foo"))
        aggregator = DownloadAggregator(store)

        changed = await aggregator.record_downloads("foo", {"9.9.9": 4})

        assert not changed
        assert store.get("foo").total_downloads is None

    @pytest.mark.asyncio
    async def test_total_is_a_running_counter(self):
        """The total grows from its stored value, not from the version sums"""
        store = await loaded_store(make_entry("foo", total_downloads=100))
        aggregator = DownloadAggregator(store)

        await aggregator.record_downloads("foo", {"1.0.0": 5})

        entry = store.get("foo")
        assert entry.find_version("1.0.0").downloads == 5
        assert entry.total_downloads == 105

    @pytest.mark.asyncio
    async def test_recent_window_never_exceeds_seven_days(self):
        store = await loaded_store(make_entry("foo"))
        aggregator = DownloadAggregator(store)

        for day in range(1, 21):
            await aggregator.record_downloads("foo", {}, {f"202401{day:02d}": day})

        recent = store.get("foo").recent
        assert len(recent) == RECENT_WINDOW_DAYS
        assert sorted(recent) == [f"202401{day:02d}" for day in range(14, 21)]

    @pytest.mark.asyncio
    async def test_change_schedules_persist(self):
        storage = FakeStorage({"foo": make_entry("foo")})
        store = await loaded_store(storage=storage)

        await DownloadAggregator(store).record_downloads("foo", {"1.0.0": 1})
        await store.wait_for_persistence()

        assert storage.saved_registries[-1]["foo"]["totalDownloads"] == 1

    @pytest.mark.asyncio
    async def test_unknown_package_is_noop(self):
        storage = FakeStorage({"foo": make_entry("foo")})
        store = await loaded_store(storage=storage)

        changed = await DownloadAggregator(store).record_downloads("nope", {"1.0.0": 1}, {"20240101": 1})
        await store.wait_for_persistence()

        assert not changed
        assert storage.saved_registries == []

    @pytest.mark.asyncio
    async def test_nothing_changed_skips_persist(self):
        storage = FakeStorage({"foo": make_entry("foo")})
        store = await loaded_store(storage=storage)

        changed = await DownloadAggregator(store).record_downloads("foo", {}, {})
        await store.wait_for_persistence()

        assert not changed
        assert storage.saved_registries == []

    @pytest.mark.asyncio
    async def test_negative_and_zero_counts_never_lower_total(self):
        storage = FakeStorage({"foo": make_entry("foo")})
        store = await loaded_store(storage=storage)
        aggregator = DownloadAggregator(store)

        assert await aggregator.record_downloads("foo", {"1.0.0": 5})
        await store.wait_for_persistence()
        saves = len(storage.saved_registries)

        assert not await aggregator.record_downloads("foo", {"1.0.0": -3})
        assert not await aggregator.record_downloads("foo", {"1.0.0": 0})
        assert not await aggregator.record_downloads("foo", {"1.0.0": "7"})
        await store.wait_for_persistence()

        entry = store.get("foo")
        assert entry.find_version("1.0.0").downloads == 5
        assert entry.total_downloads == 5
        assert len(storage.saved_registries) == saves
