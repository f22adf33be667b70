"""Unit tests for the snapshot cache, including interleaved readers and replaces."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import random
import dataclasses
import pytest
from datetime import datetime, timedelta, timezone
from app.services.availability import Availability
from app.services.snapshot_cache import ParkingZone, Snapshot, SnapshotCache

T0 = datetime(2025, 8, 1, 10, 0, tzinfo=timezone.utc)


def make_zone(zone_id, cycle_time, available=1, total=4):
    return ParkingZone(
        id=zone_id, name=f"Zone {zone_id} Parking", address="Melbourne VIC 3000",
        lat=-37.81, lng=144.96, total_spots=total, available_spots=available,
        price_per_hour=6.5, max_duration="4 hours", operating_hours="24/7",
        last_updated=cycle_time, availability=Availability.AVAILABLE,
    )


def make_snapshot(cycle: int, zone_count: int = 20) -> Snapshot:
    cycle_time = T0 + timedelta(seconds=125 * cycle)
    return Snapshot.build([make_zone(str(i), cycle_time) for i in range(zone_count)], cycle_time)


class TestSnapshotCache:
    def test_empty_before_first_publish(self):
        snapshot = SnapshotCache().current()
        assert len(snapshot) == 0
        assert snapshot.updated_at is None
        assert snapshot.all() == []

    def test_replace_swaps_whole_snapshot(self):
        cache = SnapshotCache()
        first, second = make_snapshot(1), make_snapshot(2, zone_count=3)

        cache.replace(first)
        assert cache.current() is first
        cache.replace(second)
        assert cache.current() is second
        assert len(cache.current()) == 3

    def test_published_snapshot_is_read_only(self):
        snapshot = make_snapshot(1)
        with pytest.raises(TypeError):
            snapshot.zones["new"] = make_zone("new", T0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.zones["0"].available_spots = 0

    def test_build_preserves_order(self):
        snapshot = make_snapshot(1, zone_count=5)
        assert [z.id for z in snapshot.all()] == ["0", "1", "2", "3", "4"]


class TestConcurrentReads:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", range(5))
    async def test_readers_never_see_mixed_cycles(self, seed):
        rng = random.Random(seed)
        cache = SnapshotCache(make_snapshot(0))
        observed = []

        async def reader():
            for _ in range(30):
                snapshot = cache.current()
                # Yield mid-read so replaces can land between zone accesses
                cycle_times = set()
                for zone in snapshot.all():
                    cycle_times.add(zone.last_updated)
                    if rng.random() < 0.3:
                        await asyncio.sleep(0)
                observed.append((snapshot.updated_at, cycle_times))
                await asyncio.sleep(rng.random() / 1000)

        async def writer():
            for cycle in range(1, 10):
                await asyncio.sleep(rng.random() / 500)
                cache.replace(make_snapshot(cycle))

        await asyncio.gather(reader(), reader(), writer())

        assert observed
        for updated_at, cycle_times in observed:
            assert cycle_times == {updated_at}
