# app/services/snapshot_cache.py
"""
Snapshot cache — holds the currently published set of parking zones.

A Snapshot is built entirely by one ingestion cycle and published with a
single replace(). Readers always get a complete snapshot, either the previous
one or the new one. Nothing in a published snapshot is ever mutated.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from fastapi import Request

from app.services.availability import Availability


@dataclass(frozen=True)
class ParkingZone:
    id: str
    name: str
    address: str
    lat: float
    lng: float
    total_spots: int
    available_spots: int
    price_per_hour: float
    max_duration: str
    operating_hours: str
    last_updated: datetime               # ingestion cycle that built this zone
    availability: Optional[Availability] = None   # set by the classify stage
    features: tuple[str, ...] = ()
    zone_number: Optional[int] = None
    street_name: Optional[str] = None
    street_number: Optional[str] = None
    suburb: Optional[str] = None
    accurate_address: Optional[str] = None   # reverse-geocoded address, if lookup succeeded
    sensor_updated_at: Optional[str] = None


def _empty_zones() -> Mapping[str, ParkingZone]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Snapshot:
    zones: Mapping[str, ParkingZone] = field(default_factory=_empty_zones)
    updated_at: Optional[datetime] = None

    @classmethod
    def build(cls, zones: list[ParkingZone], updated_at: datetime) -> "Snapshot":
        return cls(zones=MappingProxyType({z.id: z for z in zones}), updated_at=updated_at)

    def __len__(self) -> int:
        return len(self.zones)

    def all(self) -> list[ParkingZone]:
        return list(self.zones.values())


class SnapshotCache:
    """Owner of the live snapshot. current() and replace() are the only access paths."""

    def __init__(self, initial: Optional[Snapshot] = None):
        self._snapshot = initial if initial is not None else Snapshot()

    def current(self) -> Snapshot:
        return self._snapshot

    def replace(self, snapshot: Snapshot):
        # Single reference swap; readers never see a half-built snapshot
        self._snapshot = snapshot


def get_snapshot_cache(request: Request) -> SnapshotCache:
    """FastAPI dependency — the cache owned by the running application."""
    return request.app.state.snapshot_cache
