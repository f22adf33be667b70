# app/services/zone_query.py
"""
Read-side queries over a published Snapshot: filtered listing, lookup by id,
radius search and aggregate statistics. Pure functions — no I/O, no cache writes.
"""

import math
from typing import Optional

from app.services.availability import Availability
from app.services.snapshot_cache import ParkingZone, Snapshot

EARTH_RADIUS_KM = 6371
DEFAULT_RADIUS_KM = 2.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a just past 1 for near-antipodal points
    a = min(1.0, a)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def filter_zones(
    snapshot: Snapshot,
    search: Optional[str] = None,
    availability: Optional[Availability] = None,
    max_price: Optional[float] = None,
) -> list[ParkingZone]:
    """All filters are optional and combine with AND."""
    zones = snapshot.all()

    if search:
        needle = search.lower()
        zones = [z for z in zones if needle in z.name.lower() or needle in z.address.lower()]

    if availability is not None:
        zones = [z for z in zones if z.availability == availability]

    if max_price is not None:
        zones = [z for z in zones if z.price_per_hour <= max_price]

    return zones


def get_zone(snapshot: Snapshot, zone_id: str) -> Optional[ParkingZone]:
    return snapshot.zones.get(zone_id)


def find_nearby(
    snapshot: Snapshot, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM
) -> list[ParkingZone]:
    return [z for z in snapshot.all() if haversine_km(lat, lng, z.lat, z.lng) <= radius_km]


def compute_stats(snapshot: Snapshot) -> dict:
    """Totals over the whole snapshot; filters never apply here."""
    zones = snapshot.all()
    total_locations = len(zones)
    average_price = (
        round(sum(z.price_per_hour for z in zones) / total_locations, 2) if total_locations else 0.0
    )
    return {
        "total_spots": sum(z.total_spots for z in zones),
        "available_spots": sum(z.available_spots for z in zones),
        "total_locations": total_locations,
        "average_price": average_price,
        "availability_stats": {
            bucket.value: sum(1 for z in zones if z.availability == bucket) for bucket in Availability
        },
        "last_updated": snapshot.updated_at,
    }
