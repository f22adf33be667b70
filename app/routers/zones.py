# app/routers/zones.py
"""Parking zones — read-only queries over the latest published snapshot."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from app.schemas.parking_zone import (
    ParkingZoneOut,
    ZoneListResponse,
    ZoneResponse,
    ZoneStatsOut,
    ZoneStatsResponse,
)
from app.services.availability import Availability
from app.services.snapshot_cache import SnapshotCache, get_snapshot_cache
from app.services.zone_query import (
    DEFAULT_RADIUS_KM,
    compute_stats,
    filter_zones,
    find_nearby,
    get_zone,
)

router = APIRouter()


def _zone_list(zones) -> dict:
    return {
        "success": True,
        "data": [ParkingZoneOut.model_validate(z) for z in zones],
        "total": len(zones),
    }


@router.get("/zones", response_model=ZoneListResponse, summary="List parking zones")
def list_zones(
    search: Optional[str] = None,
    availability: Optional[Availability] = None,
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    cache: SnapshotCache = Depends(get_snapshot_cache),
):
    """Filter by name/address substring, availability bucket and maximum hourly price."""
    zones = filter_zones(cache.current(), search=search, availability=availability, max_price=max_price)
    return _zone_list(zones)


@router.get("/zones/stats", response_model=ZoneStatsResponse, summary="Availability overview")
def get_zone_stats(cache: SnapshotCache = Depends(get_snapshot_cache)):
    """Totals across every zone in the current snapshot."""
    return {"success": True, "data": ZoneStatsOut(**compute_stats(cache.current()))}


@router.get("/zones/search/location", response_model=ZoneListResponse, summary="Zones within a radius")
def search_by_location(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(DEFAULT_RADIUS_KM, ge=0, description="Search radius in km"),
    cache: SnapshotCache = Depends(get_snapshot_cache),
):
    if lat is None or lng is None:
        raise HTTPException(status_code=400, detail="Latitude and longitude are required")
    return _zone_list(find_nearby(cache.current(), lat, lng, radius))


@router.get("/zones/{zone_id}", response_model=ZoneResponse, summary="Single zone by id")
def get_zone_by_id(zone_id: str, cache: SnapshotCache = Depends(get_snapshot_cache)):
    zone = get_zone(cache.current(), zone_id)
    if not zone:
        raise HTTPException(status_code=404, detail="Zone not found")
    return {"success": True, "data": ParkingZoneOut.model_validate(zone)}
