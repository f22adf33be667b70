# app/services/zone_enricher.py
"""
Zone enricher — turns a ZoneAggregate into a publishable ParkingZone.

Naming fallback chain (order matters, users see the result):
  1. Reverse-geocoded address has a road component ("... Street", "... Lane",
     "... Avenue", "... Road")           → "{component} Parking"
  2. Sensor feed street name, if it is a real name (not the "Zone N" marker):
       contains a road keyword           → "{street} Parking"
       otherwise                         → "{street} Parking Zone"
  3. Nothing usable                      → "Zone {id} Parking"

Address: the geocoded display name when the lookup succeeded, otherwise
"{number}, {street}, {suburb}, Melbourne VIC 3000" (number/suburb omitted when
empty, suburb omitted when it is the default "Melbourne").
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, Optional

from app.config import settings
from app.services.snapshot_cache import ParkingZone
from app.services.zone_aggregator import ZoneAggregate, zone_marker
from app.utils.logger import get_logger

logger = get_logger(__name__)

ROAD_KEYWORDS = ("Street", "Lane", "Avenue", "Road")

Resolver = Callable[[float, float], Awaitable[Optional[str]]]


def _has_road_keyword(text: str) -> bool:
    return any(keyword in text for keyword in ROAD_KEYWORDS)


def _is_real_street_name(zone_id: str, street_name: Optional[str]) -> bool:
    return bool(street_name) and street_name != zone_marker(zone_id) and not street_name.startswith("Zone ")


def derive_zone_name(zone_id: str, street_name: Optional[str], resolved_address: Optional[str]) -> str:
    if resolved_address:
        road = next((part for part in resolved_address.split(", ") if _has_road_keyword(part)), None)
        if road:
            return f"{road} Parking"

    if _is_real_street_name(zone_id, street_name):
        if _has_road_keyword(street_name):
            return f"{street_name} Parking"
        return f"{street_name} Parking Zone"

    return f"Zone {zone_id} Parking"


def build_display_address(street_number: Optional[str], street_name: str, suburb: Optional[str]) -> str:
    parts = []
    if street_number:
        parts.append(street_number)
    parts.append(street_name)
    if suburb and suburb != settings.DEFAULT_SUBURB:
        parts.append(suburb)
    parts.append(settings.CITY_SUFFIX)
    return ", ".join(parts)


async def enrich_zone(aggregate: ZoneAggregate, resolve: Resolver, cycle_time: datetime) -> ParkingZone:
    """Geocode one zone and derive its display name/address. Never raises on lookup failure."""
    try:
        resolved = await resolve(aggregate.lat, aggregate.lng)
    except Exception as e:
        logger.warning(f"[ENRICH] zone {aggregate.zone_id}: address lookup failed ({e!r}), using feed data")
        resolved = None

    if resolved:
        address = resolved
    else:
        address = build_display_address(aggregate.street_number, aggregate.street_name, aggregate.suburb)

    return ParkingZone(
        id=aggregate.zone_id,
        name=derive_zone_name(aggregate.zone_id, aggregate.street_name, resolved),
        address=address,
        lat=aggregate.lat,
        lng=aggregate.lng,
        total_spots=aggregate.total_spots,
        available_spots=aggregate.available_spots,
        price_per_hour=settings.DEFAULT_PRICE_PER_HOUR,
        max_duration=settings.DEFAULT_MAX_DURATION,
        operating_hours=settings.DEFAULT_OPERATING_HOURS,
        last_updated=cycle_time,
        features=tuple(settings.DEFAULT_FEATURES),
        zone_number=aggregate.zone_number,
        street_name=aggregate.street_name,
        street_number=aggregate.street_number,
        suburb=aggregate.suburb,
        accurate_address=resolved,
        sensor_updated_at=aggregate.sensor_updated_at,
    )


async def enrich_zones(
    aggregates: list[ZoneAggregate],
    resolve: Resolver,
    cycle_time: datetime,
    concurrency: int = None,
) -> list[ParkingZone]:
    """
    Enrich all zones with at most `concurrency` lookups in flight.
    Output order matches input order.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency or settings.GEOCODE_CONCURRENCY))

    async def _bounded(aggregate: ZoneAggregate) -> ParkingZone:
        async with semaphore:
            return await enrich_zone(aggregate, resolve, cycle_time)

    zones = await asyncio.gather(*(_bounded(a) for a in aggregates))
    geocoded = sum(1 for z in zones if z.accurate_address)
    logger.info(f"[ENRICH] {len(zones)} zones enriched ({geocoded} geocoded, {len(zones) - geocoded} fallback)")
    return list(zones)
