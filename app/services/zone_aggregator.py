# app/services/zone_aggregator.py
"""
Groups raw bay sensor records into one ZoneAggregate per zone_number.

Street/suburb descriptors come from the first usable record of each zone,
read through fixed alias lists (the dataset has renamed these columns over time).
Only recognised occupancy statuses are counted.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from app.config import settings
from app.utils.json_parser import first_present, to_float
from app.utils.logger import get_logger

logger = get_logger(__name__)

STREET_NAME_ALIASES = ("street_name", "streetname", "street", "road", "thoroughfare")
STREET_NUMBER_ALIASES = ("street_number", "streetnumber")
SUBURB_ALIASES = ("suburb", "suburb_name")
BAY_ID_ALIASES = ("kerbsideid", "bay_id")

STATUS_UNOCCUPIED = "Unoccupied"
STATUS_PRESENT = "Present"
COUNTED_STATUSES = (STATUS_UNOCCUPIED, STATUS_PRESENT)


def zone_marker(zone_id: str) -> str:
    """Placeholder street name used when a zone has no real street descriptor."""
    return f"Zone {zone_id}"


@dataclass
class ZoneAggregate:
    zone_id: str
    zone_number: Optional[int]
    lat: float
    lng: float
    street_name: str
    street_number: str
    suburb: str
    sensor_updated_at: Optional[str] = None   # lastupdated of the representative record
    total_spots: int = 0
    available_spots: int = 0

    def count_status(self, status: Optional[str]):
        if status not in COUNTED_STATUSES:
            return
        self.total_spots += 1
        if status == STATUS_UNOCCUPIED:
            self.available_spots += 1


def _parse_zone_number(raw) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _coordinate(record: dict) -> Optional[tuple[float, float]]:
    location = record.get("location")
    if not isinstance(location, dict):
        return None
    lat = to_float(location.get("lat"))
    lng = to_float(location.get("lon"))
    if lat is None or lng is None:
        return None
    return lat, lng


def _zone_sort_key(zone_id: str) -> tuple:
    # Canonical integers ("7001", not "07001" or "7001.0") sort numerically ahead of the rest
    if zone_id.isascii() and zone_id.isdigit() and (zone_id == "0" or not zone_id.startswith("0")):
        return (0, int(zone_id))
    return (1, 0)


def aggregate_records(records: Iterable[dict]) -> dict[str, ZoneAggregate]:
    """
    Build {zone_id: ZoneAggregate}. Incomplete records are dropped.
    Numeric zone ids come first in ascending order, any others follow in first-seen order.
    """
    zones: dict[str, ZoneAggregate] = {}
    dropped = 0

    for record in records:
        raw_zone = record.get("zone_number")
        coordinate = _coordinate(record)
        if not raw_zone or first_present(record, BAY_ID_ALIASES) is None or coordinate is None:
            dropped += 1
            continue

        zone_id = str(raw_zone)
        zone = zones.get(zone_id)
        if zone is None:
            zone = ZoneAggregate(
                zone_id=zone_id,
                zone_number=_parse_zone_number(raw_zone),
                lat=coordinate[0],
                lng=coordinate[1],
                street_name=str(first_present(record, STREET_NAME_ALIASES, zone_marker(zone_id))),
                street_number=str(first_present(record, STREET_NUMBER_ALIASES, "")),
                suburb=str(first_present(record, SUBURB_ALIASES, settings.DEFAULT_SUBURB)),
                sensor_updated_at=record.get("lastupdated"),
            )
            zones[zone_id] = zone

        zone.count_status(record.get("status_description"))

    if dropped:
        logger.debug(f"[AGGREGATE] dropped {dropped} records missing zone/bay/location")
    logger.debug(f"[AGGREGATE] {len(zones)} zones built")
    return {zone_id: zones[zone_id] for zone_id in sorted(zones, key=_zone_sort_key)}
