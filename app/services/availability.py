# app/services/availability.py
"""Maps (available, total) spot counts to an availability bucket."""

from dataclasses import replace
from enum import Enum

from app.config import settings


class Availability(str, Enum):
    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"


def classify_availability(available: int, total: int) -> Availability:
    # A zone with no counted bays has nothing to offer: treat as full
    if available == 0 or total == 0:
        return Availability.FULL
    if available / total < settings.LIMITED_AVAILABILITY_RATIO:
        return Availability.LIMITED
    return Availability.AVAILABLE


def classify_zones(zones: list) -> list:
    """Return copies of the enriched zones with their availability bucket set."""
    return [
        replace(z, availability=classify_availability(z.available_spots, z.total_spots))
        for z in zones
    ]
