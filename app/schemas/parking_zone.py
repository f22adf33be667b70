# app/schemas/parking_zone.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional

from app.services.availability import Availability


class ParkingZoneOut(BaseModel):
    id: str
    name: str
    address: str
    lat: float
    lng: float
    availability: Availability
    total_spots: int
    available_spots: int
    price_per_hour: float
    max_duration: str
    operating_hours: str
    features: list[str] = []
    last_updated: datetime
    zone_number: Optional[int] = None
    street_name: Optional[str] = None
    street_number: Optional[str] = None
    suburb: Optional[str] = None
    accurate_address: Optional[str] = None
    sensor_updated_at: Optional[str] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ZoneListResponse(BaseModel):
    success: bool = True
    data: list[ParkingZoneOut]
    total: int


class ZoneResponse(BaseModel):
    success: bool = True
    data: ParkingZoneOut


class AvailabilityStats(BaseModel):
    available: int
    limited: int
    full: int


class ZoneStatsOut(BaseModel):
    total_spots: int
    available_spots: int
    total_locations: int
    average_price: float
    availability_stats: AvailabilityStats
    last_updated: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ZoneStatsResponse(BaseModel):
    success: bool = True
    data: ZoneStatsOut
