# app/services/geocoder.py
"""
Reverse geocoding via OpenStreetMap Nominatim.

Endpoint: GET {GEOCODER_URL}?format=json&lat=..&lon=..&zoom=18&addressdetails=1
Nominatim rejects requests without an identifying User-Agent.

Best effort only: every failure is logged and returned as None so that one
bad lookup never aborts an ingestion cycle.
"""

from typing import Optional

import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def resolve_address(client: httpx.AsyncClient, lat: float, lng: float) -> Optional[str]:
    """Return Nominatim's display_name for the coordinate, or None if unavailable."""
    try:
        response = await client.get(
            settings.GEOCODER_URL,
            params={
                "format": "json",
                "lat": lat,
                "lon": lng,
                "zoom": 18,
                "addressdetails": 1,
            },
            headers={"User-Agent": settings.GEOCODER_USER_AGENT},
            timeout=settings.GEOCODE_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.warning(f"[GEOCODE] ({lat}, {lng}) request failed: {e!r}")
        return None

    if response.status_code != 200:
        logger.warning(f"[GEOCODE] ({lat}, {lng}) returned HTTP {response.status_code}")
        return None

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"[GEOCODE] ({lat}, {lng}) returned invalid JSON")
        return None

    display_name = data.get("display_name") if isinstance(data, dict) else None
    if not isinstance(display_name, str) or not display_name.strip():
        logger.debug(f"[GEOCODE] ({lat}, {lng}) has no display_name")
        return None
    return display_name
