# app/services/sensor_fetcher.py
"""
Sensor fetcher — pulls the latest bay sensor page from the City of Melbourne
open-data API.

Endpoint: GET {SENSOR_API_URL}?limit={SENSOR_PAGE_LIMIT}
Response: {"total_count": N, "results": [ {zone_number, kerbsideid, status_description, location, ...}, ... ]}

One request per call. There is no retry here — the next scheduled ingestion
cycle is the retry.
"""

import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


class FetchError(Exception):
    """Sensor page could not be fetched or parsed. Aborts the current cycle only."""


async def fetch_sensor_records(client: httpx.AsyncClient) -> list[dict]:
    """
    Fetch one page of raw sensor records.
    Raises FetchError on transport errors, non-2xx status or a malformed body.
    """
    try:
        response = await client.get(
            settings.SENSOR_API_URL,
            params={"limit": settings.SENSOR_PAGE_LIMIT},
            timeout=settings.FETCH_TIMEOUT_SECONDS,
        )
    except httpx.TimeoutException as e:
        raise FetchError(f"sensor API timed out: {e}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"sensor API transport error: {e}") from e

    if not response.is_success:
        raise FetchError(f"sensor API returned HTTP {response.status_code}")

    try:
        payload = response.json()
    except ValueError as e:
        raise FetchError(f"sensor API returned invalid JSON: {e}") from e

    results = payload.get("results") if isinstance(payload, dict) else None
    if not isinstance(results, list):
        raise FetchError("sensor API payload has no 'results' list")

    records = [r for r in results if isinstance(r, dict)]
    logger.debug(f"[FETCH] {len(records)} sensor records received")
    return records
