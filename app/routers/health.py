# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + snapshot freshness + ingestion + upstream reachability.
"""

import requests
from fastapi import APIRouter, Request
from app.config import settings
from datetime import datetime, timezone

router = APIRouter()


def _probe(url: str, params: dict = None, headers: dict = None) -> str:
    try:
        resp = requests.get(url, params=params, headers=headers, timeout=3)
        return "ok" if resp.status_code == 200 else f"http_{resp.status_code}"
    except requests.exceptions.ConnectionError:
        return "unreachable"
    except requests.exceptions.Timeout:
        return "timeout"
    except requests.exceptions.RequestException as e:
        return f"error: {str(e)}"


@router.get("/health", summary="System health check")
def health_check(request: Request, check_upstream: bool = True):
    """
    Returns:
    - Backend status and uptime
    - Current snapshot size and age
    - Ingestion scheduler state
    - Sensor API / geocoder reachability (skip with ?check_upstream=false)
    """
    now = datetime.now(timezone.utc)
    state = request.app.state
    snapshot = state.snapshot_cache.current()
    scheduler = getattr(state, "ingestion_scheduler", None)

    result = {
        "status": "ok",
        "timestamp": now.isoformat(),
        "uptime_seconds": round((now - state.started_at).total_seconds(), 1),
        "backend": "ok",
        "snapshot": {
            "zones": len(snapshot),
            "last_updated": snapshot.updated_at.isoformat() if snapshot.updated_at else None,
            "age_seconds": round((now - snapshot.updated_at).total_seconds(), 1) if snapshot.updated_at else None,
        },
        "ingestion": scheduler.status() if scheduler else {"state": "disabled"},
        "upstream": {},
    }

    if snapshot.updated_at is None or (scheduler and scheduler.last_error):
        result["status"] = "degraded"

    if check_upstream:
        result["upstream"]["sensor_api"] = _probe(settings.SENSOR_API_URL, params={"limit": 1})
        result["upstream"]["geocoder"] = _probe(
            settings.GEOCODER_URL,
            params={"format": "json", "lat": -37.8136, "lon": 144.9631},
            headers={"User-Agent": settings.GEOCODER_USER_AGENT},
        )
        if any(v != "ok" for v in result["upstream"].values()):
            result["status"] = "degraded"

    return result
