# app/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "0.0.0.0"
    BACKEND_PORT: int = 5000
    FRONTEND_URL: str = "http://localhost:3000"

    # ── Upstream: parking bay sensors ────────────────────────────────────
    SENSOR_API_URL: str = (
        "https://data.melbourne.vic.gov.au/api/explore/v2.1/catalog/datasets/"
        "on-street-parking-bay-sensors/records"
    )
    SENSOR_PAGE_LIMIT: int = 100
    FETCH_TIMEOUT_SECONDS: float = 15.0

    # ── Upstream: reverse geocoding (Nominatim) ──────────────────────────
    GEOCODER_URL: str = "https://nominatim.openstreetmap.org/reverse"
    GEOCODER_USER_AGENT: str = "LordOfPark/1.0"
    GEOCODE_TIMEOUT_SECONDS: float = 10.0
    GEOCODE_CONCURRENCY: int = 4          # Parallel lookups per cycle

    # ── Ingestion schedule ───────────────────────────────────────────────
    INGEST_ENABLED: bool = True
    INGEST_INTERVAL_SECONDS: float = 125.0
    CYCLE_TIMEOUT_SECONDS: float = 120.0  # Whole fetch → publish cycle

    # ── Zone metadata (not provided by the sensor feed) ──────────────────
    DEFAULT_PRICE_PER_HOUR: float = 6.5
    DEFAULT_MAX_DURATION: str = "4 hours"
    DEFAULT_OPERATING_HOURS: str = "24/7"
    DEFAULT_FEATURES: list[str] = ["covered", "security"]
    DEFAULT_SUBURB: str = "Melbourne"
    CITY_SUFFIX: str = "Melbourne VIC 3000"

    # ── Thresholds ────────────────────────────────────────────────────────
    LIMITED_AVAILABILITY_RATIO: float = 0.2   # Below 20% free → "limited"

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None            # Defaults to ./logs next to app/
    LOG_FILE: str = "ingestion.log"          # Empty string disables the file handler
    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
