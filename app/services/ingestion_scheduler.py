# app/services/ingestion_scheduler.py
"""
Ingestion scheduler — rebuilds the parking snapshot on a fixed period.

Cycle: fetch → aggregate → enrich → classify → publish.
Runs once at startup, then every INGEST_INTERVAL_SECONDS (125s by default).

Only one cycle is ever in flight. A tick that fires while the previous cycle
is still running (slow geocoder, slow sensor API) is skipped, not queued.
A cycle that fails before publish leaves the current snapshot untouched.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Optional

import httpx
from app.config import settings
from app.services.availability import classify_zones
from app.services.geocoder import resolve_address
from app.services.sensor_fetcher import FetchError, fetch_sensor_records
from app.services.snapshot_cache import Snapshot, SnapshotCache
from app.services.zone_aggregator import aggregate_records
from app.services.zone_enricher import enrich_zones
from app.utils.logger import cycle_logger, get_logger

logger = get_logger(__name__)


class CycleState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    AGGREGATING = "aggregating"
    ENRICHING = "enriching"
    CLASSIFYING = "classifying"
    PUBLISHING = "publishing"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionScheduler:
    def __init__(
        self,
        cache: SnapshotCache,
        fetcher=fetch_sensor_records,
        resolver=resolve_address,
        client_factory=httpx.AsyncClient,
        interval: float = None,
        cycle_timeout: float = None,
        concurrency: int = None,
    ):
        self.cache = cache
        self._fetch = fetcher
        self._resolve = resolver
        self._client_factory = client_factory
        self.interval = interval if interval is not None else settings.INGEST_INTERVAL_SECONDS
        self.cycle_timeout = cycle_timeout if cycle_timeout is not None else settings.CYCLE_TIMEOUT_SECONDS
        self.concurrency = concurrency or settings.GEOCODE_CONCURRENCY

        self.state = CycleState.IDLE
        self.cycles_started = 0
        self.cycles_completed = 0
        self.cycles_failed = 0
        self.ticks_skipped = 0
        self.last_success_at: Optional[datetime] = None
        self.last_error: Optional[str] = None

        self._cycle_task: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None

    # ── Status ────────────────────────────────────────────────────────────
    @property
    def in_flight(self) -> bool:
        return self._cycle_task is not None and not self._cycle_task.done()

    def status(self) -> dict:
        return {
            "state": self.state.value,
            "in_flight": self.in_flight,
            "interval_seconds": self.interval,
            "cycles_started": self.cycles_started,
            "cycles_completed": self.cycles_completed,
            "cycles_failed": self.cycles_failed,
            "ticks_skipped": self.ticks_skipped,
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
            "last_error": self.last_error,
        }

    # ── One cycle ─────────────────────────────────────────────────────────
    async def _build_snapshot(self) -> Snapshot:
        cycle_time = _utcnow()
        async with self._client_factory() as client:
            self.state = CycleState.FETCHING
            records = await self._fetch(client)

            self.state = CycleState.AGGREGATING
            aggregates = aggregate_records(records)

            self.state = CycleState.ENRICHING
            zones = await enrich_zones(
                list(aggregates.values()),
                partial(self._resolve, client),
                cycle_time,
                concurrency=self.concurrency,
            )

        self.state = CycleState.CLASSIFYING
        zones = classify_zones(zones)
        return Snapshot.build(zones, updated_at=cycle_time)

    async def run_cycle(self) -> bool:
        """
        Run one full cycle and publish on success.
        Returns True if a new snapshot was published. Never raises on upstream failure.
        """
        self.cycles_started += 1
        log = cycle_logger(logger, self.cycles_started)
        started = _utcnow()
        try:
            snapshot = await asyncio.wait_for(self._build_snapshot(), timeout=self.cycle_timeout)
        except FetchError as e:
            self._record_failure(log, f"fetch failed: {e}")
            return False
        except asyncio.TimeoutError:
            self._record_failure(log, f"cycle timed out after {self.cycle_timeout}s (stage: {self.state.value})")
            return False
        except Exception as e:
            log.error(f"❌ Ingestion cycle crashed in stage {self.state.value}: {e}", exc_info=True)
            self._record_failure(log, f"{type(e).__name__}: {e}")
            return False

        self.state = CycleState.PUBLISHING
        self.cache.replace(snapshot)
        self.state = CycleState.IDLE

        self.cycles_completed += 1
        self.last_success_at = snapshot.updated_at
        self.last_error = None
        duration = (_utcnow() - started).total_seconds()
        log.info(f"✅ Real-time parking data updated ({len(snapshot)} zones, {duration:.1f}s)")
        return True

    def _record_failure(self, log, message: str):
        self.cycles_failed += 1
        self.last_error = message
        self.state = CycleState.IDLE
        log.warning(f"⚠️  Ingestion cycle aborted, keeping previous snapshot: {message}")

    # ── Scheduling ────────────────────────────────────────────────────────
    def trigger(self) -> Optional[asyncio.Task]:
        """Start a cycle in the background unless one is already running."""
        if self.in_flight:
            self.ticks_skipped += 1
            logger.warning("⏱  Previous ingestion cycle still running — skipping this tick")
            return None
        self._cycle_task = asyncio.create_task(self.run_cycle(), name="ingestion-cycle")
        return self._cycle_task

    async def _run_forever(self):
        while True:
            self.trigger()
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        """Launch the periodic loop. First cycle starts immediately."""
        if self._loop_task is None or self._loop_task.done():
            logger.info(f"🚀 Ingestion scheduler started (every {self.interval:g}s)")
            self._loop_task = asyncio.create_task(self._run_forever(), name="ingestion-scheduler")
        return self._loop_task

    async def stop(self):
        for task in (self._loop_task, self._cycle_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._loop_task = None
        self._cycle_task = None
        self.state = CycleState.IDLE
        logger.info("🛑 Ingestion scheduler stopped")
