# app/main.py
"""
FastAPI application entry point.
Wires the snapshot cache + ingestion scheduler, global error handlers, and routers.
"""

from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.routers import zones, health
from app.config import settings
from app.services.ingestion_scheduler import IngestionScheduler
from app.services.snapshot_cache import SnapshotCache
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Lord of Park API",
    description="Live on-street parking availability for Melbourne, built from bay sensor data.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Single owner of the live snapshot; handlers reach it via get_snapshot_cache
app.state.snapshot_cache = SnapshotCache()
app.state.started_at = datetime.now(timezone.utc)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Exception Handlers ({success: false, error} envelope) ───────────────────
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Invalid request parameters", "details": errors},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(zones.router,  prefix="/api/v1", tags=["🅿️  Parking Zones"])
app.include_router(health.router, prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Lord of Park backend starting up...")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")

    if settings.INGEST_ENABLED:
        scheduler = IngestionScheduler(app.state.snapshot_cache)
        app.state.ingestion_scheduler = scheduler
        scheduler.start()
    else:
        logger.warning("Ingestion disabled (INGEST_ENABLED=false) — serving an empty snapshot")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Lord of Park backend shutting down...")
    scheduler = getattr(app.state, "ingestion_scheduler", None)
    if scheduler is not None:
        await scheduler.stop()
