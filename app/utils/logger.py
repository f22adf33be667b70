# app/utils/logger.py
"""
Centralised logging configuration for the entire application.
Logs to console and to a rotating file (LOG_DIR/LOG_FILE, default ./logs/ingestion.log).

Ingestion code logs through cycle_logger() so every line of one
fetch → publish run carries the same "[cycle N]" tag and can be grepped as a unit.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.config import settings

LOG_LEVEL = settings.LOG_LEVEL.upper()
LOG_DIR = settings.LOG_DIR or os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "logs"
)

_configured = False


def _configure_root_logger():
    global _configured
    if _configured:
        return
    _configured = True

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)

    console = logging.StreamHandler()
    console.setLevel(LOG_LEVEL)
    console.setFormatter(fmt)
    root.addHandler(console)

    if settings.LOG_FILE:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=os.path.join(LOG_DIR, settings.LOG_FILE),
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(LOG_LEVEL)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    # One request line per geocode lookup drowns the cycle summary
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    _configure_root_logger()
    return logging.getLogger(name)


class CycleLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the ingestion cycle number."""

    def process(self, msg, kwargs):
        return f"[cycle {self.extra['cycle']}] {msg}", kwargs


def cycle_logger(logger: logging.Logger, cycle: int) -> CycleLoggerAdapter:
    return CycleLoggerAdapter(logger, {"cycle": cycle})
