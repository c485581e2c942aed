"""Process-wide logging for the worker and publisher scripts."""
from __future__ import annotations

from logging.config import dictConfig
from pathlib import Path

from fitness_advisor.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def build_logging_config(log_dir: Path, level: str) -> dict:
    """dictConfig payload: console plus ``<log_dir>/app.log``, both at ``level``."""

    handler_defaults = {"formatter": "pipeline", "level": level}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"pipeline": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {"class": "logging.StreamHandler", **handler_defaults},
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "app.log"),
                "encoding": "utf-8",
                **handler_defaults,
            },
        },
        "loggers": {
            # httpx logs every request at INFO.
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
        "root": {"level": level, "handlers": ["console", "file"]},
    }


def configure_logging() -> None:
    global _configured
    if _configured:
        return

    settings = get_settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    dictConfig(build_logging_config(settings.log_dir, settings.log_level))
    _configured = True
