"""Per-category log levels driven by Settings.

The root logger takes ``LOG_LEVEL``; SQL, HTTP client, uvicorn and the
spreadsheet import pipeline each get their own knob so one of them can be
turned up to DEBUG without flooding the console with the others.

Usage:
    from lablend.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from lablend.config import Settings, get_settings

_CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field -> logger names it governs
_CATEGORY_MAP: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_import": (
        "AssetImportService",
        "lablend.application.services.import_service",
        "lablend.infrastructure.spreadsheet",
        "lablend.infrastructure.http",
    ),
}


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-category levels. Safe to call more than once."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    if not root.handlers:
        root.addHandler(_console_handler())

    applied = {}
    for field, logger_names in _CATEGORY_MAP.items():
        raw = getattr(settings, field, "INFO")
        for name in logger_names:
            logging.getLogger(name).setLevel(_parse_level(raw))
        applied[field.removeprefix("log_level_")] = raw

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s %s",
        settings.log_level,
        " ".join(f"{name}={level}" for name, level in applied.items()),
    )


def _console_handler() -> logging.Handler:
    # uvicorn installs its own handler when it owns the process
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _parse_level(raw: str) -> int:
    """Map a level name to its logging constant; unknown names fall back to INFO."""
    numeric = logging.getLevelName(raw.upper())
    return numeric if isinstance(numeric, int) else logging.INFO
