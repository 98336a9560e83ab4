"""ANSI-colored console logging for the spreadsheet import pipeline.

Each stage of an import (upload, reconcile, image URLs, submission, storage)
gets its own color so a single import can be followed in the terminal.
Errors are always red, warnings always yellow.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, NamedTuple

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_MAGENTA = "\033[95m"
_CYAN = "\033[96m"
_GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str
    icon: str


class PipelineStage:
    """Import stages with their console color and icon."""

    UPLOAD = Stage("UPLOAD", _GREEN, "📁")
    STORAGE = Stage("STORAGE", _GREEN, "💾")
    RECONCILE = Stage("RECONCILE", _BLUE, "🔗")
    EXTRACT_IMAGES = Stage("IMAGES", _MAGENTA, "🖼️")
    SUBMIT = Stage("SUBMIT", _CYAN, "📦")
    COMPLETE = Stage("COMPLETE", _GREEN, "✅")


def _paint(color: str, text: str) -> str:
    return f"{color}{text}{_RESET}"


def _context(fields: dict[str, Any]) -> str:
    if not fields:
        return ""
    joined = " | ".join(f"{key}={value}" for key, value in fields.items())
    return " " + _paint(_GRAY, f"({joined})")


class PipelineLogger:
    """Color-coded logger bound to one pipeline component.

    Usage:
        log = PipelineLogger("AssetImportService")
        log.step_start(PipelineStage.UPLOAD, "Received inventory.xlsx", size_bytes=4096)
        with log.timed_step(PipelineStage.RECONCILE, "Reconciling workbook"):
            ...
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: Stage, message: str, **fields: Any) -> None:
        prefix = _paint(stage.color + _BOLD, f"{stage.icon} [{stage.label}]")
        self._logger.info(f"{prefix} {_paint(stage.color, message)}{_context(fields)}")

    def step_complete(self, stage: Stage, message: str, **fields: Any) -> None:
        prefix = _paint(stage.color, f"{stage.icon} [{stage.label}]")
        self._logger.info(f"{prefix} {_paint(_GREEN, '✓ ' + message)}{_context(fields)}")

    def step_warning(self, stage: Stage, message: str) -> None:
        prefix = _paint(_YELLOW, f"{stage.icon} [{stage.label}]")
        self._logger.warning(f"{prefix} {_paint(_YELLOW, '⚠ ' + message)}")

    def step_error(self, stage: Stage, message: str, error: Exception | None = None) -> None:
        line = f"{_paint(_RED + _BOLD, f'❌ [{stage.label}]')} {_paint(_RED, message)}"
        if error is not None:
            line += " " + _paint(_DIM, f"→ {type(error).__name__}: {error}")
        self._logger.error(line)

    def detail(self, message: str, **fields: Any) -> None:
        self._logger.info(f"   {_paint(_GRAY, '├─ ' + message)}{_context(fields)}")

    def separator(self, title: str = "") -> None:
        rule = f"{'─' * 10} {title} {'─' * max(0, 50 - len(title))}" if title else "─" * 60
        self._logger.info(_paint(_GRAY, rule))

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **fields: Any):
        """Log start and end of a block with its elapsed time; errors are re-raised."""
        self.step_start(stage, message, **fields)
        started = time.perf_counter()
        try:
            yield
        except Exception as exc:
            self.step_error(stage, f"{message} failed after {time.perf_counter() - started:.2f}s", error=exc)
            raise
        self.step_complete(stage, f"{message} in {time.perf_counter() - started:.2f}s", **fields)
