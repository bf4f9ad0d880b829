"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}
_console_sink_id: int | None = None


def get_log_dir() -> Path:
    return Path.home() / ".kbaserpc" / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_path = get_log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def configure_console_logging(verbose: bool = False) -> None:
    """Replace the stderr sink: DEBUG when verbose, WARNING otherwise."""
    global _console_sink_id
    if _console_sink_id is None:
        # Drop loguru's default stderr handler (id 0) the first time through.
        try:
            logger.remove(0)
        except ValueError:
            pass
    else:
        logger.remove(_console_sink_id)
    _console_sink_id = logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
