"""Loguru helpers for enabling apicontract logging in host applications."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from apicontract.config.schema import LoggingConfig

_SINK_IDS: dict[str, int] = {}

LOG_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | {name} | <level>{message}</level>"


def ensure_rotating_log_file(path: Path, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given file path."""
    key = str(path)
    if key in _SINK_IDS:
        return path
    path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        key,
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    return path


def configure_logging(config: LoggingConfig) -> None:
    """Enable or silence the ``apicontract`` logger according to ``config``.

    The package is disabled on import; host applications opt in here.
    """
    if not config.enabled:
        logger.disable("apicontract")
        return
    if "stderr" not in _SINK_IDS:
        _SINK_IDS["stderr"] = logger.add(sys.stderr, level=config.level, format=LOG_FORMAT)
    if config.file:
        ensure_rotating_log_file(Path(config.file).expanduser(), level=config.level)
    logger.enable("apicontract")


def reset_logging() -> None:
    """Remove sinks added by :func:`configure_logging` and disable the logger."""
    for sink_id in _SINK_IDS.values():
        logger.remove(sink_id)
    _SINK_IDS.clear()
    logger.disable("apicontract")
