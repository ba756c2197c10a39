"""Structured logging helpers backed by loguru."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

_STDERR_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "{message} <dim>{extra}</dim>"
)

_configured = False


def configure_telemetry(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Install the stderr and rotating file sinks.

    Safe to call more than once; later calls replace the sinks.
    """
    global _configured
    level = (level or os.environ.get("SPYGLASS_LOG_LEVEL") or "INFO").upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_STDERR_FORMAT, backtrace=False)

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(log_dir / "spyglass.log"),
                level="DEBUG",
                rotation="5 MB",
                retention="7 days",
                enqueue=True,
            )
        except OSError as exc:
            logger.bind(log_dir=str(log_dir)).warning(f"file logging disabled: {exc}")

    _configured = True


def is_configured() -> bool:
    return _configured


def log_debug(message: str, **fields: Any) -> None:
    logger.bind(**fields).debug(message)


def log_info(message: str, **fields: Any) -> None:
    logger.bind(**fields).info(message)


def log_warning(message: str, **fields: Any) -> None:
    logger.bind(**fields).warning(message)


def log_error(message: str, **fields: Any) -> None:
    logger.bind(**fields).error(message)


def log_exception(message: str, **fields: Any) -> None:
    """Log *message* at error level with the active exception attached."""
    logger.opt(exception=True).bind(**fields).error(message)
