"""Application logging setup (stdlib ``logging``)."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the package logger.

    Safe to call more than once; only the level is updated on later calls.
    """
    global _configured
    logger = logging.getLogger("gagyebu")
    logger.setLevel(level)
    if _configured:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    _configured = True


def format_context(**context: object) -> str:
    """Render ``key=value`` pairs for log lines, skipping ``None`` values."""
    return " ".join(f"{key}={value}" for key, value in context.items() if value is not None)
