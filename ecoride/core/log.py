"""Logging setup for the API process."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the ``ecoride`` logger."""
    logger = logging.getLogger("ecoride")
    logger.setLevel(level)
    if not any(getattr(h, "_ecoride", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ecoride = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
