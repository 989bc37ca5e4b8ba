"""Logging helpers for jli."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(level: str | int | None = None) -> logging.Logger:
    """Return the package logger, attaching a stream handler on first use."""

    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger("jli")
        if not _LOGGER.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            handler.setFormatter(formatter)
            _LOGGER.addHandler(handler)
        _LOGGER.setLevel(logging.INFO)
    if level is not None:
        _LOGGER.setLevel(level.upper() if isinstance(level, str) else level)
    return _LOGGER
