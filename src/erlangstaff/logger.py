"""Logging helpers for applications embedding the engine."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import DEFAULT_SETTINGS, EngineSettings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(level: Optional[str] = None, settings: EngineSettings = DEFAULT_SETTINGS) -> None:
    """Configure the ``erlangstaff`` logger hierarchy once.

    Host applications call this at startup; the library never does. Package
    modules log through ``logging.getLogger(__name__)`` and only reach a
    handler once this (or the host's own logging setup) has run.
    """
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or settings.log_level).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger("erlangstaff")
    root.setLevel(resolved_level)
    root.addHandler(handler)
    _LOGGER_INITIALIZED = True
