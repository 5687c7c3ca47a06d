"""Logging utilities for the oxr_bank package."""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "oxr_bank") -> logging.Logger:
    """Return a module-level logger, configuring the root handler once."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger("oxr_bank")
    return logging.getLogger(name)
