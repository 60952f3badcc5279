# SPDX-License-Identifier: MIT
"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure basic logging if the host app has not done so."""
    root_logger = logging.getLogger()
    if root_logger.handlers:  # respect existing logging configuration
        return

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
