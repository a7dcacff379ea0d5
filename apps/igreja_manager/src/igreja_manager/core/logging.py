"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once; later calls only adjust the level."""

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    root_logger.setLevel(level.upper())
