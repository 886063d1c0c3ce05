"""
Client logging utility.

Every module logs through a named logger from ``get_logger`` so that the
NiceGUI shell, the API layer and the state controllers share one format.
"""

import logging
import os
import sys
from typing import Optional

LOG_LEVEL = os.getenv("AUTH_TEMPLATE_LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s | %(levelname)s | CLIENT | %(name)s | %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Create or retrieve a configured client logger.

    Args:
        name: Logger name (usually ``__name__``).

    Returns:
        logging.Logger: Logger writing to stderr without propagation.
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )

    logger.addHandler(handler)
    logger.propagate = False

    return logger

