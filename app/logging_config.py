"""
Logging Configuration
Plain-text stream logging for the API and background jobs
"""

import logging
import sys

from app.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = None) -> logging.Logger:
    """
    Configure the root logger once.

    Args:
        level: Override for settings.LOG_LEVEL

    Returns:
        The application logger
    """
    log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)

    if not any(getattr(h, "_stairs_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        handler._stairs_handler = True
        root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    return logging.getLogger("app")
