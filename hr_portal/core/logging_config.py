import logging
from typing import Optional

from ..config import settings


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stream handler to the ``hr_portal`` logger tree."""
    logger = logging.getLogger("hr_portal")
    logger.setLevel((level or settings.log_level).upper())

    # Prevent duplicate handlers when the app factory runs more than once
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
