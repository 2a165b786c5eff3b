"""
Logging configuration for stdout output.
"""
import logging
import sys

from core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = None) -> logging.Logger:
    """
    Configure the application logger with a stdout handler.

    Safe to call more than once: existing handlers are replaced so
    reloads don't duplicate every line.
    """
    app_logger = logging.getLogger("scoresheets")
    app_logger.setLevel(getattr(logging, level or settings.log_level, logging.INFO))
    app_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    app_logger.addHandler(handler)
    app_logger.propagate = False

    return app_logger


logger = setup_logging()
