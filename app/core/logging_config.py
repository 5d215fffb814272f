"""
Logging configuration.

Call setup_logging() once at startup. Modules log through the standard
``logging.getLogger(__name__)``; get_logger() is a shortcut for named
application loggers (e.g. "grades.requests").
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_MAX_LOG_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

_configured = False


def setup_logging(level: str | None = None, log_dir: str | None = None) -> None:
    """Configure the root logger with a console handler and an optional rotating file."""
    global _configured
    if _configured:
        return

    level_name = (level or settings.log_level).upper()
    log_dir = settings.log_dir if log_dir is None else log_dir

    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"),
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
