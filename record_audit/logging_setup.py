"""Logging configuration for audit runs."""
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 1024 * 1024
LOG_BACKUPS = 5


def timestamped_log_name(run_name: str, now: Optional[datetime] = None) -> str:
    """e.g. ``recordValidation_07Mar2025_142530.log``."""
    now = now or datetime.now()
    return f"{run_name}_{now.strftime('%d%b%Y_%H%M%S')}.log"


def configure_logging(
    log_file: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    logger_name: str = "record_audit",
) -> logging.Logger:
    """Attach console and (optionally) size-rotated file handlers.

    Returns the configured logger, which is what gets injected into the
    discovery and validation components.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
