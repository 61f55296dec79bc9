"""Logging for the onboarding portal.

Console output always; a size-rotated file under ``LOG_DIR`` when
``LOG_TO_FILE`` is set. Timestamps are ISO 8601.
"""

import logging
import logging.handlers
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
ISO_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# 10MB per file, five backups
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def setup_logger(
    name: str,
    *,
    log_dir: str = "/var/log/onboarding",
    level: str = "INFO",
    file_logging: bool = False,
) -> logging.Logger:
    """Attach handlers to the named logger.

    Handlers are added once; calling again (e.g. on app reload) only
    updates the level.

    Args:
        name: Logger name, normally the top-level package
        log_dir: Directory for ``<name>.log`` when file logging is on
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
        file_logging: Also write to a rotating file

    Raises:
        ValueError: On an unknown level name
    """
    level_name = level.upper()
    if level_name not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")

    logger = logging.getLogger(name)
    logger.setLevel(level_name)
    if logger.handlers:
        return logger

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if file_logging:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            directory / f"{name}.log", maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
        ))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=ISO_DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def configure_from_settings(settings) -> logging.Logger:
    """Set up the ``onboarding`` package logger from application settings."""
    return setup_logger(
        "onboarding",
        log_dir=settings.log_dir,
        level=settings.log_level,
        file_logging=settings.log_to_file,
    )
