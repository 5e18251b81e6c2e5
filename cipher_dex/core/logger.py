"""Logging configuration for the exchange backend."""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - [%(threadName)s] - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that log every oracle poll and every SQL statement
QUIET_LOGGERS = ('httpx', 'httpcore', 'peewee')

ROTATION_BACKUPS = 30


def resolve_level(level: Union[int, str]) -> int:
    """
    Turn a level name such as ``"warning"`` or a numeric level into an int.

    Raises:
        ValueError: Unknown level name
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level}")
    return resolved


def _file_handler(log_file: Path, level: int, formatter: logging.Formatter) -> TimedRotatingFileHandler:
    # Rotated files become <name>.log.YYYY-MM-DD
    handler = TimedRotatingFileHandler(
        filename=str(log_file),
        when='midnight',
        interval=1,
        backupCount=ROTATION_BACKUPS,
        encoding='utf-8'
    )
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    name: str = "cipher_dex",
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
    log_filename: Optional[str] = None
) -> logging.Logger:
    """
    Configure and return the package logger.

    Module loggers created with ``logging.getLogger(__name__)`` inside the
    package propagate to this logger, so configuring it once at startup
    covers the API handlers, the services and the price oracle thread.
    Chatty client and ORM loggers are held at WARNING unless ``level`` is
    DEBUG.

    Args:
        name: Logger name
        level: Level as a name or number
        log_dir: Log directory, relative to the project root (optional)
        log_filename: Base filename without extension (defaults to ``name``)

    Returns:
        Configured logger instance
    """
    level = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear existing handlers to allow reconfiguration
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    for quiet in QUIET_LOGGERS:
        logging.getLogger(quiet).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    if log_dir:
        # Project root is the parent of the cipher_dex package
        log_path = Path(__file__).resolve().parents[2] / log_dir
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"{log_filename or name}.log"

        logger.addHandler(_file_handler(log_file, level, formatter))
        logger.info(f"Logging to file: {log_file}")

    return logger


def configure_from_config(config: dict) -> logging.Logger:
    """Apply the ``logging`` config section to the package logger."""
    log_config = config.get('logging') or {}
    return setup_logger(
        level=log_config.get('level', 'INFO'),
        log_dir=log_config.get('log_dir'),
        log_filename=log_config.get('log_filename')
    )


# Global logger instance (default configuration)
log = setup_logger()
