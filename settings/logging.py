"""Loguru sinks for the sync CLI."""

import sys
from pathlib import Path

from loguru import logger

from settings import LOG_DIR, LOG_LEVEL, LOG_RETENTION

CONSOLE_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level.icon} {level: <8}</level> <cyan>{name}</cyan> {message}"
FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} {level} [{name}:{line}] {message}"


def setup_logging(level: str | None = None, to_file: bool = True, log_dir: Path = LOG_DIR):
    """Route log records to stderr and, for sync runs, a size-rotated file under log_dir."""
    level = (level or LOG_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True, backtrace=False)

    if not to_file:
        return logger

    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_dir / "sync_{time:YYYYMMDD}.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation="10 MB",
        retention=LOG_RETENTION,
        encoding="utf-8",
    )
    logger.debug("File log in {} (level {}, keep {})", log_dir, level, LOG_RETENTION)
    return logger
