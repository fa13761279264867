"""Logger configuration for Cronos."""

import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logger(
    level: str = "INFO",
    log_file: Path | str | None = None,
    rotation: str = "1 MB",
    retention: str = "14 days",
) -> None:
    """Configure loguru with a console sink and an optional rotating file.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file.  If None, console only.
        rotation: Log rotation size (e.g. "1 MB", "1 day")
        retention: How long rotated files are kept
    """
    logger.remove()

    logger.add(sys.stderr, format=LOG_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level=level,
            rotation=rotation,
            retention=retention,
            backtrace=True,
            diagnose=False,
        )

    logger.debug("Logger initialized with level={}", level)
