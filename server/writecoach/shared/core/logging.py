"""
Loguru configuration for the web server.
"""

import sys
from typing import Optional

from loguru import logger


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(log_level: str = "INFO", log_file: Optional[str] = None, log_format: str = "text") -> None:
    """
    Replace loguru's default sink with the service sinks.

    Args:
        log_level: Minimum level for every sink
        log_file: Optional path for a rotating file sink
        log_format: "text" for colored console lines, "json" for serialized records
    """
    logger.remove()

    serialize = log_format.lower() == "json"
    if serialize:
        logger.add(sys.stderr, level=log_level, serialize=True)
    else:
        logger.add(sys.stderr, level=log_level, format=TEXT_FORMAT)

    if log_file:
        logger.add(
            log_file,
            level=log_level,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            serialize=serialize,
        )

    logger.info(f"Logging configured at level {log_level}")
