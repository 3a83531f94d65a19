"""Logging utilities."""

import logging
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as loguru_logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


class InterceptHandler(logging.Handler):
    """Forward standard logging records (``logging.getLogger(__name__)``) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        loguru_logger.bind(logger_name=record.name).opt(
            depth=6, exception=record.exc_info
        ).log(level, record.getMessage())


def setup_logger(
    level: str = "INFO",
    log_file: Optional[str] = None,
    name: str = "booktrans"
):
    """
    Set up loguru sinks and route the package's standard loggers into them.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path
        name: Root logger name to intercept

    Returns:
        Configured loguru logger
    """
    level = level.upper()
    loguru_logger.remove()
    loguru_logger.configure(extra={"logger_name": name})

    loguru_logger.add(sys.stderr, level=level, format=LOG_FORMAT)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            str(log_path),
            level=level,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention="1 week",
            enqueue=True
        )

    for logger_name in (name, "cli"):
        std_logger = logging.getLogger(logger_name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(getattr(logging, level, logging.INFO))
        std_logger.propagate = False

    return loguru_logger
