"""Logging configuration using loguru."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

from src.config import LoggingConfig

LOG_FILE_NAME = "bus_notifier.log"


def setup_logging(config: LoggingConfig) -> Path:
    """Send logs to stderr and to a rotating file under ``config.log_dir``.

    Returns the log file path.
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level>"
        ),
        level=config.level,
        colorize=True,
    )

    log_path = Path(config.log_dir) / LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level=config.level,
        rotation="10 MB",
        retention=5,
        enqueue=True,
    )

    logger.info(f"Logging to {log_path} at level {config.level}")
    return log_path


__all__ = ["setup_logging"]
