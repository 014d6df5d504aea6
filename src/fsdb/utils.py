"""Utility functions for fsdb."""

import sys
from pathlib import Path
from typing import Optional

import logfire
from loguru import logger


def setup_logging(
    env: str = "dev",
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:
    """
    Configure loguru sinks.

    Args:
        env: Environment name; no log file is written under "test"
        log_level: Level for the stderr sink
        log_file: Optional rotating log file
        console: Whether to log to stderr
    """
    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, colorize=True)

    if log_file and env != "test":
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=True,
            enqueue=True,
        )

    if env != "test":
        # spans are only exported when a logfire token is configured
        logfire.configure(send_to_logfire="if-token-present", console=False)

    logger.debug(f"Logging configured: env={env} level={log_level} file={log_file}")
