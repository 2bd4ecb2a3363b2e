"""
Logging Module

Unified logging on top of loguru: levelled stderr output plus an optional rotating log file.
Records carry the calling module and function, not this wrapper.
"""

import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger


class Logger:
    """
    Logger wrapper

    Configures loguru once per process and exposes the levels the catalog uses.
    """

    _instance: Optional["Logger"] = None
    _lock = threading.Lock()
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not Logger._initialized:
            self._setup_logger()
            Logger._initialized = True

    def _setup_logger(self) -> None:
        """
        Install the stderr sink and, unless ECOCATALOG_LOG_FILE=false, a rotating file sink
        """
        log_level = os.getenv("ECOCATALOG_LOG_LEVEL", "INFO")
        debug = os.getenv("ECOCATALOG_DEBUG", "false").lower() == "true"
        log_to_file = os.getenv("ECOCATALOG_LOG_FILE", "true").lower() == "true"

        logger.remove()

        # stdout carries the CLI's JSON output
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{message}</cyan>"
            ),
            level="DEBUG" if debug else log_level,
            colorize=True,
        )

        if not log_to_file:
            return

        logs_dir = Path(os.getenv("ECOCATALOG_LOGS_DIR", "logs"))
        logs_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        logger.add(
            str(logs_dir / f"ecocatalog_{timestamp}.log"),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} | {message}",
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    def info(self, message: str, **kwargs) -> None:
        logger.opt(depth=1).info(message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        logger.opt(depth=1).debug(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        logger.opt(depth=1).warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        logger.opt(depth=1).error(message, **kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """
        Error with the active traceback attached
        """
        logger.opt(depth=1, exception=True).error(message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        logger.opt(depth=1).success(message, **kwargs)


def get_logger() -> Logger:
    """
    Return the process-wide logger

    Returns:
        Logger instance
    """
    return Logger()
