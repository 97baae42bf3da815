"""Logging configuration for the application."""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional, TextIO

LOGGER_NAME = 'jvmbuild'


def setup_logger(debug_mode: bool = False, log_dir: Optional[Path] = None, stream: Optional[TextIO] = None):
    """
    Configure the logger for the application.

    Args:
        debug_mode: If True, sets logging level to DEBUG and enables file logging.
        log_dir: The directory where debug logs will be stored (defaults to cwd).
        stream: Console stream (defaults to stdout).
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()  # Prevent duplicate handlers across runs

    log_level = logging.DEBUG if debug_mode else logging.INFO
    logger.setLevel(log_level)

    # Console Handler - always on, build tool output goes through here
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    console_handler.setLevel(log_level)
    logger.addHandler(console_handler)

    if debug_mode:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = (log_dir or Path.cwd()) / f"jvmbuild_debug_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(module)s - %(message)s'))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

        logger.info(f"✓ Debug mode enabled. Detailed logs will be saved to: {log_file}")

    return logger


class LogWriter:
    """Line sink that forwards each line to a logger at a fixed level."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO, indent: str = "      "):
        self.logger = logger
        self.level = level
        self.indent = indent

    def write(self, line: str) -> None:
        line = line.rstrip("\r\n")
        if line:
            self.logger.log(self.level, f"{self.indent}{line}")


def format_user_config(name: str, description: str, default: str) -> str:
    """Render one user-configurable variable as a log line."""
    return f"  ${name:<20} {description} (default: {default})"
