"""Utility functions for dabox."""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

DEFAULT_LOG_DIR = ".dabox"
LOG_FILE_NAME = "dabox.log"


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_to_stdout: bool = False,
    log_dir: Optional[Path] = None,
) -> None:  # pragma: no cover
    """Configure loguru sinks for the current entry point.

    Args:
        log_level: Minimum level for all sinks
        log_to_file: Write a rotating log file under the config directory
        log_to_stdout: Write to stderr (never stdout, CLI output goes there)
        log_dir: Override the directory holding the log file
    """
    # Remove default handler and any existing handlers
    logger.remove()

    if log_to_file:
        if log_dir is None:
            if config_dir := os.getenv("DABOX_CONFIG_DIR"):
                log_dir = Path(config_dir)
            else:
                log_dir = Path(os.getenv("HOME", Path.home())) / DEFAULT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / LOG_FILE_NAME),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )

    if log_to_stdout:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, colorize=True)

    logger.debug(f"Logging initialized level={log_level} file={log_to_file}")


def identity_header_value(token: int) -> str:
    """Render an identity token for the wire.

    The store namespaces directories by the absolute value of the token.
    """
    return str(abs(token))
