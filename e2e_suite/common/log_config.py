"""
================================================================================
Logging Configuration
================================================================================

Centralized Loguru setup shared by fixtures, framework modules and the
pytest hooks. `init_logger()` is called once from `pytest_configure`; later
calls are no-ops.

Author: Automation Team
License: MIT
================================================================================
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader, PROJECT_ROOT

DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False


def init_logger(
    level: Optional[str] = None,
    config: Optional[ConfigLoader] = None,
) -> None:
    """
    Initialize the global Loguru logger with consistent configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        config: Configuration source. Defaults to the ConfigLoader singleton.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    config = config or ConfigLoader()
    log_level = (level or config.get("logging.level", "INFO")).upper()
    log_format = config.get("logging.format", DEFAULT_LOG_FORMAT)

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    log_file = config.get("logging.file")
    if log_file:
        log_path = Path(log_file)
        if not log_path.is_absolute():
            log_path = PROJECT_ROOT / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),
            rotation=config.get("logging.rotation", "10 MB"),
            retention=config.get("logging.retention", "7 days"),
            enqueue=True,
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def reset_logger() -> None:
    """Allow `init_logger()` to run again (used by unit tests)."""
    global _logger_initialized
    _logger_initialized = False
