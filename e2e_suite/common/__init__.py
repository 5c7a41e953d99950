"""
Shared configuration and logging utilities.
"""

from .config_loader import ConfigLoader, ConfigurationError, SuiteSettings
from .log_config import init_logger

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "SuiteSettings",
    "init_logger",
]
