"""
Logging system for the SBOM visualizer.
"""

from .logger_config import (
    setup_logging, get_logger, set_log_level, get_logging_stats,
    close_logging, LoggerConfig
)
from .log_formatter import StructuredFormatter, ColoredFormatter

__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_level",
    "get_logging_stats",
    "close_logging",
    "LoggerConfig",
    "StructuredFormatter",
    "ColoredFormatter"
]
