"""
Configuration management for the SBOM visualizer.
"""

from .config_manager import (
    ConfigManager, AppConfig, MergeConfig, ViewsConfig, OutputConfig,
    LoggingConfig, get_config_manager, get_config, reset_config_manager
)

__all__ = [
    "ConfigManager",
    "AppConfig",
    "MergeConfig",
    "ViewsConfig",
    "OutputConfig",
    "LoggingConfig",
    "get_config_manager",
    "get_config",
    "reset_config_manager"
]
