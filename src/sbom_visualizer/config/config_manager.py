"""
Configuration management for the SBOM visualizer.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, asdict
import logging

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class MergeConfig:
    """SBOM merge configuration."""
    default_project_name: str = "Unknown Project"
    unknown_license: str = "Unknown"
    path_property: str = "syft:location:0:path"
    parse_workers: int = 4


@dataclass
class ViewsConfig:
    """Table, graph and tree view configuration."""
    tree_max_depth: int = 6
    default_sort_field: str = "name"


@dataclass
class OutputConfig:
    """Export output configuration."""
    directory: str = "./sbom-reports"
    formats: list = field(default_factory=lambda: ["json", "html"])
    include_date: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "WARNING"
    file: Optional[str] = None
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_file_size: int = 10  # MB
    backup_count: int = 5
    structured: bool = False


@dataclass
class AppConfig:
    """Complete application configuration."""
    merge: MergeConfig = field(default_factory=MergeConfig)
    views: ViewsConfig = field(default_factory=ViewsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


VALID_EXPORT_FORMATS = {"json", "html"}
VALID_SORT_FIELDS = {"name", "version", "type", "is_direct", "vulnerabilities"}
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_INT_FIELDS = {
    "merge.parse_workers",
    "views.tree_max_depth",
    "logging.max_file_size",
    "logging.backup_count",
}
_LIST_FIELDS = {"output.formats"}
_BOOL_FIELDS = {"output.include_date", "logging.structured"}

_TRUE_VALUES = {"true", "yes", "on", "1"}
_FALSE_VALUES = {"false", "no", "off", "0"}


class ConfigManager:
    """
    Manages application configuration from multiple sources.

    Configuration is loaded in the following order (later sources override earlier):
    1. Default configuration
    2. Configuration file (YAML)
    3. Environment variables
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to configuration file
        """
        self.config_file = Path(config_file) if config_file else None
        self._config: Optional[AppConfig] = None
        self._env_var_mapping = self._create_env_var_mapping()

    def _create_env_var_mapping(self) -> Dict[str, str]:
        """Create mapping of environment variables to config paths."""
        return {
            # Merge configuration
            "SBOM_DEFAULT_PROJECT": "merge.default_project_name",
            "SBOM_UNKNOWN_LICENSE": "merge.unknown_license",
            "SBOM_PATH_PROPERTY": "merge.path_property",
            "SBOM_PARSE_WORKERS": "merge.parse_workers",

            # View configuration
            "SBOM_TREE_MAX_DEPTH": "views.tree_max_depth",
            "SBOM_DEFAULT_SORT": "views.default_sort_field",

            # Output configuration
            "SBOM_OUTPUT_DIR": "output.directory",
            "SBOM_OUTPUT_FORMATS": "output.formats",
            "SBOM_INCLUDE_DATE": "output.include_date",

            # Logging configuration
            "LOG_LEVEL": "logging.level",
            "LOG_FILE": "logging.file",
            "LOG_FORMAT": "logging.format",
            "LOG_MAX_SIZE": "logging.max_file_size",
            "LOG_BACKUP_COUNT": "logging.backup_count",
            "LOG_STRUCTURED": "logging.structured",
        }

    def load_config(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Complete application configuration

        Raises:
            ConfigurationError: If a value is invalid
        """
        if self._config is not None:
            return self._config

        config_dict = self._get_default_config()

        if self.config_file and self.config_file.exists():
            file_config = self._load_config_file(self.config_file)
            config_dict = self._merge_configs(config_dict, file_config)

        env_config = self._load_env_config()
        config_dict = self._merge_configs(config_dict, env_config)

        config_dict = self._substitute_env_vars(config_dict)
        config_dict = self._coerce_types(config_dict)

        self._validate_config(config_dict)

        self._config = self._dict_to_config(config_dict)

        return self._config

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return AppConfig().to_dict()

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary
        """
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return {}

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping",
                context={"config_file": str(config_path)}
            )
        logger.info(f"Loaded configuration from {config_path}")
        return config

    def _load_env_config(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables.

        Returns:
            Configuration dictionary from environment variables
        """
        env_config: Dict[str, Any] = {}

        for env_var, config_path in self._env_var_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                value = self._convert_env_value(config_path, value)
                self._set_nested_value(env_config, config_path, value)

        return env_config

    def _convert_env_value(self, config_path: str, value: str) -> Any:
        """
        Convert an environment variable string for its config field.

        List fields are split on commas. Everything else stays a string;
        integer and boolean fields are converted by ``_coerce_types``.

        Args:
            config_path: Dot-separated config path the variable maps to
            value: String value from environment variable

        Returns:
            Converted value
        """
        if config_path in _LIST_FIELDS:
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """
        Set a nested configuration value using dot notation.

        Args:
            config: Configuration dictionary
            path: Dot-separated path (e.g., 'merge.parse_workers')
            value: Value to set
        """
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _substitute_env_vars(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Substitute ``${VAR}`` references in configuration values.

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with environment variables substituted
        """
        def substitute_recursive(obj):
            if isinstance(obj, dict):
                return {k: substitute_recursive(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [substitute_recursive(item) for item in obj]
            elif isinstance(obj, str) and obj.startswith('${') and obj.endswith('}'):
                env_var = obj[2:-1]
                return os.getenv(env_var, obj)
            else:
                return obj

        return substitute_recursive(config)

    def _coerce_types(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Coerce integer, boolean and list settings that arrive as strings."""
        for path in _INT_FIELDS:
            section, key = path.split('.')
            value = config.get(section, {}).get(key)
            if value is None or isinstance(value, bool):
                continue
            try:
                config[section][key] = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid integer for {path}: {value!r}", config_key=path, cause=e
                )

        for path in _BOOL_FIELDS:
            section, key = path.split('.')
            value = config.get(section, {}).get(key)
            if not isinstance(value, str):
                continue
            if value.strip().lower() in _TRUE_VALUES:
                config[section][key] = True
            elif value.strip().lower() in _FALSE_VALUES:
                config[section][key] = False
            else:
                raise ConfigurationError(f"Invalid boolean for {path}: {value!r}", config_key=path)

        for path in _LIST_FIELDS:
            section, key = path.split('.')
            value = config.get(section, {}).get(key)
            if isinstance(value, str):
                config[section][key] = [value]

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """
        Validate configuration values.

        Args:
            config: Configuration dictionary

        Raises:
            ConfigurationError: If configuration is invalid
        """
        workers = config.get("merge", {}).get("parse_workers", 1)
        if isinstance(workers, bool) or workers < 1:
            raise ConfigurationError(
                f"parse_workers must be at least 1, got {workers}",
                config_key="merge.parse_workers"
            )

        max_depth = config.get("views", {}).get("tree_max_depth", 6)
        if isinstance(max_depth, bool) or max_depth < 0:
            raise ConfigurationError(
                f"tree_max_depth must not be negative, got {max_depth}",
                config_key="views.tree_max_depth"
            )

        sort_field = config.get("views", {}).get("default_sort_field", "name")
        if sort_field not in VALID_SORT_FIELDS:
            raise ConfigurationError(
                f"Invalid sort field: {sort_field}. Valid fields: {sorted(VALID_SORT_FIELDS)}",
                config_key="views.default_sort_field"
            )

        for fmt in config.get("output", {}).get("formats", []):
            if fmt not in VALID_EXPORT_FORMATS:
                raise ConfigurationError(
                    f"Invalid output format: {fmt}. Valid formats: {sorted(VALID_EXPORT_FORMATS)}",
                    config_key="output.formats"
                )

        log_level = str(config.get("logging", {}).get("level", "WARNING")).upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {log_level}. Valid levels: {sorted(VALID_LOG_LEVELS)}",
                config_key="logging.level"
            )
        config["logging"]["level"] = log_level

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> AppConfig:
        """
        Convert configuration dictionary to AppConfig object.

        Args:
            config_dict: Configuration dictionary

        Returns:
            AppConfig object
        """
        try:
            return AppConfig(
                merge=MergeConfig(**config_dict.get("merge", {})),
                views=ViewsConfig(**config_dict.get("views", {})),
                output=OutputConfig(**config_dict.get("output", {})),
                logging=LoggingConfig(**config_dict.get("logging", {}))
            )
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}", cause=e)

    def get_config(self) -> AppConfig:
        """
        Get the current configuration.

        Returns:
            Application configuration
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> AppConfig:
        """
        Reload configuration from all sources.

        Returns:
            Reloaded application configuration
        """
        self._config = None
        return self.load_config()

    def save_config(self, config_path: Optional[Path] = None) -> None:
        """
        Save current configuration to a YAML file.

        Args:
            config_path: Path to save configuration file
        """
        if config_path is None:
            config_path = self.config_file or Path("config.yaml")

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.get_config().to_dict(), f, default_flow_style=False, indent=2)

        logger.info(f"Configuration saved to {config_path}")


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_file: Optional[Union[str, Path]] = None) -> ConfigManager:
    """
    Get the global configuration manager instance.

    Args:
        config_file: Path to configuration file (only used on first call)

    Returns:
        ConfigManager instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(config_file)
    return _config_manager


def reset_config_manager() -> None:
    """Drop the global configuration manager so the next access reloads."""
    global _config_manager
    _config_manager = None


def get_config() -> AppConfig:
    """
    Get the current application configuration.

    Returns:
        Application configuration
    """
    return get_config_manager().get_config()
