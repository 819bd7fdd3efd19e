"""Configuration loading for riven-tui."""

from riven_tui.config.defaults import (
    DEFAULT_CONFIG,
    ENV_PREFIX,
    config_search_paths,
    default_config_path,
    default_log_path,
)
from riven_tui.config.settings import (
    ApiSettings,
    ConfigError,
    ConfigService,
    LoggingSettings,
    Settings,
    UISettings,
    format_duration,
    load_config,
    parse_duration,
    save_config,
)

__all__ = [
    "ApiSettings",
    "ConfigError",
    "ConfigService",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "LoggingSettings",
    "Settings",
    "UISettings",
    "config_search_paths",
    "default_config_path",
    "default_log_path",
    "format_duration",
    "load_config",
    "parse_duration",
    "save_config",
]
