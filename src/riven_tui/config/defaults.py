"""Default configuration values and constants for configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

ENV_PREFIX = "RIVEN"
CONFIG_DIR_NAME = "riven-tui"
CONFIG_FILENAME = "config.yaml"
HOME_CONFIG_FILENAME = ".riven-tui.yaml"
LOG_FILENAME = "riven-tui.log"

DEFAULT_ENDPOINT = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0
DEFAULT_REFRESH_INTERVAL = 5.0
DEFAULT_THEME = "default"
DEFAULT_PAGE_SIZE = 50

# Default configuration tree used when no files are present.
DEFAULT_CONFIG: dict[str, Any] = {
    "api": {
        "endpoint": DEFAULT_ENDPOINT,
        "token": "",
        "timeout": "30s",
    },
    "ui": {
        "refresh_interval": "5s",
        "theme": DEFAULT_THEME,
        "page_size": DEFAULT_PAGE_SIZE,
        "dashboard_refresh": "30s",
        "items_refresh": "30s",
        "detail_refresh": "30s",
        "settings_refresh": "60s",
        "toast_seconds": "4s",
        "max_events": 100,
    },
    "logging": {
        "level": "info",
        "format": "text",
        "file": "",
    },
}

# Environment variable -> dotted config key.
ENV_OVERRIDES: dict[str, str] = {
    f"{ENV_PREFIX}_API_ENDPOINT": "api.endpoint",
    f"{ENV_PREFIX}_API_TOKEN": "api.token",
    f"{ENV_PREFIX}_API_TIMEOUT": "api.timeout",
    f"{ENV_PREFIX}_UI_REFRESH_INTERVAL": "ui.refresh_interval",
    f"{ENV_PREFIX}_UI_THEME": "ui.theme",
    f"{ENV_PREFIX}_UI_PAGE_SIZE": "ui.page_size",
    f"{ENV_PREFIX}_LOG_LEVEL": "logging.level",
    f"{ENV_PREFIX}_LOG_FILE": "logging.file",
}

# Accepted as a token fallback, with a deprecation warning.
LEGACY_TOKEN_ENV = f"{ENV_PREFIX}_API_KEY"

DURATION_ENV_KEYS = frozenset({"api.timeout", "ui.refresh_interval"})


def config_dir() -> Path:
    return Path.home() / ".config" / CONFIG_DIR_NAME


def default_config_path() -> Path:
    """Location ``save_config`` writes to when no path is given."""
    return config_dir() / CONFIG_FILENAME


def default_log_path() -> Path:
    return config_dir() / LOG_FILENAME


def config_search_paths() -> list[Path]:
    """Candidate files, first existing one wins."""
    return [
        default_config_path(),
        Path.home() / HOME_CONFIG_FILENAME,
        Path.cwd() / CONFIG_FILENAME,
    ]
