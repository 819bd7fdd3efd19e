"""Configuration system for riven-tui.

Values are resolved in this order (high → low):
1) Environment variables (``RIVEN_API_ENDPOINT``, ``RIVEN_API_TOKEN``, ...)
2) The config file (``--config`` or the first of the search paths that exists)
3) Built-in defaults

Durations accept Go-style strings (``500ms``, ``30s``, ``1m30s``) or plain
numbers of seconds.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import (
    BaseModel,
    BeforeValidator,
    Field,
    PlainSerializer,
    ValidationError,
    field_validator,
)

from riven_tui.config.defaults import (
    DEFAULT_CONFIG,
    DEFAULT_ENDPOINT,
    DEFAULT_PAGE_SIZE,
    DEFAULT_THEME,
    DURATION_ENV_KEYS,
    ENV_OVERRIDES,
    LEGACY_TOKEN_ENV,
    config_search_paths,
    default_config_path,
    default_log_path,
)
from riven_tui.utils.logging import get_logger

logger = get_logger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ConfigError(ValueError):
    """Raised when configuration cannot be loaded or is invalid."""


def parse_duration(value: Any) -> float:
    """Convert a duration string or number to seconds.

    Raises:
        ValueError: If the value is not a recognised duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")
    try:
        return float(text)
    except ValueError:
        pass
    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def format_duration(seconds: float) -> str:
    if seconds < 1:
        return f"{round(seconds * 1000)}ms"
    whole = int(seconds)
    if whole != seconds:
        return f"{seconds:g}s"
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)


Duration = Annotated[
    float,
    BeforeValidator(parse_duration),
    PlainSerializer(format_duration, return_type=str, when_used="json"),
]


def _positive(value: float) -> float:
    if value <= 0:
        raise ValueError("must be greater than zero")
    return value


class ApiSettings(BaseModel):
    endpoint: str = Field(default=DEFAULT_ENDPOINT)
    token: str = Field(default="")
    timeout: Duration = Field(default=30.0)

    @field_validator("timeout")
    @classmethod
    def _timeout_positive(cls, value: float) -> float:
        return _positive(value)

    @field_validator("endpoint")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")


class UISettings(BaseModel):
    refresh_interval: Duration = Field(default=5.0)
    theme: str = Field(default=DEFAULT_THEME)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE)
    dashboard_refresh: Duration = Field(default=30.0)
    items_refresh: Duration = Field(default=30.0)
    detail_refresh: Duration = Field(default=30.0)
    settings_refresh: Duration = Field(default=60.0)
    toast_seconds: Duration = Field(default=4.0)
    max_events: int = Field(default=100, ge=1)

    @field_validator(
        "refresh_interval",
        "dashboard_refresh",
        "items_refresh",
        "detail_refresh",
        "settings_refresh",
        "toast_seconds",
    )
    @classmethod
    def _interval_positive(cls, value: float) -> float:
        return _positive(value)

    @field_validator("page_size", mode="before")
    @classmethod
    def _page_size_fallback(cls, value: Any) -> int:
        try:
            size = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PAGE_SIZE
        return size if size > 0 else DEFAULT_PAGE_SIZE


class LoggingSettings(BaseModel):
    level: str = Field(default="info")
    format: str = Field(default="text")
    file: str = Field(default="")

    @property
    def path(self) -> Path:
        return Path(self.file).expanduser() if self.file else default_log_path()


class Settings(BaseModel):
    api: ApiSettings = Field(default_factory=ApiSettings)
    ui: UISettings = Field(default_factory=UISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        return cls.model_validate(data)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base, returning a new dict."""

    result = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML config at {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _set_nested(target: dict[str, Any], key_path: str, value: Any) -> None:
    parts = key_path.split(".")
    current = target
    for key in parts[:-1]:
        current = current.setdefault(key, {})
    current[parts[-1]] = value


def _format_errors(exc: ValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        lines.append(f"{location}: {error['msg']}")
    return "; ".join(lines)


class ConfigService:
    """Locates, merges, validates and persists riven-tui configuration."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self.environ = os.environ if environ is None else environ
        self.source: Path | None = None
        self.warnings: list[str] = []

    def load(self, path: str | Path | None = None) -> Settings:
        """Build settings from defaults, the config file and the environment.

        Args:
            path: Explicit config file. Must exist when given.

        Raises:
            ConfigError: On unreadable files, legacy keys or invalid values.
        """
        self.warnings = []
        self.source = self._resolve_path(path)

        data = DEFAULT_CONFIG
        if self.source is not None:
            file_data = _load_yaml(self.source)
            self._reject_legacy_keys(file_data)
            data = _deep_merge(data, file_data)
            logger.info("config_loaded", path=str(self.source))
        else:
            logger.info("config_defaults", reason="no config file found")

        data = _deep_merge(data, self._env_overrides())

        try:
            settings = Settings.from_dict(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {_format_errors(exc)}") from exc

        if not settings.api.endpoint:
            raise ConfigError("API endpoint is required (api.endpoint or RIVEN_API_ENDPOINT)")
        if not settings.api.token:
            raise ConfigError("API token is required (api.token or RIVEN_API_TOKEN)")
        return settings

    def _resolve_path(self, path: str | Path | None) -> Path | None:
        if path is not None:
            explicit = Path(path).expanduser()
            if not explicit.is_file():
                raise ConfigError(f"Config file not found: {explicit}")
            return explicit
        for candidate in config_search_paths():
            if candidate.is_file():
                return candidate
        return None

    def _reject_legacy_keys(self, data: dict[str, Any]) -> None:
        api = data.get("api")
        if isinstance(api, dict) and "api_key" in api:
            raise ConfigError(
                f"{self.source}: 'api.api_key' is no longer supported, "
                "rename it to 'api.token'"
            )

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for env_name, key_path in ENV_OVERRIDES.items():
            raw_value = self.environ.get(env_name)
            if raw_value is None or raw_value == "":
                continue
            if key_path in DURATION_ENV_KEYS:
                try:
                    parse_duration(raw_value)
                except ValueError:
                    logger.warning("invalid_env_duration", variable=env_name, value=raw_value)
                    continue
            _set_nested(overrides, key_path, raw_value)

        legacy = self.environ.get(LEGACY_TOKEN_ENV)
        if legacy:
            message = f"{LEGACY_TOKEN_ENV} is deprecated, use RIVEN_API_TOKEN instead"
            self.warnings.append(message)
            logger.warning("deprecated_env", variable=LEGACY_TOKEN_ENV)
            overrides.setdefault("api", {}).setdefault("token", legacy)
        return overrides


def load_config(path: str | Path | None = None) -> Settings:
    return ConfigService().load(path)


def save_config(settings: Settings, path: str | Path | None = None) -> Path:
    """Write settings as YAML, creating parent directories."""
    target = Path(path).expanduser() if path is not None else default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(settings.model_dump(mode="json"), handle, sort_keys=False)
    return target
