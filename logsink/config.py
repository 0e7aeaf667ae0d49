"""Configuration module: frozen dataclass loaded from YAML and environment variables."""

import logging
import math
import os
from dataclasses import dataclass, fields

import yaml

from logsink.errors import ConfigError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    log_file_path: str = ""  # empty means console only
    enable_dual_sink: bool = True
    enable_rotation: bool = True
    rotation_interval_seconds: float = 86400.0
    min_log_level: str = "DEBUG"
    max_file_size_bytes: int = 100 * 1024 * 1024  # 100 MB
    max_backups: int = 0  # 0 keeps every backup
    max_age_days: int = 0  # 0 disables age-based purge
    compression_enabled: bool = False

    def validate(self) -> "Config":
        if not math.isfinite(self.rotation_interval_seconds) or self.rotation_interval_seconds <= 0:
            raise ConfigError(
                f"rotation_interval_seconds must be a positive finite number, got {self.rotation_interval_seconds}"
            )
        if self.min_log_level not in LOG_LEVELS:
            raise ConfigError(
                f"min_log_level must be one of {', '.join(LOG_LEVELS)}, got {self.min_log_level!r}"
            )
        if self.max_file_size_bytes <= 0:
            raise ConfigError(f"max_file_size_bytes must be positive, got {self.max_file_size_bytes}")
        if self.max_backups < 0:
            raise ConfigError(f"max_backups must not be negative, got {self.max_backups}")
        if self.max_age_days < 0:
            raise ConfigError(f"max_age_days must not be negative, got {self.max_age_days}")
        return self


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    logger.info("Loaded YAML config from %s", path)
    return {k: v for k, v in data.items() if k in known}


def _max_file_size(yaml_data: dict) -> int:
    # MAX_FILE_SIZE_BYTES takes precedence over MAX_FILE_SIZE_MB
    raw_bytes = os.environ.get("MAX_FILE_SIZE_BYTES")
    raw_mb = os.environ.get("MAX_FILE_SIZE_MB")
    if raw_bytes is not None:
        return int(raw_bytes)
    if raw_mb is not None:
        return int(float(raw_mb) * 1024 * 1024)
    return int(yaml_data.get("max_file_size_bytes", Config.max_file_size_bytes))


def load_config(yaml_data: dict | None = None) -> Config:
    """Build a validated Config: defaults, then YAML data, then environment variables."""
    yaml_data = yaml_data or {}

    def pick(env_key: str, field_name: str):
        return os.environ.get(env_key, yaml_data.get(field_name, getattr(Config, field_name)))

    # LOG_NOT_STDERR / LOG_NOT_ROTATE switch features off
    not_stderr = os.environ.get("LOG_NOT_STDERR")
    if not_stderr is not None:
        enable_dual_sink = not _parse_bool(not_stderr)
    else:
        enable_dual_sink = _parse_bool(yaml_data.get("enable_dual_sink", Config.enable_dual_sink))

    not_rotate = os.environ.get("LOG_NOT_ROTATE")
    if not_rotate is not None:
        enable_rotation = not _parse_bool(not_rotate)
    else:
        enable_rotation = _parse_bool(yaml_data.get("enable_rotation", Config.enable_rotation))

    # LOG_LEVEL_INFO raises the floor to INFO unless MIN_LOG_LEVEL is set
    min_log_level = pick("MIN_LOG_LEVEL", "min_log_level")
    if "MIN_LOG_LEVEL" not in os.environ and _parse_bool(os.environ.get("LOG_LEVEL_INFO", "")):
        min_log_level = "INFO"

    try:
        config = Config(
            log_file_path=str(pick("LOG_FILE_PATH", "log_file_path")),
            enable_dual_sink=enable_dual_sink,
            enable_rotation=enable_rotation,
            rotation_interval_seconds=float(
                pick("ROTATION_INTERVAL_SECONDS", "rotation_interval_seconds")
            ),
            min_log_level=str(min_log_level).upper(),
            max_file_size_bytes=_max_file_size(yaml_data),
            max_backups=int(pick("MAX_BACKUPS", "max_backups")),
            max_age_days=int(pick("MAX_AGE_DAYS", "max_age_days")),
            compression_enabled=_parse_bool(pick("COMPRESSION_ENABLED", "compression_enabled")),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc
    return config.validate()
