"""Dynaconf-backed configuration helpers for bosprobe."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf

from bosprobe.config.constants import (
    DEFAULT_CACHE_FILENAME,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILENAME,
    LOCAL_CONFIG_FILENAME,
    coerce_bool,
    coerce_positive_int,
)

DEFAULT_REFERENCE_HOST = "www.baidu.com"
DEFAULT_ENDPOINT = "bj.bcebos.com"
DEFAULT_LOCALE = "en"
SUPPORTED_LOCALES = frozenset({"en", "zh"})
DEFAULT_PING_COUNT = 5
DEFAULT_TRACEROUTE_MAX_HOPS = 15
DEFAULT_CACHE_TTL = 3600

LOG_FORMAT_TEXT = "text"
LOG_FORMAT_JSON = "json"
DEFAULT_LOG_FORMAT = LOG_FORMAT_TEXT
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_MAX_BYTES = 10_000_000
DEFAULT_BACKUP_COUNT = 5

CREDENTIALS_ACCESS_KEY_KEY = "credentials.access_key"
CREDENTIALS_SECRET_KEY_KEY = "credentials.secret_key"

PROBE_LOCALE_KEY = "probe.locale"
PROBE_REFERENCE_HOST_KEY = "probe.reference_host"
PROBE_DEFAULT_ENDPOINT_KEY = "probe.default_endpoint"
PROBE_USE_HTTPS_KEY = "probe.use_https"
PROBE_PING_COUNT_KEY = "probe.ping_count"
PROBE_TRACEROUTE_MAX_HOPS_KEY = "probe.traceroute_max_hops"
PROBE_CACHE_FILE_KEY = "probe.cache_file"
PROBE_CACHE_TTL_KEY = "probe.cache_ttl"
PROBE_LOG_DIR_KEY = "probe.log_dir"
PROBE_DEBUG_KEY = "probe.debug"

DOMAINS_KEY = "domains"

LOGGING_LEVEL_KEY = "logging.level"
LOGGING_FORMAT_KEY = "logging.format"
LOGGING_FILE_KEY = "logging.file"
LOGGING_MAX_BYTES_KEY = "logging.max_bytes"
LOGGING_BACKUP_COUNT_KEY = "logging.backup_count"

# Credentials are resolved by the credential chain, not through this map.
_ENVIRONMENT_MAP = {
    "BOSPROBE_LOCALE": PROBE_LOCALE_KEY,
    "BOSPROBE_REFERENCE_HOST": PROBE_REFERENCE_HOST_KEY,
    "BOSPROBE_DEFAULT_ENDPOINT": PROBE_DEFAULT_ENDPOINT_KEY,
    "BOSPROBE_USE_HTTPS": PROBE_USE_HTTPS_KEY,
    "BOSPROBE_CACHE_FILE": PROBE_CACHE_FILE_KEY,
    "BOSPROBE_LOG_DIR": PROBE_LOG_DIR_KEY,
    "BOSPROBE_DEBUG": PROBE_DEBUG_KEY,
    "BOSPROBE_LOG_LEVEL": LOGGING_LEVEL_KEY,
    "BOSPROBE_LOG_FORMAT": LOGGING_FORMAT_KEY,
    "BOSPROBE_LOG_FILE": LOGGING_FILE_KEY,
}


@dataclass(frozen=True)
class ProbeInputs:
    locale: str | None = None
    debug: bool | None = None


@dataclass(frozen=True)
class LoggingInputs:
    level: str | None = None
    format: str | None = None
    file_path: str | None = None


@dataclass(frozen=True)
class LoggingSettings:
    level: int
    format: str
    file_path: str | None
    max_bytes: int
    backup_count: int

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


@dataclass(frozen=True)
class ProbeSettings:
    """Resolved settings for a single probe run."""

    locale: str = DEFAULT_LOCALE
    reference_host: str = DEFAULT_REFERENCE_HOST
    default_endpoint: str = DEFAULT_ENDPOINT
    use_https: bool = False
    ping_count: int = DEFAULT_PING_COUNT
    traceroute_max_hops: int = DEFAULT_TRACEROUTE_MAX_HOPS
    cache_file: Path = DEFAULT_CONFIG_DIR / DEFAULT_CACHE_FILENAME
    cache_ttl: int = DEFAULT_CACHE_TTL
    log_dir: Path = Path(".")
    debug: bool = False
    warnings: tuple[str, ...] = field(default=(), compare=False)


def _default_settings_files(config_path: str | None) -> tuple[Sequence[str], str | None]:
    if config_path:
        config_file = Path(config_path)
        local_file = config_file.with_name(f"{config_file.stem}.local{config_file.suffix}")
        files: list[str] = []
        if config_file.exists():
            files.append(str(config_file))
        if local_file.exists():
            files.append(str(local_file))
        return files or [str(config_file)], None
    root = DEFAULT_CONFIG_DIR.expanduser()
    return [DEFAULT_CONFIG_FILENAME, LOCAL_CONFIG_FILENAME], str(root)


def _coerce_str(value: Any | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        candidate = value.strip()
        return candidate or None
    return str(value)


def _apply_environment_overrides(settings: Dynaconf) -> None:
    for env_var, key in _ENVIRONMENT_MAP.items():
        raw = os.getenv(env_var)
        if raw is None or not raw.strip():
            continue
        settings.set(key, raw)


def load_settings(config_path: str | None = None) -> Dynaconf:
    """Create a Dynaconf instance configured for the supplied path."""

    files, root_path = _default_settings_files(config_path)
    settings = Dynaconf(
        settings_files=list(files),
        envvar_prefix="BOSPROBE",
        environments=False,
        load_dotenv=True,
        merge_enabled=True,
        root_path=root_path,
    )
    _apply_environment_overrides(settings)
    return settings


def apply_cli_overrides(
    settings: Dynaconf,
    *,
    probe_inputs: ProbeInputs | None = None,
    logging_inputs: LoggingInputs | None = None,
) -> None:
    """Apply CLI overrides to the provided settings instance."""

    if probe_inputs is not None:
        if probe_inputs.locale is not None:
            settings.set(PROBE_LOCALE_KEY, probe_inputs.locale.strip())
        if probe_inputs.debug is not None:
            settings.set(PROBE_DEBUG_KEY, probe_inputs.debug)

    if logging_inputs is not None:
        if logging_inputs.level is not None:
            settings.set(LOGGING_LEVEL_KEY, logging_inputs.level.strip())
        if logging_inputs.format is not None:
            settings.set(LOGGING_FORMAT_KEY, logging_inputs.format.strip())
        if logging_inputs.file_path is not None:
            settings.set(LOGGING_FILE_KEY, logging_inputs.file_path.strip())


def _resolve_locale(settings: Dynaconf, warnings: list[str]) -> str:
    raw_locale = _coerce_str(settings.get(PROBE_LOCALE_KEY)) or DEFAULT_LOCALE
    normalized = raw_locale.lower()
    if normalized not in SUPPORTED_LOCALES:
        warnings.append(f"Unknown locale '{raw_locale}' requested; defaulting to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE
    return normalized


def _resolve_positive(settings: Dynaconf, key: str, default: int, warnings: list[str]) -> int:
    raw = settings.get(key)
    value = coerce_positive_int(raw, default=default)
    if raw is not None and value == default and str(raw).strip() != str(default):
        warnings.append(f"Invalid {key} value {raw!r}; using {default}")
    return value


def _resolve_endpoint(settings: Dynaconf, warnings: list[str]) -> str:
    raw = _coerce_str(settings.get(PROBE_DEFAULT_ENDPOINT_KEY)) or DEFAULT_ENDPOINT
    if "://" in raw:
        warnings.append("probe.default_endpoint must not include a scheme; stripping it")
        raw = raw.split("://", 1)[1]
    return raw.rstrip("/")


def probe_from_settings(settings: Dynaconf) -> ProbeSettings:
    """Extract probe settings and validation messages from Dynaconf."""

    warnings: list[str] = []

    cache_file_value = _coerce_str(settings.get(PROBE_CACHE_FILE_KEY))
    cache_file = (
        Path(cache_file_value).expanduser()
        if cache_file_value
        else (DEFAULT_CONFIG_DIR / DEFAULT_CACHE_FILENAME).expanduser()
    )
    log_dir_value = _coerce_str(settings.get(PROBE_LOG_DIR_KEY))

    return ProbeSettings(
        locale=_resolve_locale(settings, warnings),
        reference_host=_coerce_str(settings.get(PROBE_REFERENCE_HOST_KEY)) or DEFAULT_REFERENCE_HOST,
        default_endpoint=_resolve_endpoint(settings, warnings),
        use_https=coerce_bool(settings.get(PROBE_USE_HTTPS_KEY), default=False),
        ping_count=_resolve_positive(settings, PROBE_PING_COUNT_KEY, DEFAULT_PING_COUNT, warnings),
        traceroute_max_hops=_resolve_positive(
            settings, PROBE_TRACEROUTE_MAX_HOPS_KEY, DEFAULT_TRACEROUTE_MAX_HOPS, warnings
        ),
        cache_file=cache_file,
        cache_ttl=_resolve_positive(settings, PROBE_CACHE_TTL_KEY, DEFAULT_CACHE_TTL, warnings),
        log_dir=Path(log_dir_value).expanduser() if log_dir_value else Path("."),
        debug=coerce_bool(settings.get(PROBE_DEBUG_KEY), default=False),
        warnings=tuple(warnings),
    )


def region_domains_from_settings(settings: Dynaconf) -> dict[str, str]:
    """Return the configured ``[domains]`` table as ``region -> domain``."""

    raw = settings.get(DOMAINS_KEY)
    if not isinstance(raw, Mapping):
        return {}
    domains: dict[str, str] = {}
    for region, value in raw.items():
        # Entries may be written either as ``bj = "bj.bcebos.com"`` or as a
        # nested ``[domains.bj] endpoint = "..."`` table.
        if isinstance(value, Mapping):
            value = value.get("endpoint")
        domain = _coerce_str(value)
        if domain:
            domains[str(region).lower()] = domain
    return domains


def credentials_from_settings(settings: Dynaconf) -> tuple[str | None, str | None]:
    """Return the ``(access_key, secret_key)`` pair stored in configuration."""

    return (
        _coerce_str(settings.get(CREDENTIALS_ACCESS_KEY_KEY)),
        _coerce_str(settings.get(CREDENTIALS_SECRET_KEY_KEY)),
    )


def logging_from_settings(settings: Dynaconf) -> LoggingSettings:
    """Extract logging configuration from Dynaconf."""

    level_value = _coerce_str(settings.get(LOGGING_LEVEL_KEY)) or DEFAULT_LOG_LEVEL
    format_value = (_coerce_str(settings.get(LOGGING_FORMAT_KEY)) or DEFAULT_LOG_FORMAT).lower()
    if format_value not in {LOG_FORMAT_TEXT, LOG_FORMAT_JSON}:
        raise ValueError(f"Unsupported log format: {format_value}")

    mapping = logging.getLevelNamesMapping()
    level_upper = level_value.upper()
    if level_upper.isdigit():
        resolved_level = int(level_upper)
    else:
        resolved_level = mapping.get(level_upper, logging.WARNING)

    return LoggingSettings(
        level=resolved_level,
        format=format_value,
        file_path=_coerce_str(settings.get(LOGGING_FILE_KEY)),
        max_bytes=coerce_positive_int(settings.get(LOGGING_MAX_BYTES_KEY), default=DEFAULT_MAX_BYTES),
        backup_count=coerce_positive_int(
            settings.get(LOGGING_BACKUP_COUNT_KEY), default=DEFAULT_BACKUP_COUNT
        ),
    )


__all__ = [
    "DEFAULT_CACHE_TTL",
    "DEFAULT_ENDPOINT",
    "DEFAULT_LOCALE",
    "DEFAULT_LOG_FORMAT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PING_COUNT",
    "DEFAULT_REFERENCE_HOST",
    "DEFAULT_TRACEROUTE_MAX_HOPS",
    "LOG_FORMAT_JSON",
    "LOG_FORMAT_TEXT",
    "SUPPORTED_LOCALES",
    "LoggingInputs",
    "LoggingSettings",
    "ProbeInputs",
    "ProbeSettings",
    "apply_cli_overrides",
    "credentials_from_settings",
    "load_settings",
    "logging_from_settings",
    "probe_from_settings",
    "region_domains_from_settings",
]
