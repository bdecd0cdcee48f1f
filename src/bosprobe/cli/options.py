"""Typer option declarations and normalization helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Final

import typer

from bosprobe.config.settings import SUPPORTED_LOCALES

LOG_LEVEL_CHOICES: Final[list[str]] = sorted(
    name
    for name, value in logging.getLevelNamesMapping().items()
    if isinstance(name, str) and not name.isdigit()
)
LOG_LEVEL_SET: Final[set[str]] = {choice.upper() for choice in LOG_LEVEL_CHOICES}

ConfigPathOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="Path to a bosprobe configuration TOML file to load",
        envvar="BOSPROBE_CONFIG",
        show_envvar=True,
        rich_help_panel="Configuration",
    ),
]

LocaleOption = Annotated[
    str | None,
    typer.Option(
        "--locale",
        help="Language of the report and suggestions (en or zh)",
        envvar="BOSPROBE_LOCALE",
        show_envvar=True,
        rich_help_panel="Configuration",
    ),
]

DebugOption = Annotated[
    bool | None,
    typer.Option(
        "--debug/--no-debug",
        help="Enable verbose diagnostics",
        rich_help_panel="Diagnostics",
    ),
]

LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Logging level (e.g. INFO, DEBUG)",
        envvar="BOSPROBE_LOG_LEVEL",
        show_envvar=True,
        rich_help_panel="Logging",
    ),
]

AccessKeyOption = Annotated[
    str | None,
    typer.Option(
        "-a",
        "--ak",
        help="Access key (falls back to BCE_ACCESS_KEY_ID, then the config file)",
        rich_help_panel="Authentication",
    ),
]

SecretKeyOption = Annotated[
    str | None,
    typer.Option(
        "-s",
        "--sk",
        help="Secret key (falls back to BCE_SECRET_ACCESS_KEY, then the config file)",
        rich_help_panel="Authentication",
    ),
]

EndpointOption = Annotated[
    str | None,
    typer.Option(
        "-e",
        "--endpoint",
        help="Service endpoint; discovered from the bucket when omitted",
        rich_help_panel="Target",
    ),
]

BucketOption = Annotated[
    str | None,
    typer.Option("-b", "--bucket", help="Bucket name", rich_help_panel="Target"),
]

ObjectOption = Annotated[
    str | None,
    typer.Option("-o", "--object", help="Object name", rich_help_panel="Target"),
]

UploadSourceOption = Annotated[
    str | None,
    typer.Option(
        "-f",
        "--from",
        help="Local file to upload; 1 MiB of random data is sent when omitted",
        rich_help_panel="Target",
    ),
]

DownloadSourceOption = Annotated[
    str | None,
    typer.Option(
        "-f",
        "--from",
        help="URL to download instead of a bucket object",
        rich_help_panel="Target",
    ),
]

DownloadTargetOption = Annotated[
    str | None,
    typer.Option(
        "-t",
        "--to",
        help="Local file or directory to download into",
        rich_help_panel="Target",
    ),
]


def clean_string(value: str | None) -> str | None:
    """Normalize optional string input."""

    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def normalize_locale(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip().lower()
    if not candidate:
        return None
    if candidate not in SUPPORTED_LOCALES:
        raise typer.BadParameter(
            f"Locale must be one of: {', '.join(sorted(SUPPORTED_LOCALES))}",
            param_hint="--locale",
        )
    return candidate


def normalize_log_level(value: str | None) -> str | None:
    """Normalize the log level option."""

    if value is None:
        return None
    candidate = value.strip().upper()
    if not candidate:
        return None
    if candidate not in LOG_LEVEL_SET:
        raise typer.BadParameter(
            f"Log level must be one of: {', '.join(LOG_LEVEL_CHOICES)}",
            param_hint="--log-level",
        )
    return candidate


__all__ = [
    "AccessKeyOption",
    "BucketOption",
    "ConfigPathOption",
    "DebugOption",
    "DownloadSourceOption",
    "DownloadTargetOption",
    "EndpointOption",
    "LOG_LEVEL_CHOICES",
    "LocaleOption",
    "LogLevelOption",
    "ObjectOption",
    "SecretKeyOption",
    "UploadSourceOption",
    "clean_string",
    "normalize_locale",
    "normalize_log_level",
]
