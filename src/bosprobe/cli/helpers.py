"""Reusable helper utilities for the bosprobe CLI."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from dynaconf import Dynaconf

from bosprobe.cli import options as cli_options
from bosprobe.cli.models import AuthOverrides, CliInvocation, LoggingOverrides, ProbeOverrides
from bosprobe.config.settings import (
    LoggingInputs,
    LoggingSettings,
    ProbeInputs,
    ProbeSettings,
    apply_cli_overrides,
    credentials_from_settings,
    load_settings,
    logging_from_settings,
    probe_from_settings,
)
from bosprobe.domain.credentials import Credentials, default_chain
from bosprobe.infrastructure.errors import ErrorCode, ProbeError
from bosprobe.infrastructure.logging import BoundLogger, configure_logging, get_logger
from bosprobe.infrastructure.net_tools import NetTools
from bosprobe.integrations.bos import BosClient


def build_invocation(
    *,
    config_path: Path | str | None,
    access_key: str | None = None,
    secret_key: str | None = None,
    locale: str | None = None,
    debug: bool | None = None,
    log_level: str | None = None,
) -> CliInvocation:
    """Construct a :class:`CliInvocation` with normalized CLI parameters."""

    return CliInvocation(
        config_path=str(config_path) if config_path is not None else None,
        auth=AuthOverrides(
            access_key=cli_options.clean_string(access_key),
            secret_key=cli_options.clean_string(secret_key),
        ),
        probe=ProbeOverrides(locale=cli_options.normalize_locale(locale), debug=debug),
        logging=LoggingOverrides(level=cli_options.normalize_log_level(log_level)),
    )


def probe_inputs(overrides: ProbeOverrides) -> ProbeInputs | None:
    if overrides.locale is None and overrides.debug is None:
        return None
    return ProbeInputs(locale=overrides.locale, debug=overrides.debug)


def logging_inputs(overrides: LoggingOverrides) -> LoggingInputs | None:
    if overrides.level is None:
        return None
    return LoggingInputs(level=overrides.level)


def load_settings_from_invocation(invocation: CliInvocation) -> Dynaconf:
    """Load settings and apply CLI overrides.

    An unparseable configuration file surfaces as a :class:`ProbeError` so the
    command can report it and exit with a usage error.
    """

    try:
        settings = load_settings(invocation.config_path)
        apply_cli_overrides(
            settings,
            probe_inputs=probe_inputs(invocation.probe),
            logging_inputs=logging_inputs(invocation.logging),
        )
    except ValueError as exc:
        raise ProbeError(
            f"Invalid configuration: {exc}",
            code=ErrorCode.CONFIG_INVALID,
            config_path=invocation.config_path,
        ) from exc
    return settings


def resolve_probe_and_logging(
    invocation: CliInvocation,
) -> tuple[ProbeSettings, LoggingSettings, Dynaconf]:
    """Resolve probe and logging settings from a CLI invocation."""

    settings = load_settings_from_invocation(invocation)
    try:
        probe_settings = probe_from_settings(settings)
        logging_settings = logging_from_settings(settings)
    except ValueError as exc:
        raise ProbeError(
            f"Invalid configuration: {exc}", code=ErrorCode.CONFIG_INVALID
        ) from exc
    if probe_settings.debug and logging_settings.level > logging.DEBUG:
        logging_settings = replace(logging_settings, level=logging.DEBUG)
    return probe_settings, logging_settings, settings


def resolve_credentials(invocation: CliInvocation, settings: Dynaconf) -> Credentials | None:
    """Walk the credential chain: command line, environment, config file."""

    chain = default_chain(
        access_key=invocation.auth.access_key,
        secret_key=invocation.auth.secret_key,
        configured=credentials_from_settings(settings),
    )
    return chain.resolve()


def initialize_logging(
    probe_settings: ProbeSettings, logging_settings: LoggingSettings
) -> BoundLogger:
    """Configure logging and emit settings warnings."""

    configure_logging(logging_settings)
    logger = get_logger("bosprobe")
    for message in probe_settings.warnings:
        logger.warning(message)
    return logger


def build_client(
    credentials: Credentials | None, probe_settings: ProbeSettings
) -> BosClient:
    if credentials is None:
        return BosClient(
            endpoint=probe_settings.default_endpoint, use_https=probe_settings.use_https
        )
    return BosClient(
        credentials.access_key,
        credentials.secret_key,
        probe_settings.default_endpoint,
        use_https=probe_settings.use_https,
    )


def build_net_tools() -> NetTools:
    return NetTools()


__all__ = [
    "build_client",
    "build_invocation",
    "build_net_tools",
    "initialize_logging",
    "load_settings_from_invocation",
    "logging_inputs",
    "probe_inputs",
    "resolve_credentials",
    "resolve_probe_and_logging",
]
