"""Dataclasses carrying normalized CLI input."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthOverrides:
    access_key: str | None = field(default=None, repr=False)
    secret_key: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class LoggingOverrides:
    level: str | None = None


@dataclass(frozen=True)
class ProbeOverrides:
    locale: str | None = None
    debug: bool | None = None


@dataclass(frozen=True)
class CliInvocation:
    config_path: str | None
    auth: AuthOverrides
    probe: ProbeOverrides
    logging: LoggingOverrides


__all__ = ["AuthOverrides", "CliInvocation", "LoggingOverrides", "ProbeOverrides"]
