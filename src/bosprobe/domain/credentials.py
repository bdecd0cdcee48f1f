"""Access key resolution: explicit flags, then environment, then config file."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from bosprobe.infrastructure.errors import CredentialError

ACCESS_KEY_ENV = "BCE_ACCESS_KEY_ID"
SECRET_KEY_ENV = "BCE_SECRET_ACCESS_KEY"


@dataclass(frozen=True)
class Credentials:
    access_key: str
    secret_key: str = field(repr=False)
    source: str = ""


class CredentialProvider(Protocol):
    name: str

    def pair(self) -> tuple[str | None, str | None]: ...


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


@dataclass(frozen=True)
class StaticProvider:
    name: str
    access_key: str | None = None
    secret_key: str | None = field(default=None, repr=False)

    def pair(self) -> tuple[str | None, str | None]:
        return _clean(self.access_key), _clean(self.secret_key)


class EnvironmentProvider:
    name = "environment"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ

    def pair(self) -> tuple[str | None, str | None]:
        return _clean(self._environ.get(ACCESS_KEY_ENV)), _clean(self._environ.get(SECRET_KEY_ENV))


class CredentialChain:
    """First provider holding a complete pair wins.

    A provider holding only half of a pair raises :class:`CredentialError`
    instead of falling through to the next one.
    """

    def __init__(self, providers: Iterable[CredentialProvider]) -> None:
        self._providers = tuple(providers)

    def resolve(self) -> Credentials | None:
        for provider in self._providers:
            access_key, secret_key = provider.pair()
            if access_key and secret_key:
                return Credentials(access_key, secret_key, provider.name)
            if access_key or secret_key:
                missing = "secret key" if access_key else "access key"
                raise CredentialError(
                    f"{provider.name} credentials are incomplete: {missing} is missing",
                    hints=("Provide both --ak and --sk, or neither for anonymous access",),
                    source=provider.name,
                )
        return None


def default_chain(
    *,
    access_key: str | None,
    secret_key: str | None,
    configured: tuple[str | None, str | None] = (None, None),
    environ: Mapping[str, str] | None = None,
) -> CredentialChain:
    return CredentialChain(
        [
            StaticProvider("command line", access_key, secret_key),
            EnvironmentProvider(environ),
            StaticProvider("config file", *configured),
        ]
    )


__all__ = [
    "ACCESS_KEY_ENV",
    "SECRET_KEY_ENV",
    "CredentialChain",
    "CredentialProvider",
    "Credentials",
    "EnvironmentProvider",
    "StaticProvider",
    "default_chain",
]
