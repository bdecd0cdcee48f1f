"""BCE v1 request signing as an :class:`httpx.Auth` flow.

The authorization header has the form::

    bce-auth-v1/{ak}/{timestamp}/{expiration}/{signed-headers}/{signature}

where the signing key is ``HMAC-SHA256-HEX(sk, auth-prefix)`` and the
signature is ``HMAC-SHA256-HEX(signing-key, canonical-request)``.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable, Generator, Iterable
from datetime import UTC, datetime
from urllib.parse import quote

import httpx

AUTH_VERSION = "bce-auth-v1"
DEFAULT_EXPIRATION_SECONDS = 1800
BCE_DATE_HEADER = "x-bce-date"

_SIGNED_STANDARD_HEADERS = frozenset({"host", "content-length", "content-type", "content-md5"})


def uri_encode(value: str, *, keep_slash: bool = False) -> str:
    safe = "-_.~/" if keep_slash else "-_.~"
    return quote(value, safe=safe)


def canonical_uri(path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return uri_encode(path, keep_slash=True)


def canonical_query(params: Iterable[tuple[str, str]]) -> str:
    pairs = sorted(
        f"{uri_encode(key)}={uri_encode(value)}"
        for key, value in params
        if key.lower() != "authorization"
    )
    return "&".join(pairs)


def canonical_headers(headers: Iterable[tuple[str, str]]) -> tuple[str, str]:
    """Return ``(canonical_headers, signed_headers)`` for the signable subset."""

    selected: dict[str, str] = {}
    for name, value in headers:
        lowered = name.strip().lower()
        stripped = value.strip()
        if not stripped:
            continue
        if lowered in _SIGNED_STANDARD_HEADERS or lowered.startswith("x-bce-"):
            selected[lowered] = stripped
    lines = sorted(f"{uri_encode(name)}:{uri_encode(value)}" for name, value in selected.items())
    return "\n".join(lines), ";".join(sorted(selected))


def _hmac_hex(key: str, message: str) -> str:
    return hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


class BceSigner(httpx.Auth):
    def __init__(
        self,
        access_key: str,
        secret_key: str,
        *,
        expiration_seconds: int = DEFAULT_EXPIRATION_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._access_key = access_key
        self._secret_key = secret_key
        self._expiration = expiration_seconds
        self._clock = clock or (lambda: datetime.now(UTC))

    def _timestamp(self) -> str:
        return self._clock().strftime("%Y-%m-%dT%H:%M:%SZ")

    def sign(
        self,
        method: str,
        path: str,
        params: Iterable[tuple[str, str]],
        headers: Iterable[tuple[str, str]],
        *,
        timestamp: str | None = None,
    ) -> str:
        timestamp = timestamp or self._timestamp()
        prefix = f"{AUTH_VERSION}/{self._access_key}/{timestamp}/{self._expiration}"
        signing_key = _hmac_hex(self._secret_key, prefix)
        header_block, signed = canonical_headers(headers)
        canonical_request = "\n".join(
            [method.upper(), canonical_uri(path), canonical_query(params), header_block]
        )
        return f"{prefix}/{signed}/{_hmac_hex(signing_key, canonical_request)}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        timestamp = self._timestamp()
        request.headers.setdefault(BCE_DATE_HEADER, timestamp)
        request.headers["Authorization"] = self.sign(
            request.method,
            request.url.path,
            request.url.params.multi_items(),
            request.headers.items(),
            timestamp=timestamp,
        )
        yield request


__all__ = [
    "AUTH_VERSION",
    "BCE_DATE_HEADER",
    "BceSigner",
    "canonical_headers",
    "canonical_query",
    "canonical_uri",
    "uri_encode",
]
