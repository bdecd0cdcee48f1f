"""Endpoint resolution: explicit override, URL host, cache, then live lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlsplit

from bosprobe.domain.endpoint.cache import EndpointCache
from bosprobe.domain.endpoint.regions import RegionDomains
from bosprobe.infrastructure.errors import ClientError, ErrorCode, ServiceError
from bosprobe.infrastructure.logging import get_logger, log_event

BUCKET_CACHE_EXPIRE = 3600

SOURCE_EXPLICIT = "explicit"
SOURCE_URL = "url"
SOURCE_CACHE = "cache"
SOURCE_SERVICE = "service"

_LOGGER = get_logger("bosprobe.endpoint")


class LocationClient(Protocol):
    def get_bucket_location(self, bucket: str) -> str: ...


@dataclass(frozen=True)
class EndpointResolution:
    endpoint: str = ""
    code: ErrorCode = ErrorCode.SUCCESS
    error: Exception | None = None
    source: str = ""

    @property
    def ok(self) -> bool:
        return self.code is ErrorCode.SUCCESS


def host_from_url(url: str) -> str | None:
    """Return ``host[:port]`` of ``url`` or ``None`` if it has none."""

    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return None
    if not hostname:
        return None
    return f"{hostname}:{port}" if port else hostname


class EndpointResolver:
    def __init__(
        self,
        cache: EndpointCache,
        domains: RegionDomains,
        *,
        ttl_seconds: int = BUCKET_CACHE_EXPIRE,
    ) -> None:
        self._cache = cache
        self._domains = domains
        self._ttl = ttl_seconds

    def resolve(
        self,
        client: LocationClient,
        *,
        bucket: str | None,
        endpoint: str | None = None,
        url: str | None = None,
    ) -> EndpointResolution:
        if endpoint:
            return EndpointResolution(endpoint, source=SOURCE_EXPLICIT)

        if url:
            host = host_from_url(url)
            if host is None:
                return EndpointResolution(
                    code=ErrorCode.URL_INVALID,
                    error=ValueError(f"cannot get host from url: {url}"),
                )
            return EndpointResolution(host, source=SOURCE_URL)

        if not bucket:
            return EndpointResolution(
                code=ErrorCode.ARGS_NO_BUCKET_OR_URL,
                error=ValueError("bucket name is empty"),
            )

        cached, found = self._cache.get(bucket)
        if found:
            return EndpointResolution(cached, source=SOURCE_CACHE)

        try:
            region = client.get_bucket_location(bucket)
        except (ServiceError, ClientError) as exc:
            log_event(
                _LOGGER,
                "endpoint.lookup_failed",
                level=logging.INFO,
                bucket=bucket,
                error=str(exc),
            )
            return EndpointResolution(code=ErrorCode.GET_ENDPOINT_OF_BUCKET_FAILED, error=exc)

        resolved = self._domains.resolve(region)
        log_event(
            _LOGGER,
            "endpoint.resolved",
            level=logging.DEBUG,
            bucket=bucket,
            region=region,
            endpoint=resolved,
        )
        self._cache.put(bucket, resolved, self._ttl)
        return EndpointResolution(resolved, source=SOURCE_SERVICE)


__all__ = [
    "BUCKET_CACHE_EXPIRE",
    "EndpointResolution",
    "EndpointResolver",
    "LocationClient",
    "host_from_url",
]
