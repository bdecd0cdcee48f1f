"""Minimal synchronous BOS client built on httpx.

Only the calls the probe needs are implemented. Requests are never retried:
a failed transfer is exactly what the probe is trying to observe.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlsplit

import httpx
from pydantic import ValidationError

from bosprobe.config.settings import DEFAULT_ENDPOINT
from bosprobe.infrastructure.errors import ClientError, EmptyRegionError, ServiceError
from bosprobe.infrastructure.logging import get_logger, log_event
from bosprobe.integrations.bos.auth import BceSigner
from bosprobe.integrations.bos.models import (
    BucketLocation,
    ListObjectsResult,
    ServiceErrorPayload,
    ServiceResponse,
)

PROBE_USER_AGENT = "bce-bos-probe"
DEFAULT_TIMEOUT = 30.0
MALFORMED_JSON_CODE = "MalformedJSON"
_CHUNK_SIZE = 64 * 1024

_LOGGER = get_logger("bosprobe.bos")


def _split_endpoint(endpoint: str, use_https: bool) -> str:
    candidate = endpoint.strip().rstrip("/")
    if "://" in candidate:
        return candidate
    scheme = "https" if use_https else "http"
    return f"{scheme}://{candidate}"


def _quote_key(key: str) -> str:
    return quote(key, safe="/-_.~")


class BosClient:
    def __init__(
        self,
        access_key: str | None = None,
        secret_key: str | None = None,
        endpoint: str = DEFAULT_ENDPOINT,
        *,
        use_https: bool = False,
        transport: httpx.BaseTransport | None = None,
        timeout: float | httpx.Timeout | None = DEFAULT_TIMEOUT,
        user_agent: str = PROBE_USER_AGENT,
    ) -> None:
        self._use_https = use_https
        self._auth = BceSigner(access_key, secret_key or "") if access_key else None
        self._http = httpx.Client(
            transport=transport,
            timeout=timeout,
            headers={"User-Agent": user_agent},
            follow_redirects=False,
        )
        self._base_url = ""
        self.use_endpoint(endpoint)

    @property
    def anonymous(self) -> bool:
        return self._auth is None

    @property
    def endpoint(self) -> str:
        return urlsplit(self._base_url).netloc

    def use_endpoint(self, endpoint: str) -> None:
        """Point subsequent bucket requests at ``endpoint``."""
        self._base_url = _split_endpoint(endpoint or DEFAULT_ENDPOINT, self._use_https)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> BosClient:
        return self

    def __exit__(self, *_exc_info: Any) -> None:
        self.close()

    # -- transport ---------------------------------------------------------

    def _bucket_url(self, bucket: str, key: str | None = None) -> str:
        url = f"{self._base_url}/{quote(bucket, safe='')}"
        if key is not None:
            url += "/" + _quote_key(key)
        return url

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str] | None = None,
        content: Any = None,
        headers: dict[str, str] | None = None,
        signed: bool = True,
        stream: bool = False,
    ) -> httpx.Response:
        request = self._http.build_request(
            method, url, params=params, content=content, headers=headers
        )
        log_event(
            _LOGGER,
            "bos.request",
            level=logging.DEBUG,
            method=method,
            url=str(request.url),
            signed=signed and self._auth is not None,
        )
        try:
            return self._http.send(
                request,
                auth=self._auth if signed and self._auth is not None else None,
                stream=stream,
            )
        except httpx.HTTPError as exc:
            raise ClientError(f"execute http request failed: {exc}") from exc

    def _check(self, response: httpx.Response) -> ServiceResponse:
        service_response = ServiceResponse.from_headers(response.status_code, response.headers)
        if response.status_code < 400:
            return service_response

        body = response.read()
        try:
            payload = ServiceErrorPayload.model_validate_json(body)
        except ValidationError:
            response.close()
            raise ServiceError(
                MALFORMED_JSON_CODE,
                "Service json error message decode failed",
                status_code=response.status_code,
                request_id=service_response.request_id,
                response=service_response,
            ) from None
        response.close()
        raise ServiceError(
            payload.code,
            payload.message,
            status_code=response.status_code,
            request_id=payload.request_id or service_response.request_id,
            response=service_response,
        )

    def _write_body(self, response: httpx.Response, destination: Path) -> None:
        expected = response.headers.get("content-length")
        written = 0
        with destination.open("wb") as handle:
            for chunk in response.iter_bytes(_CHUNK_SIZE):
                handle.write(chunk)
                written += len(chunk)
        if expected is not None and expected.isdigit() and written != int(expected):
            raise ClientError("written content size does not match the response content")

    # -- operations --------------------------------------------------------

    def get_bucket_location(self, bucket: str) -> str:
        """Return the region of ``bucket``; raises :class:`EmptyRegionError` when blank."""

        response = self._send("GET", self._bucket_url(bucket), params={"location": ""})
        self._check(response)
        try:
            location = BucketLocation.model_validate_json(response.content)
        except ValidationError as exc:
            raise ClientError(f"unexpected bucket location payload: {exc}") from exc
        region = location.location_constraint.strip()
        if not region:
            raise EmptyRegionError("get a empty region from bos server")
        return region

    def put_object(
        self,
        bucket: str,
        key: str,
        *,
        data: bytes | None = None,
        path: Path | str | None = None,
    ) -> ServiceResponse:
        if path is None:
            body = data or b""
            response = self._send("PUT", self._bucket_url(bucket, key), content=body)
            return self._check(response)

        source = Path(path)
        size = source.stat().st_size
        with source.open("rb") as handle:
            response = self._send(
                "PUT",
                self._bucket_url(bucket, key),
                content=handle,
                headers={"Content-Length": str(size)},
            )
        return self._check(response)

    def get_one_object_from_bucket(self, bucket: str) -> tuple[ServiceResponse, str | None]:
        """List at most one key; the key is ``None`` when the bucket is empty."""

        response = self._send("GET", self._bucket_url(bucket), params={"maxKeys": "1"})
        service_response = self._check(response)
        try:
            listing = ListObjectsResult.model_validate_json(response.content)
        except ValidationError as exc:
            raise ClientError(f"unexpected object listing payload: {exc}") from exc
        if not listing.contents:
            return service_response, None
        return service_response, listing.contents[0].key

    def get_object(self, bucket: str, key: str, destination: Path | str) -> ServiceResponse:
        response = self._send("GET", self._bucket_url(bucket, key), stream=True)
        try:
            service_response = self._check(response)
            self._write_body(response, Path(destination))
        finally:
            response.close()
        return service_response

    def get_object_from_url(self, url: str, destination: Path | str) -> ServiceResponse:
        """Download ``url`` without signing, as an anonymous browser would."""

        response = self._send("GET", url, signed=False, stream=True)
        try:
            service_response = self._check(response)
            self._write_body(response, Path(destination))
        finally:
            response.close()
        return service_response


__all__ = ["MALFORMED_JSON_CODE", "PROBE_USER_AGENT", "BosClient"]
