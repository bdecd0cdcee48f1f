"""Common contract of the upload and download checks."""

from __future__ import annotations

import random
import string
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Generic, Protocol, TypeVar

from bosprobe.domain.checks.models import (
    CheckOutcome,
    DownloadRequest,
    ObjectDetail,
    TransferResult,
    UploadRequest,
)
from bosprobe.domain.endpoint.resolver import EndpointResolution, EndpointResolver
from bosprobe.infrastructure.errors import ErrorCode, ServiceError, service_code
from bosprobe.integrations.bos.models import ServiceResponse

RequestT = TypeVar("RequestT", UploadRequest, DownloadRequest)

_ALPHANUMERIC = string.ascii_letters + string.digits


class StorageClient(Protocol):
    def get_bucket_location(self, bucket: str) -> str: ...

    def put_object(
        self,
        bucket: str,
        key: str,
        *,
        data: bytes | None = None,
        path: Path | str | None = None,
    ) -> ServiceResponse: ...

    def get_one_object_from_bucket(self, bucket: str) -> tuple[ServiceResponse, str | None]: ...

    def get_object(self, bucket: str, key: str, destination: Path | str) -> ServiceResponse: ...

    def get_object_from_url(self, url: str, destination: Path | str) -> ServiceResponse: ...


def generate_temp_name(now: datetime | None = None) -> str:
    """``probe<YYYYmmddHHMMSS><0..999>.temp``"""
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return f"probe{stamp}{random.randrange(1000)}.temp"


def random_content(size: int) -> bytes:
    return "".join(random.choices(_ALPHANUMERIC, k=size)).encode("ascii")


def failure_from_exception(
    exc: Exception, response: ServiceResponse | None = None
) -> TransferResult:
    """Map a transfer exception onto an outcome code."""

    if isinstance(exc, ServiceError):
        return TransferResult(
            exc.response or response, None, CheckOutcome(service_code(exc.code), error=exc)
        )
    return TransferResult(response, None, CheckOutcome(ErrorCode.CLIENT_ERROR, error=exc))


def local_failure(code: ErrorCode, exc: BaseException | None) -> TransferResult:
    return TransferResult(None, None, CheckOutcome(code, error=exc))


class CheckStrategy(ABC, Generic[RequestT]):
    """One kind of transfer check.

    The pipeline calls :meth:`validate`, :meth:`request_check`,
    :meth:`resolve_endpoint` and :meth:`execute` in that order, stopping at the
    first non-success code.
    """

    check_type: ClassVar[str]
    request_type: ClassVar[type]

    def __init__(
        self,
        resolver: EndpointResolver | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.resolver = resolver
        self._clock = clock
        self._request: RequestT | None = None

    @property
    def request(self) -> RequestT:
        if self._request is None:
            raise RuntimeError(f"{self.check_type} check has no validated request")
        return self._request

    def validate(self, request: object) -> ErrorCode:
        if not isinstance(request, self.request_type):
            return ErrorCode.PROBE_INIT_REQUEST_FAILED
        self._request = request  # type: ignore[assignment]
        return ErrorCode.SUCCESS

    @abstractmethod
    def request_check(self) -> ErrorCode: ...

    def resolve_endpoint(self, client: StorageClient) -> EndpointResolution:
        if self.resolver is None:
            raise RuntimeError("no endpoint resolver attached")
        request = self.request
        return self.resolver.resolve(
            client,
            bucket=request.bucket,
            endpoint=request.endpoint,
            url=getattr(request, "url", None),
        )

    @abstractmethod
    def execute(self, client: StorageClient) -> TransferResult: ...

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)

    def _success(
        self, response: ServiceResponse | None, name: str, size: int, started: float
    ) -> TransferResult:
        detail = ObjectDetail(name=name, size=size, elapsed_ms=self._elapsed_ms(started))
        return TransferResult(response, detail, CheckOutcome(ErrorCode.SUCCESS, detail=detail))


__all__ = [
    "CheckStrategy",
    "StorageClient",
    "failure_from_exception",
    "generate_temp_name",
    "local_failure",
    "random_content",
]
