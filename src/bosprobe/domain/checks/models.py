"""Value types shared by the upload and download checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from bosprobe.domain.endpoint.resolver import EndpointResolution
from bosprobe.infrastructure.errors import ErrorCode
from bosprobe.integrations.bos.models import ServiceResponse

# Outcome codes are ErrorCode members or ``service.*`` strings.
OutcomeCode = ErrorCode | str


class NetStatus(IntEnum):
    NOT_CHECKED = 0
    REACHABLE = 1
    ENDPOINT_UNREACHABLE = 2
    CLIENT_OFFLINE = 3


@dataclass(frozen=True)
class UploadRequest:
    access_key: str = field(default="", repr=False)
    secret_key: str = field(default="", repr=False)
    endpoint: str = ""
    bucket: str = ""
    object_name: str = ""
    local_path: str = ""


@dataclass(frozen=True)
class DownloadRequest:
    access_key: str = field(default="", repr=False)
    secret_key: str = field(default="", repr=False)
    endpoint: str = ""
    bucket: str = ""
    object_name: str = ""
    local_path: str = ""
    url: str = ""


ProbeRequest = UploadRequest | DownloadRequest


@dataclass(frozen=True)
class ObjectDetail:
    name: str
    size: int
    elapsed_ms: int

    @property
    def speed_mb_per_s(self) -> float:
        if self.elapsed_ms <= 0 or self.size < 0:
            return 0.0
        return self.size / 1048.576 / self.elapsed_ms


@dataclass(frozen=True)
class CheckOutcome:
    code: OutcomeCode
    net_status: NetStatus = NetStatus.NOT_CHECKED
    error: BaseException | None = None
    detail: ObjectDetail | None = None

    @property
    def success(self) -> bool:
        return self.code == ErrorCode.SUCCESS


@dataclass(frozen=True)
class TransferResult:
    response: ServiceResponse | None
    detail: ObjectDetail | None
    outcome: CheckOutcome


__all__ = [
    "CheckOutcome",
    "DownloadRequest",
    "EndpointResolution",
    "NetStatus",
    "ObjectDetail",
    "OutcomeCode",
    "ProbeRequest",
    "TransferResult",
    "UploadRequest",
]
