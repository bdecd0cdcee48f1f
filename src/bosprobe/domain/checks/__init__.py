"""Upload and download check strategies."""

from bosprobe.domain.checks.base import CheckStrategy, StorageClient
from bosprobe.domain.checks.download import DownloadCheck
from bosprobe.domain.checks.models import (
    CheckOutcome,
    DownloadRequest,
    NetStatus,
    ObjectDetail,
    ProbeRequest,
    TransferResult,
    UploadRequest,
)
from bosprobe.domain.checks.upload import UploadCheck

__all__ = [
    "CheckOutcome",
    "CheckStrategy",
    "DownloadCheck",
    "DownloadRequest",
    "NetStatus",
    "ObjectDetail",
    "ProbeRequest",
    "StorageClient",
    "TransferResult",
    "UploadCheck",
    "UploadRequest",
]
