"""Error taxonomy and exception types shared across bosprobe.

Outcome codes are namespaced strings so probe-local, client-local and
service-originated codes can never collide:

``probe.*``
    argument and pipeline conditions detected by the probe itself.
``client.*``
    local resource or client-side failures (files, directories, transport).
``service.*``
    error codes returned by the storage service, prefixed verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bosprobe.integrations.bos.models import ServiceResponse

PROBE_NAMESPACE = "probe"
CLIENT_NAMESPACE = "client"
SERVICE_NAMESPACE = "service"


class ErrorCode(str, Enum):
    PROBE_NOT_CHECKED = "probe.ProbeNotCheck"
    SUCCESS = "probe.CheckSuccess"
    PROBE_INIT_ERROR = "probe.ClientProbeInitError"
    PROBE_INIT_REQUEST_FAILED = "probe.ProbeInitRequestFailed"
    ARGS_NO_BUCKET = "probe.ClientArgsNoBucket"
    ARGS_NO_BUCKET_OR_URL = "probe.ClientArgsNoBucketOrUrl"
    ARGS_BOTH_URL_OBJECT = "probe.ClientArgsBothUrlObjectExist"
    ARGS_BOTH_URL_BUCKET = "probe.ClientArgsBothUrlBucketExist"
    ARGS_BOTH_URL_ENDPOINT = "probe.ClientArgsBothUrlEndpointExist"
    GENERATE_TEMP_FILE_FAILED = "probe.ClientGenerateTempFileFailed"
    PROBE_INTERNAL_ERROR = "probe.ClientProbeInternalError"
    GET_ENDPOINT_OF_BUCKET_FAILED = "probe.ClientGetEndpointOfBucketFailed"
    LIST_OBJECTS_DENIED = "probe.AccessDeniedWhenGetOneObjectName"
    EMPTY_OBJECT_LIST = "probe.ServerReturnEmptyObjectList"

    URL_INVALID = "client.ClientProbeUrlIsInvalid"
    PATH_NOT_EXIST = "client.ClientPathNotExist"
    LOCAL_FILE_NOT_EXIST = "client.ClientLocalFileNotExist"
    OPEN_LOCAL_FILE_FAILED = "client.ClientOpenLocalFileFailed"
    CREATE_DIR_FAILED = "client.ClientCreateDirFailed"
    WRITE_LOCAL_FILE_FAILED = "client.ClientWriteLocalFileFailed"
    INIT_CLIENT_FAILED = "client.ClientInitBosClientFailed"
    CLIENT_ERROR = "client.ClientBceError"

    CONFIG_INVALID = "probe.ConfigInvalid"
    CREDENTIALS_INCOMPLETE = "probe.CredentialsIncomplete"

    def __str__(self) -> str:
        return self.value


def service_code(raw: str) -> str:
    """Namespace a raw service error code (``NoSuchBucket`` -> ``service.NoSuchBucket``)."""

    raw = (raw or "").strip()
    if raw.startswith(f"{SERVICE_NAMESPACE}."):
        return raw
    return f"{SERVICE_NAMESPACE}.{raw or 'Unknown'}"


def code_namespace(code: str) -> str:
    return str(code).split(".", 1)[0] if "." in str(code) else ""


def code_name(code: str) -> str:
    """Return the code without its namespace, as shown to users."""

    return str(code).split(".", 1)[1] if "." in str(code) else str(code)


# Codes the storage service is known to return; used by the message catalogs.
SERVICE_ACCESS_DENIED = service_code("AccessDenied")
SERVICE_MALFORMED_JSON = service_code("MalformedJSON")


class ServiceError(Exception):
    """Error response returned by the storage service."""

    def __init__(
        self,
        code: str,
        message: str = "",
        *,
        status_code: int | None = None,
        request_id: str | None = None,
        response: ServiceResponse | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        self.response = response
        super().__init__(self.__str__())

    def __str__(self) -> str:
        parts = [f"[Code: {self.code}", f"Message: {self.message}"]
        if self.status_code is not None:
            parts.append(f"HTTP Status: {self.status_code}")
        if self.request_id:
            parts.append(f"RequestId: {self.request_id}")
        return "; ".join(parts) + "]"


class ClientError(Exception):
    """Failure that happened before a service response was received."""


class EmptyRegionError(ClientError):
    """The service answered a location query with an empty region."""


@dataclass(slots=True)
class ErrorContext:
    code: str
    details: dict[str, Any] = field(default_factory=dict)


class ProbeError(Exception):
    """Fatal startup error carrying a user-facing message."""

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.PROBE_INIT_ERROR,
        user_message: str | None = None,
        hints: tuple[str, ...] = (),
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.context = ErrorContext(code=code.value, details=dict(details))
        self.user_message = user_message or message
        self.hints = hints


class CredentialError(ProbeError):
    """Credentials could not be obtained or are incomplete."""

    def __init__(self, message: str, *, hints: tuple[str, ...] = (), **details: Any) -> None:
        super().__init__(
            message,
            code=ErrorCode.CREDENTIALS_INCOMPLETE,
            user_message=f"Cannot start probe: {message}",
            hints=hints,
            **details,
        )


__all__ = [
    "CLIENT_NAMESPACE",
    "PROBE_NAMESPACE",
    "SERVICE_ACCESS_DENIED",
    "SERVICE_MALFORMED_JSON",
    "SERVICE_NAMESPACE",
    "ClientError",
    "CredentialError",
    "EmptyRegionError",
    "ErrorCode",
    "ErrorContext",
    "ProbeError",
    "ServiceError",
    "code_name",
    "code_namespace",
    "service_code",
]
