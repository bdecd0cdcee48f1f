"""Upload check: put one object and time it."""

from __future__ import annotations

from pathlib import Path

from bosprobe.domain.checks.base import (
    CheckStrategy,
    StorageClient,
    failure_from_exception,
    generate_temp_name,
    local_failure,
    random_content,
)
from bosprobe.domain.checks.models import TransferResult, UploadRequest
from bosprobe.infrastructure.errors import ClientError, ErrorCode, ServiceError

TEMP_FILE_SIZE = 1 << 20
OBJECT_PATH_SEPARATOR = "/"


class UploadCheck(CheckStrategy[UploadRequest]):
    check_type = "upload"
    request_type = UploadRequest

    def request_check(self) -> ErrorCode:
        if not self.request.bucket:
            return ErrorCode.ARGS_NO_BUCKET
        return ErrorCode.SUCCESS

    def execute(self, client: StorageClient) -> TransferResult:
        request = self.request
        data: bytes | None = None
        source: Path | None = None

        if not request.local_path:
            data = random_content(TEMP_FILE_SIZE)
            size = len(data)
        else:
            source = Path(request.local_path)
            if not source.is_file():
                return local_failure(
                    ErrorCode.LOCAL_FILE_NOT_EXIST,
                    FileNotFoundError(f"local file {request.local_path} does not exist"),
                )
            try:
                size = source.stat().st_size
            except OSError as exc:
                return local_failure(ErrorCode.OPEN_LOCAL_FILE_FAILED, exc)

        object_name = request.object_name
        if not object_name or object_name.endswith(OBJECT_PATH_SEPARATOR):
            object_name += source.name if source is not None else generate_temp_name()

        started = self._clock()
        try:
            response = client.put_object(request.bucket, object_name, data=data, path=source)
        except (ServiceError, ClientError) as exc:
            return failure_from_exception(exc)
        except OSError as exc:
            return local_failure(ErrorCode.OPEN_LOCAL_FILE_FAILED, exc)
        return self._success(response, object_name, size, started)


__all__ = ["OBJECT_PATH_SEPARATOR", "TEMP_FILE_SIZE", "UploadCheck"]
