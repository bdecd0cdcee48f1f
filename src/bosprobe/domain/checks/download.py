"""Download check: fetch one object (by bucket or by URL) and time it."""

from __future__ import annotations

import os
import posixpath
from collections.abc import Callable
from pathlib import Path
from urllib.parse import unquote, urlsplit

from bosprobe.domain.checks.base import (
    CheckStrategy,
    StorageClient,
    failure_from_exception,
    generate_temp_name,
    local_failure,
)
from bosprobe.domain.checks.models import CheckOutcome, DownloadRequest, TransferResult
from bosprobe.infrastructure.errors import ClientError, ErrorCode, ServiceError
from bosprobe.integrations.bos.models import ServiceResponse

ACCESS_DENIED = "AccessDenied"
_SEPARATORS = tuple({os.sep, "/"})


class DirectoryCreationError(OSError):
    pass


def url_base_name(url: str) -> str:
    try:
        path = urlsplit(url).path
    except ValueError:
        return generate_temp_name()
    return posixpath.basename(unquote(path)) or generate_temp_name()


def object_base_name(object_name: str) -> str:
    return posixpath.basename(object_name) or generate_temp_name()


def destination_path(local_path: str, base_name: str) -> Path:
    """Work out where a download lands, creating directories as needed.

    * empty: ``base_name`` in the working directory
    * existing directory: ``<dir>/<base_name>``
    * missing path ending with a separator: create it, then ``<dir>/<base_name>``
    * any other path: create its parent and write to the path itself

    Raises :class:`DirectoryCreationError` when a directory cannot be made.
    """

    if not local_path:
        return Path(base_name)
    if os.path.isdir(local_path):
        return Path(os.path.join(local_path, base_name))
    if local_path.endswith(_SEPARATORS):
        _make_dirs(local_path)
        return Path(os.path.join(local_path, base_name))
    parent = os.path.dirname(local_path)
    if parent:
        _make_dirs(parent)
    return Path(local_path)


def _make_dirs(directory: str) -> None:
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(exc.errno, f"cannot create directory {directory}: {exc}") from exc


def _size_on_disk(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return -1


class DownloadCheck(CheckStrategy[DownloadRequest]):
    check_type = "download"
    request_type = DownloadRequest

    def request_check(self) -> ErrorCode:
        request = self.request
        if request.url and request.bucket:
            return ErrorCode.ARGS_BOTH_URL_BUCKET
        if request.url and request.object_name:
            return ErrorCode.ARGS_BOTH_URL_OBJECT
        if request.url and request.endpoint:
            return ErrorCode.ARGS_BOTH_URL_ENDPOINT
        if not request.url and not request.bucket:
            return ErrorCode.ARGS_NO_BUCKET_OR_URL
        if request.url:
            try:
                urlsplit(request.url)
            except ValueError:
                return ErrorCode.URL_INVALID
        return ErrorCode.SUCCESS

    def execute(self, client: StorageClient) -> TransferResult:
        if self.request.url:
            return self._download_url(client)
        return self._download_object(client)

    def _download_url(self, client: StorageClient) -> TransferResult:
        request = self.request
        try:
            destination = destination_path(request.local_path, url_base_name(request.url))
        except DirectoryCreationError as exc:
            return local_failure(ErrorCode.CREATE_DIR_FAILED, exc)
        return self._transfer(lambda: client.get_object_from_url(request.url, destination), destination)

    def _download_object(self, client: StorageClient) -> TransferResult:
        request = self.request
        object_name = request.object_name
        if not object_name:
            try:
                listing_response, first_key = client.get_one_object_from_bucket(request.bucket)
            except ServiceError as exc:
                if exc.code == ACCESS_DENIED:
                    # Listing may be forbidden while reads are allowed.
                    return TransferResult(
                        exc.response, None, CheckOutcome(ErrorCode.LIST_OBJECTS_DENIED, error=exc)
                    )
                return failure_from_exception(exc)
            except ClientError as exc:
                return failure_from_exception(exc)
            if first_key is None:
                return TransferResult(
                    listing_response,
                    None,
                    CheckOutcome(
                        ErrorCode.EMPTY_OBJECT_LIST,
                        error=ClientError(f"bucket {request.bucket} returned an empty object list"),
                    ),
                )
            object_name = first_key

        try:
            destination = destination_path(request.local_path, object_base_name(object_name))
        except DirectoryCreationError as exc:
            return local_failure(ErrorCode.CREATE_DIR_FAILED, exc)
        return self._transfer(
            lambda: client.get_object(request.bucket, object_name, destination), destination
        )

    def _transfer(
        self, call: Callable[[], ServiceResponse], destination: Path
    ) -> TransferResult:
        started = self._clock()
        try:
            response = call()
        except (ServiceError, ClientError) as exc:
            return failure_from_exception(exc)
        except OSError as exc:
            return local_failure(ErrorCode.WRITE_LOCAL_FILE_FAILED, exc)
        return self._success(response, str(destination), _size_on_disk(destination), started)


__all__ = [
    "DirectoryCreationError",
    "DownloadCheck",
    "destination_path",
    "object_base_name",
    "url_base_name",
]
