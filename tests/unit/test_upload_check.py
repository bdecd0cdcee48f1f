from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

import pytest

from bosprobe.domain.checks import DownloadRequest, UploadCheck, UploadRequest
from bosprobe.domain.checks.base import generate_temp_name, random_content
from bosprobe.domain.checks.upload import TEMP_FILE_SIZE
from bosprobe.infrastructure.errors import ClientError, ErrorCode, ServiceError


def _ticking(*values: float):
    ticks: Iterator[float] = iter(values)
    return lambda: next(ticks)


def _validated(request: UploadRequest, **kwargs) -> UploadCheck:
    check = UploadCheck(**kwargs)
    assert check.validate(request) is ErrorCode.SUCCESS
    return check


def test_validate_rejects_wrong_request_type() -> None:
    assert UploadCheck().validate(DownloadRequest(bucket="b")) is ErrorCode.PROBE_INIT_REQUEST_FAILED


def test_request_check_needs_bucket() -> None:
    assert _validated(UploadRequest()).request_check() is ErrorCode.ARGS_NO_BUCKET
    assert _validated(UploadRequest(bucket="photos")).request_check() is ErrorCode.SUCCESS


def test_random_payload_with_temp_name(make_storage) -> None:
    storage = make_storage()
    check = _validated(UploadRequest(bucket="photos"), clock=_ticking(10.0, 10.25))

    result = check.execute(storage)

    assert result.outcome.success
    assert result.detail is not None
    assert result.detail.size == TEMP_FILE_SIZE
    assert result.detail.elapsed_ms == 250
    assert re.fullmatch(r"probe\d{14}\d{1,3}\.temp", result.detail.name)
    operation, bucket, key, has_data, path = storage.calls[0]
    assert (operation, bucket, key, has_data, path) == (
        "put_object",
        "photos",
        result.detail.name,
        True,
        None,
    )


def test_local_file_uploaded_under_its_own_name(make_storage, tmp_path: Path) -> None:
    source = tmp_path / "report.csv"
    source.write_bytes(b"a,b\n1,2\n")
    storage = make_storage()
    check = _validated(
        UploadRequest(bucket="photos", object_name="exports/", local_path=str(source))
    )

    result = check.execute(storage)

    assert result.outcome.success
    assert result.detail is not None
    assert result.detail.name == "exports/report.csv"
    assert result.detail.size == 8
    assert storage.calls[0][4] == source


def test_explicit_object_name_is_kept(make_storage, tmp_path: Path) -> None:
    source = tmp_path / "report.csv"
    source.write_bytes(b"x")

    result = _validated(
        UploadRequest(bucket="photos", object_name="a/b.bin", local_path=str(source))
    ).execute(make_storage())

    assert result.detail is not None and result.detail.name == "a/b.bin"


def test_missing_local_file(make_storage, tmp_path: Path) -> None:
    storage = make_storage()
    check = _validated(UploadRequest(bucket="photos", local_path=str(tmp_path / "nope")))

    result = check.execute(storage)

    assert result.outcome.code is ErrorCode.LOCAL_FILE_NOT_EXIST
    assert storage.calls == []


def test_directory_is_not_a_local_file(make_storage, tmp_path: Path) -> None:
    result = _validated(UploadRequest(bucket="photos", local_path=str(tmp_path))).execute(
        make_storage()
    )

    assert result.outcome.code is ErrorCode.LOCAL_FILE_NOT_EXIST


def test_service_error_becomes_service_code(make_storage) -> None:
    error = ServiceError("NoSuchBucket", "The specified bucket does not exist", status_code=404)
    storage = make_storage(errors={"put_object": error})

    result = _validated(UploadRequest(bucket="photos")).execute(storage)

    assert result.outcome.code == "service.NoSuchBucket"
    assert result.outcome.error is error
    assert result.detail is None


def test_transport_error_becomes_client_error(make_storage) -> None:
    storage = make_storage(errors={"put_object": ClientError("connection reset")})

    result = _validated(UploadRequest(bucket="photos")).execute(storage)

    assert result.outcome.code is ErrorCode.CLIENT_ERROR


def test_unreadable_file_during_transfer(make_storage, tmp_path: Path) -> None:
    source = tmp_path / "report.csv"
    source.write_bytes(b"x")
    storage = make_storage(errors={"put_object": PermissionError("denied")})

    result = _validated(UploadRequest(bucket="photos", local_path=str(source))).execute(storage)

    assert result.outcome.code is ErrorCode.OPEN_LOCAL_FILE_FAILED


def test_helpers() -> None:
    assert len(random_content(64)) == 64
    assert random_content(64).isalnum()
    assert generate_temp_name().startswith("probe")
    assert generate_temp_name().endswith(".temp")


def test_request_repr_hides_secret() -> None:
    request = UploadRequest(access_key="ak-visible", secret_key="sk-hidden", bucket="photos")

    assert "sk-hidden" not in repr(request)


@pytest.mark.parametrize("name", ["", "folder/"])
def test_names_needing_a_suffix(make_storage, name: str) -> None:
    result = _validated(UploadRequest(bucket="photos", object_name=name)).execute(make_storage())

    assert result.detail is not None
    assert result.detail.name.startswith(name)
    assert result.detail.name.endswith(".temp")
