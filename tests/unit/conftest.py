"""In-memory stand-ins shared by the unit tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from bosprobe.integrations.bos.models import ServiceResponse

OK = ServiceResponse(200, request_id="req-1", debug_id="dbg-1")


class FakeStorage:
    """Records calls; ``errors`` maps an operation name to the exception it raises."""

    def __init__(
        self,
        *,
        region: str = "bj",
        objects: dict[str, bytes] | None = None,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.region = region
        self.objects = objects if objects is not None else {"dir/first.txt": b"hello"}
        self.errors = errors or {}
        self.calls: list[tuple] = []
        self.endpoint = ""

    def _maybe_fail(self, name: str) -> None:
        error = self.errors.get(name)
        if error is not None:
            raise error

    def use_endpoint(self, endpoint: str) -> None:
        self.endpoint = endpoint

    def get_bucket_location(self, bucket: str) -> str:
        self.calls.append(("get_bucket_location", bucket))
        self._maybe_fail("get_bucket_location")
        return self.region

    def put_object(self, bucket, key, *, data=None, path=None) -> ServiceResponse:
        self.calls.append(("put_object", bucket, key, data is not None, path))
        self._maybe_fail("put_object")
        return OK

    def get_one_object_from_bucket(self, bucket: str) -> tuple[ServiceResponse, str | None]:
        self.calls.append(("get_one_object_from_bucket", bucket))
        self._maybe_fail("get_one_object_from_bucket")
        return OK, next(iter(self.objects), None)

    def get_object(self, bucket: str, key: str, destination) -> ServiceResponse:
        self.calls.append(("get_object", bucket, key, str(destination)))
        self._maybe_fail("get_object")
        Path(destination).write_bytes(self.objects.get(key, b""))
        return OK

    def get_object_from_url(self, url: str, destination) -> ServiceResponse:
        self.calls.append(("get_object_from_url", url, str(destination)))
        self._maybe_fail("get_object_from_url")
        Path(destination).write_bytes(b"from-url")
        return OK


@pytest.fixture
def make_storage() -> Callable[..., FakeStorage]:
    return FakeStorage
