from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from bosprobe.application.diagnostics import STAGES, DiagnosticPipeline
from bosprobe.domain.checks import (
    DownloadCheck,
    DownloadRequest,
    NetStatus,
    UploadCheck,
    UploadRequest,
)
from bosprobe.domain.endpoint import EndpointCache, EndpointResolver, RegionDomains
from bosprobe.domain.suggestions import MessageCatalog, SuggestionEngine
from bosprobe.infrastructure.errors import ErrorCode, ServiceError


class _Sink:
    persisted = False
    path = None

    def __init__(self) -> None:
        self.logged: list[str] = []

    def log(self, text: str) -> None:
        self.logged.append(text)

    def tlog(self, text: str) -> None:
        self.logged.append(text)

    @property
    def text(self) -> str:
        return "".join(self.logged)


class _Classifier:
    def __init__(self, status: NetStatus = NetStatus.REACHABLE) -> None:
        self.status = status
        self.endpoints: list[str] = []

    def classify(self, endpoint: str) -> NetStatus:
        self.endpoints.append(endpoint)
        return self.status


class _ExplodingCheck(UploadCheck):
    def execute(self, client):  # noqa: ANN001
        raise RuntimeError("boom")


@pytest.fixture(autouse=True)
def _in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def _pipeline(strategy, storage, *, classifier=None, sink=None, tmp_path: Path):
    console = Console(file=io.StringIO(), width=200)
    pipeline = DiagnosticPipeline(
        strategy,
        client=storage,
        resolver=EndpointResolver(EndpointCache(tmp_path / "cache"), RegionDomains.from_config()),
        classifier=classifier or _Classifier(),
        engine=SuggestionEngine(MessageCatalog.load("en")),
        sink=sink or _Sink(),
        console=console,
        spinner=False,
    )
    return pipeline, console


def test_stage_order() -> None:
    assert STAGES == (
        "request_init",
        "request_check",
        "resolve_endpoint",
        "classify_network",
        "execute",
    )


def test_successful_upload(make_storage, tmp_path: Path) -> None:
    storage = make_storage(region="gz")
    classifier = _Classifier()
    sink = _Sink()
    pipeline, console = _pipeline(
        UploadCheck(), storage, classifier=classifier, sink=sink, tmp_path=tmp_path
    )

    report = pipeline.run(
        UploadRequest(bucket="photos"), argv=["bosprobe", "upload", "-b", "photos"]
    )

    assert report.success
    assert not report.halted
    assert (report.endpoint, report.endpoint_source) == ("gz.bcebos.com", "service")
    assert storage.endpoint == "gz.bcebos.com"
    assert classifier.endpoints == ["gz.bcebos.com"]
    assert report.net_status is NetStatus.REACHABLE
    assert report.response is not None and report.response.request_id == "req-1"
    assert "[upload succeeded]" in console.file.getvalue()
    assert "Basic Info" in sink.text
    assert "Debug Info" in sink.text


def test_download_first_listed_object_into_working_directory(
    make_storage, tmp_path: Path
) -> None:
    storage = make_storage(objects={"report.csv": b"a,b"})
    pipeline, _ = _pipeline(DownloadCheck(), storage, tmp_path=tmp_path)

    report = pipeline.run(
        DownloadRequest(url="", bucket="b", object_name="", local_path=""), argv=["bosprobe"]
    )

    assert report.success
    assert report.detail is not None
    assert report.detail.name == "report.csv"
    assert report.detail.size == 3
    assert (tmp_path / "report.csv").read_bytes() == b"a,b"
    assert ("get_object", "b", "report.csv", "report.csv") in storage.calls


def test_request_check_failure_halts_before_network(make_storage, tmp_path: Path) -> None:
    storage = make_storage()
    classifier = _Classifier()
    sink = _Sink()
    pipeline, _ = _pipeline(
        DownloadCheck(), storage, classifier=classifier, sink=sink, tmp_path=tmp_path
    )

    report = pipeline.run(DownloadRequest(url="http://h/x", bucket="b"), argv=["bosprobe"])

    assert report.halted_at == "request_check"
    assert report.code is ErrorCode.ARGS_BOTH_URL_BUCKET
    assert report.net_status is NetStatus.NOT_CHECKED
    assert classifier.endpoints == []
    assert storage.calls == []
    assert "Request Check" in sink.text
    assert report.exit_code() == 1


def test_wrong_request_type_halts_at_init(make_storage, tmp_path: Path) -> None:
    pipeline, _ = _pipeline(UploadCheck(), make_storage(), tmp_path=tmp_path)

    report = pipeline.run(DownloadRequest(bucket="b"), argv=["bosprobe"])

    assert report.halted_at == "request_init"
    assert report.code is ErrorCode.PROBE_INIT_REQUEST_FAILED


def test_endpoint_failure_halts(make_storage, tmp_path: Path) -> None:
    storage = make_storage(errors={"get_bucket_location": ServiceError("NoSuchBucket", "gone")})
    pipeline, _ = _pipeline(UploadCheck(), storage, tmp_path=tmp_path)

    report = pipeline.run(UploadRequest(bucket="photos"), argv=["bosprobe"])

    assert report.halted_at == "resolve_endpoint"
    assert report.code is ErrorCode.GET_ENDPOINT_OF_BUCKET_FAILED
    assert report.suggestion.startswith("Could not find the endpoint of the bucket")


def test_unreachable_network_halts_without_transfer(make_storage, tmp_path: Path) -> None:
    storage = make_storage()
    pipeline, console = _pipeline(
        UploadCheck(),
        storage,
        classifier=_Classifier(NetStatus.ENDPOINT_UNREACHABLE),
        tmp_path=tmp_path,
    )

    report = pipeline.run(UploadRequest(bucket="photos", endpoint="bj.bcebos.com"), argv=["x"])

    assert report.halted_at == "classify_network"
    assert report.code is ErrorCode.PROBE_NOT_CHECKED
    assert report.net_status is NetStatus.ENDPOINT_UNREACHABLE
    assert [call[0] for call in storage.calls] == []
    assert report.suggestion == pipeline.renderer.catalog.text(
        "network.endpoint_unreachable_prompt"
    )
    assert "[network unreachable]" in console.file.getvalue()
    assert not report.success


def test_transfer_failure_keeps_network_status(make_storage, tmp_path: Path) -> None:
    storage = make_storage(errors={"get_object": ServiceError("NoSuchKey", "missing")})
    pipeline, _ = _pipeline(DownloadCheck(), storage, tmp_path=tmp_path)

    report = pipeline.run(
        DownloadRequest(bucket="photos", object_name="k", endpoint="bj.bcebos.com"), argv=["x"]
    )

    assert report.halted_at == "execute"
    assert report.code == "service.NoSuchKey"
    assert report.outcome.net_status is NetStatus.REACHABLE
    assert report.endpoint_source == "explicit"


def test_unexpected_exception_becomes_internal_error(make_storage, tmp_path: Path) -> None:
    sink = _Sink()
    pipeline, _ = _pipeline(_ExplodingCheck(), make_storage(), sink=sink, tmp_path=tmp_path)

    report = pipeline.run(UploadRequest(bucket="photos", endpoint="bj.bcebos.com"), argv=["x"])

    assert report.halted_at == "execute"
    assert report.code is ErrorCode.PROBE_INTERNAL_ERROR
    assert "boom" in sink.text


def test_log_path_announced_when_persisted(make_storage, tmp_path: Path) -> None:
    sink = _Sink()
    sink.persisted = True
    sink.path = tmp_path / "run.log"
    pipeline, console = _pipeline(UploadCheck(), make_storage(), sink=sink, tmp_path=tmp_path)

    report = pipeline.run(UploadRequest(bucket="photos"), argv=["x"])

    assert report.log_path == tmp_path / "run.log"
    assert "The log of this run is saved at:" in console.file.getvalue()
