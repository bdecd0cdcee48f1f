from __future__ import annotations

import subprocess
from collections.abc import Sequence

import pytest

from bosprobe.application.network import (
    NET_INFO_HEADING,
    NetworkReachabilityClassifier,
    probe_host,
)
from bosprobe.domain.checks.models import NetStatus
from bosprobe.infrastructure.net_tools import NetTools, decode_output


class _Sink:
    def __init__(self) -> None:
        self.logged: list[str] = []
        self.mirrored: list[str] = []

    def log(self, text: str) -> None:
        self.logged.append(text)

    def tlog(self, text: str) -> None:
        self.logged.append(text)
        self.mirrored.append(text)

    @property
    def text(self) -> str:
        return "".join(self.logged)


class _Runner:
    """Fake subprocess runner: pings to hosts in ``down`` fail."""

    def __init__(self, down: Sequence[str] = (), missing: Sequence[str] = ()) -> None:
        self.down = set(down)
        self.missing = set(missing)
        self.commands: list[tuple[str, ...]] = []

    def __call__(self, command: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
        command = tuple(command)
        self.commands.append(command)
        if command[0] in self.missing:
            raise FileNotFoundError(command[0])
        host = command[-1]
        code = 1 if command[0] == "ping" and host in self.down else 0
        return subprocess.CompletedProcess(
            list(command), code, stdout=f"{command[0]} {host} output\n".encode(), stderr=b""
        )


def _classifier(runner: _Runner, sink: _Sink) -> NetworkReachabilityClassifier:
    return NetworkReachabilityClassifier(
        NetTools(runner=runner, system="Linux"),
        sink,
        reference_host="www.baidu.com",
        ping_count=2,
        traceroute_max_hops=7,
    )


def test_reachable_endpoint() -> None:
    runner, sink = _Runner(), _Sink()

    status = _classifier(runner, sink).classify("bj.bcebos.com")

    assert status is NetStatus.REACHABLE
    assert runner.commands == [
        ("ping", "-c", "2", "bj.bcebos.com"),
        ("ping", "-c", "2", "www.baidu.com"),
        ("nslookup", "bj.bcebos.com"),
        ("nslookup", "www.baidu.com"),
        ("traceroute", "-m", "7", "bj.bcebos.com"),
    ]


def test_endpoint_down_reference_up() -> None:
    status = _classifier(_Runner(down=["bj.bcebos.com"]), _Sink()).classify("bj.bcebos.com")

    assert status is NetStatus.ENDPOINT_UNREACHABLE


def test_everything_down_means_client_offline() -> None:
    runner = _Runner(down=["bj.bcebos.com", "www.baidu.com"])

    status = _classifier(runner, _Sink()).classify("bj.bcebos.com")

    assert status is NetStatus.CLIENT_OFFLINE


def test_missing_diagnostic_tools_do_not_change_status() -> None:
    sink = _Sink()

    status = _classifier(_Runner(missing=["nslookup", "traceroute"]), sink).classify(
        "bj.bcebos.com"
    )

    assert status is NetStatus.REACHABLE
    assert "command not found: traceroute" in sink.text


def test_tool_output_is_logged_but_not_mirrored() -> None:
    sink = _Sink()

    _classifier(_Runner(), sink).classify("http://bj.bcebos.com:80/bucket")

    assert "Net Status" in sink.text
    assert f"{NET_INFO_HEADING} ping bj.bcebos.com" in sink.text
    assert f"{NET_INFO_HEADING} traceroute bj.bcebos.com" in sink.text
    assert "nslookup www.baidu.com output" in sink.text
    assert sink.mirrored == []


@pytest.mark.parametrize(
    ("endpoint", "host"),
    [
        ("bj.bcebos.com", "bj.bcebos.com"),
        ("https://bj.bcebos.com/photos", "bj.bcebos.com"),
        ("bj.bcebos.com:8080", "bj.bcebos.com"),
        (" gz.bcebos.com ", "gz.bcebos.com"),
    ],
)
def test_probe_host(endpoint: str, host: str) -> None:
    assert probe_host(endpoint) == host


def test_windows_commands() -> None:
    runner = _Runner()
    tools = NetTools(runner=runner, system="Windows")

    tools.ping("bj.bcebos.com", 5)
    tools.traceroute("bj.bcebos.com", 15)

    assert runner.commands == [
        ("ping", "-n", "5", "bj.bcebos.com"),
        ("tracert", "-h", "15", "bj.bcebos.com"),
    ]


def test_nonzero_exit_reports_stderr() -> None:
    def runner(command: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
        return subprocess.CompletedProcess(list(command), 2, stdout=b"", stderr=b"unknown host\n")

    result = NetTools(runner=runner, system="Linux").ping("nowhere.invalid", 1)

    assert not result.ok
    assert result.error == "exit status 2: unknown host"


def test_start_failure_is_captured() -> None:
    def runner(command: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
        raise PermissionError("denied")

    result = NetTools(runner=runner, system="Linux").nslookup("bj.bcebos.com")

    assert not result.ok
    assert result.error is not None and result.error.startswith("nslookup failed to start")


def test_decode_output_falls_back_to_gbk() -> None:
    assert decode_output("请求超时".encode("gbk")) == "请求超时"
    assert decode_output("ok".encode()) == "ok"
