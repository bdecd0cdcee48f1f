"""Network reachability classification from ping, nslookup and traceroute."""

from __future__ import annotations

import logging
from collections.abc import Callable

from bosprobe.application.report import SECTION_DELIMITER, ReportSink
from bosprobe.config.settings import (
    DEFAULT_PING_COUNT,
    DEFAULT_REFERENCE_HOST,
    DEFAULT_TRACEROUTE_MAX_HOPS,
)
from bosprobe.domain.checks.models import NetStatus
from bosprobe.infrastructure.logging import get_logger, log_event
from bosprobe.infrastructure.net_tools import NetTools, ToolResult

NET_INFO_HEADING = ">>>>>>"
NET_STATUS_TITLE = "Net Status"

_LOGGER = get_logger("bosprobe.network")


def probe_host(endpoint: str) -> str:
    """Strip scheme, path and port so the system tools get a bare host."""

    host = endpoint.strip()
    if "://" in host:
        host = host.split("://", 1)[1]
    host = host.split("/", 1)[0]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host


class NetworkReachabilityClassifier:
    """Classify connectivity to an endpoint.

    Every probe's output is appended to the run log, but only the two pings
    decide the status: a reachable endpoint is ``REACHABLE``; an unreachable
    endpoint with a reachable reference host is ``ENDPOINT_UNREACHABLE``;
    otherwise the client is ``CLIENT_OFFLINE``.
    """

    def __init__(
        self,
        tools: NetTools,
        sink: ReportSink,
        *,
        reference_host: str = DEFAULT_REFERENCE_HOST,
        ping_count: int = DEFAULT_PING_COUNT,
        traceroute_max_hops: int = DEFAULT_TRACEROUTE_MAX_HOPS,
    ) -> None:
        self._tools = tools
        self._sink = sink
        self._reference_host = reference_host
        self._ping_count = ping_count
        self._max_hops = traceroute_max_hops

    def _probe(self, tool: str, host: str, run: Callable[[], ToolResult]) -> ToolResult:
        self._sink.log(f"{NET_INFO_HEADING} {tool} {host}\n")
        result = run()
        if result.output:
            self._sink.log(result.output)
        if result.error:
            self._sink.log(result.error)
        self._sink.log("\n\n")
        log_event(
            _LOGGER,
            "network.probe",
            level=logging.DEBUG,
            tool=tool,
            host=host,
            ok=result.ok,
            error=result.error,
        )
        return result

    def classify(self, endpoint: str) -> NetStatus:
        host = probe_host(endpoint)
        reference = self._reference_host
        self._sink.log(SECTION_DELIMITER.format(NET_STATUS_TITLE))

        endpoint_ping = self._probe("ping", host, lambda: self._tools.ping(host, self._ping_count))
        reference_ping = self._probe(
            "ping", reference, lambda: self._tools.ping(reference, self._ping_count)
        )
        self._probe("nslookup", host, lambda: self._tools.nslookup(host))
        self._probe("nslookup", reference, lambda: self._tools.nslookup(reference))
        self._probe(
            "traceroute", host, lambda: self._tools.traceroute(host, self._max_hops)
        )

        if endpoint_ping.ok:
            status = NetStatus.REACHABLE
        elif reference_ping.ok:
            status = NetStatus.ENDPOINT_UNREACHABLE
        else:
            status = NetStatus.CLIENT_OFFLINE
        log_event(_LOGGER, "network.classified", level=logging.INFO, endpoint=host, status=status.name)
        return status


__all__ = ["NET_INFO_HEADING", "NetworkReachabilityClassifier", "probe_host"]
