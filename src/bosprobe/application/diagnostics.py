"""The diagnostic pipeline driving one upload or download probe.

Stages run in a fixed order and each one enriches the same
:class:`~bosprobe.application.report.ProbeReport`. The first failing stage
halts the run; the report stage runs regardless.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import Any, Final

from rich.console import Console

from bosprobe.application.network import NetworkReachabilityClassifier
from bosprobe.application.report import ProbeReport, ReportRenderer, ReportSink
from bosprobe.domain.checks.base import CheckStrategy
from bosprobe.domain.checks.models import CheckOutcome, NetStatus, ProbeRequest
from bosprobe.domain.endpoint.resolver import EndpointResolver
from bosprobe.domain.suggestions import SuggestionEngine
from bosprobe.infrastructure.errors import ErrorCode
from bosprobe.infrastructure.logging import get_logger, log_event

STAGE_REQUEST_INIT: Final = "request_init"
STAGE_REQUEST_CHECK: Final = "request_check"
STAGE_RESOLVE_ENDPOINT: Final = "resolve_endpoint"
STAGE_CLASSIFY_NETWORK: Final = "classify_network"
STAGE_EXECUTE: Final = "execute"

STAGES: Final[tuple[str, ...]] = (
    STAGE_REQUEST_INIT,
    STAGE_REQUEST_CHECK,
    STAGE_RESOLVE_ENDPOINT,
    STAGE_CLASSIFY_NETWORK,
    STAGE_EXECUTE,
)

_LOGGER = get_logger("bosprobe.pipeline")


class DiagnosticPipeline:
    def __init__(
        self,
        strategy: CheckStrategy,
        *,
        client: Any,
        resolver: EndpointResolver,
        classifier: NetworkReachabilityClassifier,
        engine: SuggestionEngine,
        sink: ReportSink,
        console: Console,
        spinner: bool = True,
    ) -> None:
        self._strategy = strategy
        self._client = client
        self._classifier = classifier
        self._sink = sink
        self._console = console
        self._spinner = spinner
        self._renderer = ReportRenderer(sink, engine)
        self._catalog = engine.catalog
        if strategy.resolver is None:
            strategy.resolver = resolver

    @property
    def renderer(self) -> ReportRenderer:
        return self._renderer

    def _status(self, message: str) -> contextlib.AbstractContextManager[Any]:
        if not self._spinner:
            return contextlib.nullcontext()
        return self._console.status(message)

    def _check_label(self) -> str:
        return self._renderer.check_label(self._strategy.check_type)

    # -- stages ------------------------------------------------------------

    def _request_init(self, report: ProbeReport, request: ProbeRequest) -> bool:
        code = self._strategy.validate(request)
        if code != ErrorCode.SUCCESS:
            report.request_code = code
            report.outcome = CheckOutcome(code)
            return False
        return True

    def _request_check(self, report: ProbeReport, request: ProbeRequest) -> bool:
        code = self._strategy.request_check()
        report.request_code = code
        if code != ErrorCode.SUCCESS:
            report.outcome = CheckOutcome(code)
            return False
        return True

    def _resolve_endpoint(self, report: ProbeReport, request: ProbeRequest) -> bool:
        resolution = self._strategy.resolve_endpoint(self._client)
        if not resolution.ok:
            report.outcome = CheckOutcome(resolution.code, error=resolution.error)
            return False
        report.endpoint = resolution.endpoint
        report.endpoint_source = resolution.source
        self._client.use_endpoint(resolution.endpoint)
        log_event(
            _LOGGER,
            "pipeline.endpoint",
            level=logging.INFO,
            endpoint=resolution.endpoint,
            source=resolution.source,
        )
        return True

    def _classify_network(self, report: ProbeReport, request: ProbeRequest) -> bool:
        with self._status(self._catalog.format("network.checking")):
            status = self._classifier.classify(report.endpoint)
        report.net_status = status
        report.outcome = replace(report.outcome, net_status=status)
        if status is not NetStatus.REACHABLE:
            self._console.print(self._catalog.format("network.status_failed"), markup=False)
            return False
        self._console.print(self._catalog.format("network.status_ok"), markup=False)
        return True

    def _execute(self, report: ProbeReport, request: ProbeRequest) -> bool:
        label = self._check_label()
        with self._status(self._catalog.format("report.checking", check=label)):
            result = self._strategy.execute(self._client)
        report.response = result.response
        report.outcome = replace(result.outcome, net_status=report.net_status)
        if report.success:
            self._console.print(self._catalog.format("report.status_ok", check=label), markup=False)
            if report.detail is not None:
                self._renderer.transfer_detail(self._strategy.check_type, report.detail)
            return True
        self._console.print(self._catalog.format("report.status_failed", check=label), markup=False)
        return False

    def _stage(self, name: str) -> Callable[[ProbeReport, ProbeRequest], bool]:
        return {
            STAGE_REQUEST_INIT: self._request_init,
            STAGE_REQUEST_CHECK: self._request_check,
            STAGE_RESOLVE_ENDPOINT: self._resolve_endpoint,
            STAGE_CLASSIFY_NETWORK: self._classify_network,
            STAGE_EXECUTE: self._execute,
        }[name]

    # -- driver ------------------------------------------------------------

    def run(self, request: ProbeRequest, *, argv: Sequence[str] | None = None) -> ProbeReport:
        report = ProbeReport(check_type=self._strategy.check_type)
        if getattr(self._sink, "persisted", False):
            report.log_path = getattr(self._sink, "path", None)

        self._renderer.basic_info(list(argv) if argv is not None else sys.argv)

        for name in STAGES:
            try:
                proceed = self._stage(name)(report, request)
            except Exception as exc:
                _LOGGER.exception("pipeline.stage_failed", stage=name)
                report.outcome = CheckOutcome(
                    ErrorCode.PROBE_INTERNAL_ERROR, net_status=report.net_status, error=exc
                )
                proceed = False
            if not proceed:
                report.halted = True
                report.halted_at = name
                log_event(
                    _LOGGER,
                    "pipeline.halted",
                    level=logging.INFO,
                    stage=name,
                    code=str(report.code),
                )
                break

        self._renderer.render(report)
        if report.log_path is not None:
            self._console.print(
                "\n" + self._catalog.format("report.log_saved", path=report.log_path.resolve()) + "\n",
                markup=False,
            )
        return report


__all__ = ["STAGES", "DiagnosticPipeline"]
