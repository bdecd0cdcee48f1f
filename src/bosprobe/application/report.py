"""The probe report: accumulated run state and its text rendering."""

from __future__ import annotations

import platform
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from bosprobe.domain.checks.models import CheckOutcome, NetStatus, ObjectDetail, OutcomeCode
from bosprobe.domain.suggestions import MessageCatalog, SuggestionEngine
from bosprobe.infrastructure.errors import ErrorCode, code_name
from bosprobe.integrations.bos.models import ServiceResponse

SECTION_DELIMITER = "\n\n************************* {} **************************\n"
MASK = "***"

_SECRET_FLAGS = ("-a", "--ak", "-s", "--sk")
_SHORT_SECRET = re.compile(r"^(-[as])(=?)(.+)$")


class ReportSink(Protocol):
    def log(self, text: str) -> None: ...

    def tlog(self, text: str) -> None: ...


@dataclass
class ProbeReport:
    """Everything one probe run learned, filled in stage by stage."""

    check_type: str
    request_code: OutcomeCode = ErrorCode.PROBE_NOT_CHECKED
    endpoint: str = ""
    endpoint_source: str = ""
    net_status: NetStatus = NetStatus.NOT_CHECKED
    outcome: CheckOutcome = field(
        default_factory=lambda: CheckOutcome(ErrorCode.PROBE_NOT_CHECKED)
    )
    response: ServiceResponse | None = None
    suggestion: str = ""
    log_path: Path | None = None
    halted: bool = False
    halted_at: str = ""

    @property
    def code(self) -> OutcomeCode:
        return self.outcome.code

    @property
    def detail(self) -> ObjectDetail | None:
        return self.outcome.detail

    @property
    def success(self) -> bool:
        return self.outcome.success

    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> dict[str, Any]:
        detail = self.detail
        return {
            "check_type": self.check_type,
            "success": self.success,
            "code": str(self.code),
            "request_code": str(self.request_code),
            "endpoint": self.endpoint,
            "endpoint_source": self.endpoint_source,
            "net_status": self.net_status.name,
            "error": str(self.outcome.error) if self.outcome.error is not None else None,
            "detail": (
                {"name": detail.name, "size": detail.size, "elapsed_ms": detail.elapsed_ms}
                if detail is not None
                else None
            ),
            "request_id": self.response.request_id if self.response else None,
            "debug_id": self.response.debug_id if self.response else None,
            "halted_at": self.halted_at or None,
            "log_path": str(self.log_path) if self.log_path else None,
        }


def mask_credentials(argv: Sequence[str]) -> str:
    """Join ``argv`` with access and secret key values replaced by ``***``."""

    masked: list[str] = []
    hide_next = False
    for token in argv:
        if hide_next:
            masked.append(MASK)
            hide_next = False
            continue
        if token in _SECRET_FLAGS:
            masked.append(token)
            hide_next = True
            continue
        long_flag = next((flag for flag in ("--ak=", "--sk=") if token.startswith(flag)), None)
        if long_flag:
            masked.append(long_flag + MASK)
            continue
        match = _SHORT_SECRET.match(token)
        if match:
            masked.append(f"{match.group(1)}{match.group(2)}{MASK}")
            continue
        masked.append(token)
    return " ".join(masked)


class ReportRenderer:
    def __init__(self, sink: ReportSink, engine: SuggestionEngine) -> None:
        self._sink = sink
        self._engine = engine

    @property
    def catalog(self) -> MessageCatalog:
        return self._engine.catalog

    def _section(self, key: str) -> str:
        return SECTION_DELIMITER.format(self.catalog.format(f"report.{key}"))

    def check_label(self, check_type: str) -> str:
        return self.catalog.text(f"report.check_type.{check_type}") or check_type

    def basic_info(
        self,
        argv: Sequence[str],
        *,
        now: datetime | None = None,
        system: str | None = None,
    ) -> None:
        text = self._section("basic_info")
        text += f"    TIME   :\t{(now or datetime.now()).isoformat(sep=' ')}\n"
        text += f"    SYSTEM :\t{system or platform.system().lower()}\n"
        text += f"    COMMAND:\t{mask_credentials(argv)}\n\n"
        self._sink.log(text)

    def transfer_detail(self, check_type: str, detail: ObjectDetail) -> None:
        text = SECTION_DELIMITER.format(self.check_label(check_type))
        text += f"    OBJECT NAME:\t{detail.name}\n"
        text += f"    FILE SIZE  :\t{detail.size}\n"
        text += f"    USED TIME  :\t{detail.elapsed_ms} ms\n"
        text += f"    SPEED      :\t{detail.speed_mb_per_s:.2f} MB/s\n"
        self._sink.tlog(text)

    def request_check(self, code: OutcomeCode) -> None:
        text = self._section("request_check") + self.catalog.format("report.checked")
        if code == ErrorCode.SUCCESS:
            text += self.catalog.format("report.passed") + "\n"
        else:
            text += self.catalog.format("report.failed") + "\n"
            text += self.catalog.format("report.failed_code", code=code_name(str(code))) + "\n"
        self._sink.log(text)

    def verdict(self, report: ProbeReport) -> None:
        label = self.check_label(report.check_type)
        text = self._section("result")
        if report.net_status is NetStatus.REACHABLE:
            text += self.catalog.format("report.net_ok") + "\n"
        elif report.net_status is NetStatus.NOT_CHECKED:
            text += self.catalog.format("report.net_not_checked") + "\n"
        else:
            text += self.catalog.format("report.net_failed") + "\n"
        text += self.catalog.format("report.transfer_result", check=label)
        result_key = "report.transfer_ok" if report.success else "report.transfer_failed"
        text += self.catalog.format(result_key, check=label) + "\n"
        self._sink.log(text)

    def net_detail(self, status: NetStatus) -> None:
        if status is NetStatus.NOT_CHECKED:
            return
        message = self._engine.network_message(status) or status.name
        self._sink.log(self._section("net_info") + f"    NET MSG:\t{message}\n")

    def failure_detail(self, outcome: CheckOutcome) -> None:
        if outcome.success or outcome.code == ErrorCode.PROBE_NOT_CHECKED:
            return
        text = self._section("error_info")
        text += f"    ERROR CODE:\t{code_name(str(outcome.code))}\n"
        if outcome.error is not None:
            text += f"    ERROR MSG :\t{outcome.error}\n"
        self._sink.tlog(text)

    def suggestion(self, report: ProbeReport) -> str:
        message = self._engine.network_prompt(report.net_status)
        if message is None:
            message = self._engine.suggest(report.code, report.outcome.error)
        self._sink.tlog(self._section("suggestion") + message + "\n")
        return message

    def debug_info(self, response: ServiceResponse | None) -> None:
        if response is None:
            return
        text = self._section("debug_info")
        if response.request_id:
            text += f"    Request ID:\t{response.request_id}\n"
        if response.debug_id:
            text += f"    Debug   ID:\t{response.debug_id}\n"
        self._sink.log(text)

    def render(self, report: ProbeReport) -> None:
        """Write every closing section in order; basic info is written at start."""

        self.request_check(report.request_code)
        self.verdict(report)
        self.net_detail(report.net_status)
        self.failure_detail(report.outcome)
        report.suggestion = self.suggestion(report)
        self.debug_info(report.response)


__all__ = [
    "MASK",
    "SECTION_DELIMITER",
    "ProbeReport",
    "ReportRenderer",
    "ReportSink",
    "mask_credentials",
]
