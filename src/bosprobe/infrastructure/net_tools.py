"""Thin wrappers around the system ``ping``, ``nslookup`` and ``traceroute`` tools."""

from __future__ import annotations

import platform
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bosprobe.infrastructure.logging import get_logger

_LOGGER = get_logger("bosprobe.net_tools")

Runner = Callable[[Sequence[str]], subprocess.CompletedProcess[bytes]]


@dataclass(frozen=True)
class ToolResult:
    """Captured output of one network tool invocation."""

    command: tuple[str, ...]
    output: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_output(raw: bytes) -> str:
    """Decode tool output, falling back to GBK for localized Windows consoles."""

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("gbk", errors="replace")


def _default_runner(command: Sequence[str]) -> subprocess.CompletedProcess[bytes]:
    return subprocess.run(list(command), capture_output=True, check=False)


class NetTools:
    def __init__(self, *, runner: Runner | None = None, system: str | None = None) -> None:
        self._runner = runner or _default_runner
        self._windows = (system or platform.system()).lower() == "windows"

    def ping(self, host: str, count: int) -> ToolResult:
        flag = "-n" if self._windows else "-c"
        return self._run(("ping", flag, str(count), host))

    def nslookup(self, host: str) -> ToolResult:
        return self._run(("nslookup", host))

    def traceroute(self, host: str, max_hops: int) -> ToolResult:
        if self._windows:
            return self._run(("tracert", "-h", str(max_hops), host))
        return self._run(("traceroute", "-m", str(max_hops), host))

    def _run(self, command: tuple[str, ...]) -> ToolResult:
        _LOGGER.debug("net_tools.run", command=" ".join(command))
        try:
            completed = self._runner(command)
        except FileNotFoundError:
            return ToolResult(command, "", f"command not found: {command[0]}")
        except OSError as exc:
            return ToolResult(command, "", f"{command[0]} failed to start: {exc}")

        output = decode_output(completed.stdout or b"")
        if completed.returncode != 0:
            stderr = decode_output(completed.stderr or b"").strip()
            detail = f"exit status {completed.returncode}"
            return ToolResult(command, output, f"{detail}: {stderr}" if stderr else detail)
        return ToolResult(command, output)


__all__ = ["NetTools", "Runner", "ToolResult", "decode_output"]
