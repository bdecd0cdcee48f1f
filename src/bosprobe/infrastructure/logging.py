"""Logging for bosprobe.

Two channels exist side by side:

* structlog diagnostics (``configure_logging`` / ``get_logger``) for internal
  events such as cache hits, endpoint resolution and probe commands; these go
  to stderr and, optionally, a rotating log file.
* :class:`ProbeLog`, the per-run report sink. Everything the probe learns is
  written to ``bosprobe<timestamp>_<nnnnn>.log`` in the working directory and
  user-facing sections are mirrored to the terminal.
"""

from __future__ import annotations

import logging
import random
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, TextIO

import structlog
from rich.console import Console
from structlog.typing import Processor

from bosprobe.config.settings import LOG_FORMAT_JSON, LoggingSettings

BoundLogger = structlog.stdlib.BoundLogger

PROBE_LOG_PREFIX = "bosprobe"
PROBE_LOG_TIME_FORMAT = "%Y-%m-%d_%H_%M_%S"


def _build_processors(json_logs: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _build_handler(level: int, handler: logging.Handler) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def configure_logging(settings: LoggingSettings) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(settings.level)

    root_logger.addHandler(_build_handler(settings.level, logging.StreamHandler(sys.stderr)))

    if settings.file_path:
        root_logger.addHandler(
            _build_handler(
                settings.level,
                RotatingFileHandler(
                    settings.file_path,
                    maxBytes=settings.max_bytes,
                    backupCount=settings.backup_count,
                ),
            )
        )

    structlog.configure(
        processors=_build_processors(settings.format == LOG_FORMAT_JSON),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> BoundLogger:
    return structlog.get_logger(name)


def log_event(
    logger: BoundLogger,
    event: str,
    *,
    level: int = logging.INFO,
    message: str | None = None,
    **fields: Any,
) -> None:
    event_fields = {key: value for key, value in fields.items() if value is not None}
    event_logger = logger.bind(event=event)
    if event_fields:
        event_logger = event_logger.bind(**event_fields)
    event_logger.log(level, message or event)


def probe_log_name(now: datetime | None = None, suffix: int | None = None) -> str:
    stamp = (now or datetime.now()).strftime(PROBE_LOG_TIME_FORMAT)
    number = random.randint(0, 99999) if suffix is None else suffix
    return f"{PROBE_LOG_PREFIX}{stamp}_{number:05d}.log"


class ProbeLog:
    """Per-run report sink writing to a log file and mirroring to the terminal.

    When the log file cannot be created every write goes to standard output
    instead and :attr:`persisted` is ``False``; terminal mirroring is then
    suppressed so nothing is printed twice.
    """

    identity = "probe-log"

    def __init__(self, stream: TextIO, *, path: Path | None, console: Console) -> None:
        self._stream = stream
        self._path = path
        self._console = console
        self._closed = False

    @classmethod
    def create(
        cls,
        directory: Path | str = ".",
        *,
        console: Console | None = None,
        name: str | None = None,
    ) -> ProbeLog:
        console = console or Console(highlight=False, soft_wrap=True)
        path = Path(directory) / (name or probe_log_name())
        try:
            stream = path.open("w", encoding="utf-8")
        except OSError as exc:
            get_logger("bosprobe.log").warning(
                "probe_log.create_failed", path=str(path), error=str(exc)
            )
            return cls(sys.stdout, path=None, console=console)
        return cls(stream, path=path, console=console)

    @property
    def persisted(self) -> bool:
        return self._path is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def console(self) -> Console:
        return self._console

    def log(self, text: str) -> None:
        """Write ``text`` to the log only."""
        if self._closed:
            return
        self._stream.write(text)
        self._stream.flush()

    def tlog(self, text: str) -> None:
        """Write ``text`` to the log and mirror it to the terminal."""
        self.log(text)
        if self.persisted:
            self._console.out(text, end="", highlight=False)

    def exit(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.persisted:
            self._stream.close()

    close = exit


__all__ = [
    "BoundLogger",
    "ProbeLog",
    "configure_logging",
    "get_logger",
    "log_event",
    "probe_log_name",
]
