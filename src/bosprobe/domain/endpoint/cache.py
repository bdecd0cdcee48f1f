"""Persistent bucket -> endpoint cache with lazy expiry.

The store is an INI file with one section per bucket::

    [my-bucket]
    endpoint = bj.bcebos.com|1718000000

where the number after ``|`` is the absolute Unix expiry time.
"""

from __future__ import annotations

import configparser
import logging
import time
from collections.abc import Callable
from pathlib import Path

from bosprobe.config.settings import DEFAULT_CACHE_TTL
from bosprobe.infrastructure.locks import ReadWriteLock
from bosprobe.infrastructure.logging import get_logger, log_event

ENDPOINT_OPTION = "endpoint"
_SEPARATOR = "|"

_LOGGER = get_logger("bosprobe.cache")


def format_entry(endpoint: str, expiry: int) -> str:
    return f"{endpoint}{_SEPARATOR}{expiry}"


def parse_entry(raw: str | None) -> tuple[str, int] | None:
    """Split ``domain|expiry``; ``None`` for anything malformed or negative."""

    if not raw:
        return None
    parts = raw.strip().strip('"').split(_SEPARATOR)
    if len(parts) != 2 or not parts[0]:
        return None
    try:
        expiry = int(parts[1])
    except ValueError:
        return None
    if expiry < 0:
        return None
    return parts[0], expiry


class EndpointCache:
    identity = "endpoint-cache"

    def __init__(self, path: Path | str | None, *, clock: Callable[[], float] = time.time) -> None:
        self._path = Path(path) if path is not None else None
        self._clock = clock
        self._lock = ReadWriteLock()
        self._entries: dict[str, str] = {}
        self._dirty = False
        self._load()

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def dirty(self) -> bool:
        return self._dirty

    def _load(self) -> None:
        if self._path is None or not self._path.is_file():
            return
        parser = configparser.ConfigParser(interpolation=None)
        try:
            with self._path.open(encoding="utf-8") as handle:
                parser.read_file(handle)
        except (configparser.Error, UnicodeDecodeError, OSError) as exc:
            log_event(
                _LOGGER,
                "cache.corrupt",
                level=logging.WARNING,
                path=str(self._path),
                error=str(exc),
            )
            self._discard_store()
            return

        with self._lock.write():
            for section in parser.sections():
                self._entries[section] = parser.get(section, ENDPOINT_OPTION, fallback="")

    def _discard_store(self) -> None:
        assert self._path is not None
        try:
            self._path.unlink()
        except OSError as exc:
            log_event(
                _LOGGER,
                "cache.delete_failed",
                level=logging.WARNING,
                path=str(self._path),
                error=str(exc),
            )

    def get(self, bucket: str) -> tuple[str, bool]:
        if not bucket:
            return "", False
        with self._lock.read():
            raw = self._entries.get(bucket)
        if raw is None:
            return "", False

        parsed = parse_entry(raw)
        if parsed is not None and parsed[1] >= self._clock():
            log_event(_LOGGER, "cache.hit", level=logging.DEBUG, bucket=bucket, endpoint=parsed[0])
            return parsed[0], True

        self._evict(bucket, raw)
        return "", False

    def _evict(self, bucket: str, raw: str) -> None:
        # A concurrent put may have replaced the stale value since it was read.
        with self._lock.write():
            if self._entries.get(bucket) != raw:
                return
            del self._entries[bucket]
            self._dirty = True
        log_event(_LOGGER, "cache.evict", level=logging.DEBUG, bucket=bucket)

    def put(self, bucket: str, endpoint: str, ttl_seconds: int = DEFAULT_CACHE_TTL) -> bool:
        if not bucket or not endpoint:
            return False
        if ttl_seconds <= 0:
            ttl_seconds = DEFAULT_CACHE_TTL
        expiry = int(self._clock()) + int(ttl_seconds)
        with self._lock.write():
            self._entries[bucket] = format_entry(endpoint, expiry)
            self._dirty = True
        return True

    def delete(self, bucket: str) -> None:
        if not bucket:
            return
        with self._lock.write():
            if self._entries.pop(bucket, None) is not None:
                self._dirty = True

    def save(self) -> bool:
        """Write the store if anything changed; returns ``False`` on I/O failure."""

        if self._path is None or not self._dirty:
            return True
        with self._lock.write():
            parser = configparser.ConfigParser(interpolation=None)
            for bucket, raw in sorted(self._entries.items()):
                parser[bucket] = {ENDPOINT_OPTION: raw}
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                with self._path.open("w", encoding="utf-8") as handle:
                    parser.write(handle)
            except OSError as exc:
                log_event(
                    _LOGGER,
                    "cache.save_failed",
                    level=logging.WARNING,
                    path=str(self._path),
                    error=str(exc),
                )
                return False
            self._dirty = False
        return True

    def close(self) -> None:
        self.save()

    exit = close


__all__ = ["ENDPOINT_OPTION", "EndpointCache", "format_entry", "parse_entry"]
