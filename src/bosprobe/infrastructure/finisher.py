"""Process-wide registry of resources that must be released on interrupt."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

_LOGGER = logging.getLogger("bosprobe.finisher")


@runtime_checkable
class Finishable(Protocol):
    identity: str

    def exit(self) -> None: ...


class Finisher:
    """Ordered set of :class:`Finishable` objects keyed by ``identity``.

    ``execute`` calls ``exit`` on each registered object in insertion order
    and then empties the registry, so running it twice is harmless.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, Finishable] = {}

    def insert(self, item: Finishable) -> None:
        with self._lock:
            self._items[item.identity] = item

    def remove(self, item: Finishable | str) -> None:
        identity = item if isinstance(item, str) else item.identity
        with self._lock:
            self._items.pop(identity, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._items

    def execute(self) -> None:
        with self._lock:
            items = list(self._items.values())
            self._items.clear()
        for item in items:
            try:
                item.exit()
            except Exception as exc:  # one failing resource must not block the rest
                _LOGGER.warning("finisher.exit_failed identity=%s error=%s", item.identity, exc)


FINISHER = Finisher()


__all__ = ["FINISHER", "Finishable", "Finisher"]
