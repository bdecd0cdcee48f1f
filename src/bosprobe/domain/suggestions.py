"""Localized advice for probe outcomes."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from typing import Any

from bosprobe.config.settings import DEFAULT_LOCALE
from bosprobe.domain.checks.models import NetStatus
from bosprobe.infrastructure.errors import (
    CLIENT_NAMESPACE,
    PROBE_NAMESPACE,
    SERVICE_ACCESS_DENIED,
    SERVICE_NAMESPACE,
    code_name,
    code_namespace,
)
from bosprobe.infrastructure.logging import get_logger
from bosprobe.resources import read_messages

RATE_LIMIT_MARKER = "request rate is too high"

_LOGGER = get_logger("bosprobe.messages")

# Last-resort texts for when even the catalog's own ``special`` table is missing.
_FALLBACK_DEFAULT = "BOSProbe has no handling advice for this error yet!"


class MessageCatalog:
    """Nested TOML message tables addressed by dotted keys.

    ``text("shared.service.NoSuchKey")`` walks ``[shared.service]`` and
    returns ``None`` when any step is missing.
    """

    def __init__(self, locale: str, data: Mapping[str, Any]) -> None:
        self.locale = locale
        self._data = data

    @classmethod
    def load(cls, locale: str | None = None) -> MessageCatalog:
        requested = (locale or DEFAULT_LOCALE).strip().lower()
        raw = read_messages(requested)
        if raw is None:
            _LOGGER.warning("messages.unknown_locale", locale=requested, fallback=DEFAULT_LOCALE)
            requested = DEFAULT_LOCALE
            raw = read_messages(DEFAULT_LOCALE) or ""
        return cls(requested, tomllib.loads(raw))

    def text(self, key: str) -> str | None:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, str) else None

    def format(self, key: str, **values: Any) -> str:
        """Render ``key`` with ``values``; the key itself stands in when missing."""

        template = self.text(key)
        if template is None:
            return key
        return template.format(**values) if values else template


class SuggestionEngine:
    def __init__(self, catalog: MessageCatalog) -> None:
        self.catalog = catalog

    def _lookup(self, code: str, error: BaseException | str | None) -> str:
        namespace = code_namespace(code)
        name = code_name(code)

        if namespace == PROBE_NAMESPACE:
            message = self.catalog.text(f"probe.{name}")
            if message:
                return message

        if namespace in (CLIENT_NAMESPACE, SERVICE_NAMESPACE):
            message = self.catalog.text(f"shared.{namespace}.{name}")
            if message:
                return message

        if str(code) == SERVICE_ACCESS_DENIED:
            key = (
                "special.access_denied_rate"
                if error is not None and RATE_LIMIT_MARKER in str(error)
                else "special.access_denied_generic"
            )
            message = self.catalog.text(key)
            if message:
                return message

        return self.catalog.text("special.default") or _FALLBACK_DEFAULT

    def suggest(self, code: str, error: BaseException | str | None = None) -> str:
        message = self._lookup(str(code), error).rstrip("\n")
        footer = self.catalog.text("special.submit_ticket")
        return f"{message}\n\n{footer}" if footer else message

    def network_prompt(self, status: NetStatus) -> str | None:
        if status is NetStatus.ENDPOINT_UNREACHABLE:
            return self.catalog.text("network.endpoint_unreachable_prompt")
        if status is NetStatus.CLIENT_OFFLINE:
            return self.catalog.text("network.client_offline_prompt")
        return None

    def network_message(self, status: NetStatus) -> str | None:
        keys = {
            NetStatus.REACHABLE: "network.reachable",
            NetStatus.ENDPOINT_UNREACHABLE: "network.endpoint_unreachable",
            NetStatus.CLIENT_OFFLINE: "network.client_offline",
        }
        key = keys.get(status)
        return self.catalog.text(key) if key else None


__all__ = ["RATE_LIMIT_MARKER", "MessageCatalog", "SuggestionEngine"]
