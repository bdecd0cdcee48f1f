"""Region name to service domain lookup."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

DOMAIN_SUFFIX = ".bcebos.com"

BUILTIN_DOMAINS: Mapping[str, str] = {
    "bj": "bj.bcebos.com",
    "gz": "gz.bcebos.com",
    "su": "su.bcebos.com",
    "hk02": "hk-2.bcebos.com",
    "hkg": "hkg.bcebos.com",
    "yq": "bos.yq.baidubce.com",
}


class DomainProvider(Protocol):
    def domain_for(self, region: str) -> str | None: ...


class StaticDomains:
    def __init__(self, table: Mapping[str, str]) -> None:
        self._table = {str(region).lower(): domain for region, domain in table.items() if domain}

    def domain_for(self, region: str) -> str | None:
        return self._table.get(region.lower())


class RegionDomains:
    """Chain of domain providers consulted in order.

    ``domain_for`` returns ``None`` once every provider has declined; use
    :meth:`resolve` to get the ``<region>.bcebos.com`` fallback applied.
    """

    def __init__(self, providers: Iterable[DomainProvider]) -> None:
        self._providers = tuple(providers)

    @classmethod
    def from_config(cls, configured: Mapping[str, str] | None = None) -> RegionDomains:
        providers: list[DomainProvider] = []
        if configured:
            providers.append(StaticDomains(configured))
        providers.append(StaticDomains(BUILTIN_DOMAINS))
        return cls(providers)

    def domain_for(self, region: str) -> str | None:
        region = region.strip()
        if not region:
            return None
        for provider in self._providers:
            domain = provider.domain_for(region)
            if domain:
                return domain
        return None

    def resolve(self, region: str) -> str:
        return self.domain_for(region) or f"{region.strip()}{DOMAIN_SUFFIX}"


__all__ = [
    "BUILTIN_DOMAINS",
    "DOMAIN_SUFFIX",
    "DomainProvider",
    "RegionDomains",
    "StaticDomains",
]
