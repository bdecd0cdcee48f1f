"""Bucket endpoint discovery."""

from bosprobe.domain.endpoint.cache import EndpointCache
from bosprobe.domain.endpoint.regions import RegionDomains
from bosprobe.domain.endpoint.resolver import EndpointResolution, EndpointResolver

__all__ = ["EndpointCache", "EndpointResolution", "EndpointResolver", "RegionDomains"]
