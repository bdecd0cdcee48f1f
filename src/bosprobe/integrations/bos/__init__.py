"""BOS storage client used by the probe."""

from bosprobe.integrations.bos.client import PROBE_USER_AGENT, BosClient
from bosprobe.integrations.bos.models import ServiceResponse

__all__ = ["PROBE_USER_AGENT", "BosClient", "ServiceResponse"]
