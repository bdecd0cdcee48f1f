"""Wire models for the BOS REST API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUEST_ID_HEADER = "x-bce-request-id"
DEBUG_ID_HEADER = "x-bce-debug-id"


@dataclass(frozen=True)
class ServiceResponse:
    """Status line and tracing identifiers of one service response."""

    status: int
    request_id: str = ""
    debug_id: str = ""

    @classmethod
    def from_headers(cls, status: int, headers: Mapping[str, str]) -> ServiceResponse:
        return cls(
            status=status,
            request_id=headers.get(REQUEST_ID_HEADER, "") or "",
            debug_id=headers.get(DEBUG_ID_HEADER, "") or "",
        )


class ServiceErrorPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str = ""
    message: str = ""
    request_id: str = Field(default="", alias="requestId")

    @field_validator("code", "message", "request_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return "" if value is None else str(value)


class BucketLocation(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location_constraint: str = Field(default="", alias="locationConstraint")


class ObjectSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str
    size: int | None = None


class ListObjectsResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    max_keys: int | None = Field(default=None, alias="maxKeys")
    contents: list[ObjectSummary] = Field(default_factory=list)

    @field_validator("contents", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


__all__ = [
    "DEBUG_ID_HEADER",
    "REQUEST_ID_HEADER",
    "BucketLocation",
    "ListObjectsResult",
    "ObjectSummary",
    "ServiceErrorPayload",
    "ServiceResponse",
]
