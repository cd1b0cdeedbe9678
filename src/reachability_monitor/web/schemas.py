"""
Request and response schemas of the HTTP API.

Incoming JSON bodies and query strings are validated here, before any probe or
database call. Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from reachability_monitor.domain import (
    Application,
    Endpoint,
    FailureKind,
    HistoryEntry,
    HttpMethod,
    ProbeResult,
    ProbeStatus,
    ProbeTarget,
    SchedulerStatus,
)
from reachability_monitor.errors import InvalidInputError
from reachability_monitor.normalizer import normalize_url
from reachability_monitor.repository.history_repository import (
    DEFAULT_HISTORY_LIMIT,
    MAX_HISTORY_LIMIT,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self, exclude_none: bool = False) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)


class ServerCheckRequest(ApiModel):
    url: str
    method: HttpMethod = HttpMethod.GET
    payload: Optional[str] = None
    content_type: Optional[str] = None
    # Sent by the UI for its own bookkeeping. Ad hoc checks are not persisted.
    application_id: Optional[int] = None
    endpoint_id: Optional[int] = None

    @field_validator("url")
    @classmethod
    def _normalize_url(cls, value: str) -> str:
        try:
            return normalize_url(value)
        except InvalidInputError as err:
            raise ValueError(str(err)) from err

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if value is None or value == "":
            return HttpMethod.GET
        return value.upper() if isinstance(value, str) else value

    def to_target(self) -> ProbeTarget:
        return ProbeTarget(
            url=self.url,
            method=self.method.value,
            payload=self.payload,
            content_type=self.content_type,
        )


class ServerCheckResponse(ApiModel):
    status: ProbeStatus
    http_status: Optional[int] = None
    latency_ms: float
    error: Optional[str] = None
    url: str

    @classmethod
    def from_result(cls, result: ProbeResult) -> "ServerCheckResponse":
        return cls(
            status=result.status,
            http_status=result.http_status,
            latency_ms=result.latency_ms,
            error=result.error,
            url=result.final_url,
        )


class HistoryQuery(ApiModel):
    application_id: Optional[int] = Field(default=None, ge=1)
    endpoint_id: Optional[int] = Field(default=None, ge=1)
    limit: int = Field(default=DEFAULT_HISTORY_LIMIT, ge=1, le=MAX_HISTORY_LIMIT)


class HistoryEntryOut(ApiModel):
    id: int
    application_id: int
    endpoint_id: int
    status: ProbeStatus
    http_status: Optional[int] = None
    latency_ms: float
    error: Optional[str] = None
    url: str
    created_at: datetime
    failure: Optional[FailureKind] = None

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "HistoryEntryOut":
        return cls(**entry._asdict())


class SchedulerStatusOut(ApiModel):
    last_run: Optional[datetime] = None
    interval_ms: int

    @classmethod
    def from_status(cls, status: SchedulerStatus) -> "SchedulerStatusOut":
        return cls(last_run=status.last_run, interval_ms=status.interval_ms)


class EndpointOut(ApiModel):
    id: int
    application_id: int
    label: str
    url: str
    kind: str
    method: Optional[str] = None

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint) -> "EndpointOut":
        return cls(
            id=endpoint.id,
            application_id=endpoint.application_id,
            label=endpoint.label,
            url=endpoint.url,
            kind=endpoint.kind.value,
            method=endpoint.method,
        )


class ApplicationOut(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    is_default: bool
    created_at: datetime
    endpoints: List[EndpointOut]

    @classmethod
    def from_application(cls, application: Application) -> "ApplicationOut":
        return cls(
            id=application.id,
            name=application.name,
            description=application.description,
            category=application.category.value,
            is_default=application.is_default,
            created_at=application.created_at,
            endpoints=[EndpointOut.from_endpoint(e) for e in application.endpoints],
        )
