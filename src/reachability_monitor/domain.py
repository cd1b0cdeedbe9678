"""
Domain models for the reachability monitor.

This module defines the core data structures used throughout the application:
probe targets and results, the applications and endpoints the scheduler checks,
and the history records it persists. These models are immutable and flow
unchanged from the probe through the result processing pipeline.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class HttpMethod(str, Enum):
    """
    Defines supported HTTP methods as a type-safe enumeration.

    Inheriting from 'str' allows enum members to behave like strings,
    making them compatible with libraries expecting string values.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ProbeStatus(str, Enum):
    """Reachability classification of a single probe."""

    REACHABLE = "reachable"
    BLOCKED = "blocked"


class ProbeMode(str, Enum):
    """
    Visibility the probe has over the response.

    FULL is the server-side view: the literal HTTP status decides the outcome.
    OPAQUE mirrors a browser no-CORS request: the status cannot be read, so any
    response that settles without an error counts as reachable.
    """

    FULL = "full"
    OPAQUE = "opaque"


class FailureKind(str, Enum):
    """Why a probe was classified as blocked."""

    INVALID_INPUT = "invalid_input"
    NETWORK_FAILURE = "network_failure"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"


class AppCategory(str, Enum):
    CLOUD_STORAGE = "CLOUD_STORAGE"
    FILE_TRANSFER = "FILE_TRANSFER"
    SOCIAL_MEDIA = "SOCIAL_MEDIA"
    SAAS = "SAAS"
    OTHER = "OTHER"


class EndpointKind(str, Enum):
    WEB = "WEB"
    API = "API"
    FILE = "FILE"


class ProbeTarget(NamedTuple):
    """
    A single URL to probe, as supplied by a caller.

    Attributes:
        url: Raw URL text. It is normalized by the probe before use.
        method: The HTTP method to use for the request.
        payload: Optional request body.
        content_type: Content type of the payload, text/plain when omitted.
    """

    url: str
    method: str = HttpMethod.GET.value
    payload: Optional[str] = None
    content_type: Optional[str] = None


class ProbeResult(NamedTuple):
    """
    The terminal outcome of one probe invocation.

    Attributes:
        status: Whether the target was reachable or blocked.
        http_status: The HTTP status code, when one was received and observable.
        latency_ms: Milliseconds between the request start and its settlement.
        error: Human-readable reason for a blocked result, or None.
        final_url: The URL the request resolved to after redirects.
        failure: The error taxonomy kind for a blocked result, or None.
    """

    status: ProbeStatus
    http_status: Optional[int]
    latency_ms: float
    error: Optional[str]
    final_url: str
    failure: Optional[FailureKind] = None

    @property
    def is_reachable(self) -> bool:
        return self.status is ProbeStatus.REACHABLE


class Endpoint(NamedTuple):
    """
    A probed URL belonging to an application.

    This data structure corresponds to the columns of the
    'application_endpoints' table.
    """

    id: int
    application_id: int
    label: str
    url: str
    kind: EndpointKind
    method: Optional[str]


class Application(NamedTuple):
    """An application grouping several endpoints, with its endpoints attached."""

    id: int
    name: str
    description: Optional[str]
    category: AppCategory
    is_default: bool
    created_at: datetime
    endpoints: Tuple[Endpoint, ...]


class EndpointCheck(NamedTuple):
    """
    The result of probing one endpoint during one scheduler tick.

    This object is passed through the result processing pipeline.

    Attributes:
        endpoint: The endpoint that was probed.
        result: The probe outcome.
        checked_at: The timestamp of the tick this check belongs to.
    """

    endpoint: Endpoint
    result: ProbeResult
    checked_at: datetime


class HistoryEntry(NamedTuple):
    """A persisted probe result as read back from the 'probe_history' table."""

    id: int
    application_id: int
    endpoint_id: int
    status: ProbeStatus
    http_status: Optional[int]
    latency_ms: float
    error: Optional[str]
    url: str
    created_at: datetime
    failure: Optional[FailureKind] = None


class SchedulerStatus(NamedTuple):
    """
    What observers need to compute a countdown to the next run.

    Attributes:
        last_run: Timestamp of the last completed tick, or None before the first one.
        interval: Time between two ticks.
    """

    last_run: Optional[datetime]
    interval: timedelta

    @property
    def interval_ms(self) -> int:
        return int(self.interval.total_seconds() * 1000)
