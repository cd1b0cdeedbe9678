"""
Reachability probe implementation using the aiohttp library.

This module provides an implementation of the ReachabilityProbe interface that
uses a shared aiohttp ClientSession to issue a single request under a fixed
total timeout, then classifies the outcome as reachable or blocked.
"""

import asyncio
import logging
import time
from typing import Dict, Optional

import aiohttp

from reachability_monitor.contracts import ReachabilityProbe
from reachability_monitor.domain import (
    FailureKind,
    HttpMethod,
    ProbeMode,
    ProbeResult,
    ProbeStatus,
    ProbeTarget,
)
from reachability_monitor.errors import (
    INVALID_URL_ERROR,
    TIMEOUT_ERROR,
    InvalidInputError,
    http_error_message,
)
from reachability_monitor.normalizer import normalize_url

# Module logger
logger = logging.getLogger(__name__)

PROBE_TIMEOUT_MS = 8000
DEFAULT_CONTENT_TYPE = "text/plain"


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


class AiohttpProbe(ReachabilityProbe):
    """
    A concrete implementation of ReachabilityProbe using the aiohttp library.

    This class handles the entire lifecycle of a single probe: normalization,
    timing, the bounded request and the classification of the response. In
    FULL mode the literal HTTP status decides the outcome. In OPAQUE mode the
    status is treated as unobservable, like a browser no-CORS request, and any
    response that settles without an error is reachable.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        mode: ProbeMode = ProbeMode.FULL,
        timeout_ms: int = PROBE_TIMEOUT_MS,
    ) -> None:
        """
        Initializes the probe with a shared aiohttp ClientSession.

        Args:
            session: An active aiohttp.ClientSession to be used for requests.
            mode: How much of the response the probe is allowed to observe.
            timeout_ms: Total time budget of one request, in milliseconds.
        """
        if not isinstance(timeout_ms, int) or timeout_ms < 1:
            raise ValueError("timeout_ms must be a positive integer.")

        self._session: aiohttp.ClientSession = session
        self._mode: ProbeMode = mode
        self._timeout: aiohttp.ClientTimeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)

    @property
    def mode(self) -> ProbeMode:
        return self._mode

    async def probe(self, target: ProbeTarget) -> ProbeResult:
        """
        Performs one HTTP request to the target and classifies the outcome.

        Args:
            target: The ProbeTarget to check.

        Returns:
            ProbeResult: The outcome of the probe. Never raises for network,
                timeout, status or input problems.
        """
        try:
            url = normalize_url(target.url)
        except InvalidInputError:
            logger.info(f"Rejected invalid probe URL: {target.url!r}")
            return ProbeResult(
                status=ProbeStatus.BLOCKED,
                http_status=None,
                latency_ms=0.0,
                error=INVALID_URL_ERROR,
                final_url=target.url,
                failure=FailureKind.INVALID_INPUT,
            )

        method: str = (target.method or HttpMethod.GET.value).upper()
        data: Optional[str] = None
        headers: Optional[Dict[str, str]] = None
        if target.payload:
            data = target.payload
            headers = {"Content-Type": target.content_type or DEFAULT_CONTENT_TYPE}

        logger.debug(f"Starting {self._mode.value} probe: {method} {url}")
        start_time: float = time.perf_counter()

        try:
            async with self._session.request(
                method,
                url,
                data=data,
                headers=headers,
                timeout=self._timeout,
                allow_redirects=True,
            ) as response:
                latency_ms = (time.perf_counter() - start_time) * 1000
                return self._classify(response, latency_ms)

        except asyncio.TimeoutError:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.info(f"Probe of {url} timed out after {latency_ms:.0f} ms")
            return ProbeResult(
                status=ProbeStatus.BLOCKED,
                http_status=None,
                latency_ms=latency_ms,
                error=TIMEOUT_ERROR,
                final_url=url,
                failure=FailureKind.TIMEOUT,
            )

        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000
            logger.info(f"Probe of {url} failed: {type(e).__name__}: {e}")
            return ProbeResult(
                status=ProbeStatus.BLOCKED,
                http_status=None,
                latency_ms=latency_ms,
                error=str(e) or type(e).__name__,
                final_url=url,
                failure=FailureKind.NETWORK_FAILURE,
            )

    def _classify(self, response: aiohttp.ClientResponse, latency_ms: float) -> ProbeResult:
        final_url = str(response.url)

        if self._mode is ProbeMode.OPAQUE:
            logger.debug(f"Opaque response from {final_url} in {latency_ms:.0f} ms")
            return ProbeResult(
                status=ProbeStatus.REACHABLE,
                http_status=None,
                latency_ms=latency_ms,
                error=None,
                final_url=final_url,
            )

        status_code: int = response.status
        if is_success_status(status_code):
            logger.debug(f"Reached {final_url} in {latency_ms:.0f} ms with status {status_code}")
            return ProbeResult(
                status=ProbeStatus.REACHABLE,
                http_status=status_code,
                latency_ms=latency_ms,
                error=None,
                final_url=final_url,
            )

        logger.info(f"Probe of {final_url} answered with status {status_code}")
        return ProbeResult(
            status=ProbeStatus.BLOCKED,
            http_status=status_code,
            latency_ms=latency_ms,
            error=http_error_message(status_code),
            final_url=final_url,
            failure=FailureKind.HTTP_ERROR,
        )
