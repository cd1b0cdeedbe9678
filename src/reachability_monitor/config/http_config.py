"""
HTTP client configuration module for the reachability monitor.

This module creates the aiohttp client session shared by every probe.
"""

import logging

import aiohttp

from reachability_monitor.config import AppContext
from reachability_monitor.config.constants import DEFAULT_USER_AGENT

# Module logger
logger = logging.getLogger(__name__)


def get_http_session(context: AppContext) -> aiohttp.ClientSession:
    """
    Create the HTTP client session used by the probes.

    The per-request timeout is set by the probe itself. The connector limit
    matches the number of probes allowed in flight.

    Args:
        context: Configuration context containing HTTP client settings.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    connector = aiohttp.TCPConnector(limit=max(context.worker_number, 1))
    logger.debug(f"Creating HTTP session with a connection limit of {connector.limit}.")
    return aiohttp.ClientSession(
        connector=connector,
        headers={"User-Agent": DEFAULT_USER_AGENT},
    )
