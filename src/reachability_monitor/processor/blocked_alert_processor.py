"""
Alerting processor for blocked endpoints.

The probe only classifies reachability. Whether a blocked endpoint is worth an
alert is decided here: a blocked endpoint is reported once when it becomes
blocked and once when it becomes reachable again, so that a steadily blocked
endpoint does not flood the logs every tick.
"""

import logging
from typing import Dict

from reachability_monitor.contracts import ResultProcessor
from reachability_monitor.domain import EndpointCheck

# Module logger
logger = logging.getLogger(__name__)


class BlockedAlertProcessor(ResultProcessor):
    """
    Logs a warning when an endpoint changes from reachable to blocked.

    Attributes:
        _last_reachable: Last known reachability per endpoint id.
    """

    def __init__(self, worker_id: str) -> None:
        self._worker_id: str = worker_id
        self._last_reachable: Dict[int, bool] = {}

    async def process(self, check: EndpointCheck) -> None:
        endpoint = check.endpoint
        reachable = check.result.is_reachable
        previous = self._last_reachable.get(endpoint.id)
        self._last_reachable[endpoint.id] = reachable

        if previous is reachable:
            return

        if not reachable:
            logger.warning(
                f"Endpoint '{endpoint.label}' ({endpoint.url}) of application "
                f"{endpoint.application_id} is blocked: {check.result.error}"
            )
        elif previous is False:
            logger.info(f"Endpoint '{endpoint.label}' ({endpoint.url}) is reachable again.")

    async def flush(self) -> None:
        # Nothing is buffered
        pass
