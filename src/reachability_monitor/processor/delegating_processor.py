"""
Delegating result processor implementation.

This module provides a composite implementation of the ResultProcessor interface
that delegates processing to multiple child processors concurrently. It ensures
that failures in one processor don't affect the others.
"""

import asyncio
import logging
from typing import List

from reachability_monitor.contracts import ResultProcessor
from reachability_monitor.domain import EndpointCheck

# Module logger
logger = logging.getLogger(__name__)


class DelegatingResultProcessor(ResultProcessor):
    """
    A ResultProcessor that follows the Composite pattern.

    This class holds a list of other ResultProcessor instances and delegates both
    'process' and 'flush' to each of them concurrently. If one processor fails,
    the others are still executed.
    """

    def __init__(self, worker_id: str, processors: List[ResultProcessor]) -> None:
        """
        Initializes the delegator with a list of processors to delegate to.

        Args:
            worker_id: A unique identifier for this worker instance.
            processors: The processors called for every check.
        """
        self._worker_id: str = worker_id
        self._processors: List[ResultProcessor] = processors

    async def _process_with_one(self, processor: ResultProcessor, check: EndpointCheck) -> None:
        try:
            await processor.process(check)
        except Exception as e:
            logger.exception(
                f"Processor '{type(processor).__name__}' failed for endpoint {check.endpoint.url} with error: {e}",
            )

    async def _flush_one(self, processor: ResultProcessor) -> None:
        try:
            await processor.flush()
        except Exception as e:
            logger.exception(f"Processor '{type(processor).__name__}' failed to flush with error: {e}")

    async def process(self, check: EndpointCheck) -> None:
        """
        Processes a single EndpointCheck by delegating to all child processors.

        Args:
            check: The endpoint check to be processed by all child processors.
        """
        if not self._processors:
            return

        await asyncio.gather(*(self._process_with_one(p, check) for p in self._processors))

    async def flush(self) -> None:
        """
        Flushes every child processor.
        """
        if not self._processors:
            return

        await asyncio.gather(*(self._flush_one(p) for p in self._processors))
