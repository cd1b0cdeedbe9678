"""
Core worker implementation for the reachability monitor.

This module provides the ProbeWorker class, which orchestrates scheduled
re-checks by coordinating the scheduler, probe, and processor components.
Each tick probes every endpoint concurrently, with a bounded number of
requests in flight, and hands each outcome to the result processor.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from .contracts import ReachabilityProbe, ResultProcessor, WorkScheduler
from .domain import Endpoint, EndpointCheck, HttpMethod, ProbeTarget, SchedulerStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProbeWorker:
    """
    Runs the probe against every endpoint handed out by the scheduler.

    The worker consumes ticks one at a time: a tick is fully probed and its
    results flushed before the next tick is requested, so ticks never overlap.
    """

    def __init__(
        self,
        worker_id: str,
        scheduler: WorkScheduler,
        probe: ReachabilityProbe,
        processor: ResultProcessor,
        num_workers: int,
        last_run: Optional[datetime] = None,
    ) -> None:
        """
        Initializes a new ProbeWorker instance.

        Args:
            worker_id: A unique identifier for this worker instance.
            scheduler: Component that provides the endpoints of each tick.
            probe: Component that performs the reachability checks.
            processor: Component that processes the results of checks.
            num_workers: Maximum number of probes in flight at once.
            last_run: Timestamp of the last completed tick, if one is known.
        """
        if not isinstance(num_workers, int) or num_workers < 1:
            raise ValueError("num_workers must be a positive integer.")

        self._worker_id: str = worker_id
        self._scheduler: WorkScheduler = scheduler
        self._probe: ReachabilityProbe = probe
        self._processor: ResultProcessor = processor
        self._num_workers: int = num_workers
        self._logger: logging.Logger = logging.getLogger(__name__)
        self._semaphore: asyncio.Semaphore = asyncio.Semaphore(num_workers)
        self._last_run: Optional[datetime] = last_run

    def status(self) -> SchedulerStatus:
        """
        Returns the last completed run and the interval, for countdown display.
        """
        return SchedulerStatus(last_run=self._last_run, interval=self._scheduler.interval)

    async def _check_endpoint(self, endpoint: Endpoint, checked_at: datetime) -> None:
        """
        Probes a single endpoint and passes the outcome to the processor.

        Failures of the processor are logged so that they never abort the tick.

        Args:
            endpoint: The endpoint to probe.
            checked_at: The timestamp of the tick this check belongs to.
        """
        target = ProbeTarget(url=endpoint.url, method=endpoint.method or HttpMethod.GET.value)
        try:
            async with self._semaphore:
                result = await self._probe.probe(target)
            await self._processor.process(
                EndpointCheck(endpoint=endpoint, result=result, checked_at=checked_at)
            )
        except Exception as e:
            self._logger.exception(f"Pipeline failed for endpoint {endpoint.id} with error: {e}")

    async def run_tick(self, batch: List[Endpoint]) -> None:
        """
        Probes every endpoint of a tick and records the tick as completed.

        Args:
            batch: The endpoints handed out by the scheduler for this tick.
        """
        checked_at = _utcnow()
        self._logger.info(f"Running tick at {checked_at.isoformat()} for {len(batch)} endpoints.")

        await asyncio.gather(*(self._check_endpoint(endpoint, checked_at) for endpoint in batch))

        try:
            await self._processor.flush()
        except Exception as e:
            self._logger.exception(f"Flushing results of the tick failed with error: {e}")

        self._last_run = checked_at
        self._logger.info(f"Tick started at {checked_at.isoformat()} completed.")

    async def start(self) -> None:
        """
        Starts the scheduler and runs ticks until it is stopped.

        Raises:
            Exception: If the scheduling loop fails for any reason.
        """
        self._logger.info(f"Starting probe worker with {self._num_workers} concurrent probes.")

        try:
            await self._scheduler.start()

            async for batch in self._scheduler:
                await self.run_tick(batch)

        except Exception as e:
            self._logger.error(f"Scheduling loop failed: {e}")
            raise

    async def stop(self) -> None:
        """
        Gracefully stops the worker.

        The scheduler is told to stop producing ticks and the result processor
        is flushed so that no buffered history is lost.
        """
        self._logger.info("Initiating graceful shutdown...")

        self._logger.info("Stopping scheduler...")
        await self._scheduler.stop()

        self._logger.info("Flushing results processor...")
        await self._processor.flush()

        self._logger.info("Worker shutdown complete")
