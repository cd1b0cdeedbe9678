"""
Fixed-interval implementation of the WorkScheduler interface.

This module provides a scheduler that fires a tick every `interval` and, on
each tick, loads from PostgreSQL every endpoint belonging to a default
application. Ticks never overlap: the consumer awaits a whole tick before
asking for the next one, and slots missed while a tick overran are skipped.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from asyncpg import Pool, Record

from reachability_monitor.contracts import WorkScheduler
from reachability_monitor.domain import Endpoint, EndpointKind

# Module logger
logger = logging.getLogger(__name__)

# SQL query to fetch every endpoint of the default applications
DEFAULT_ENDPOINTS_QUERY = """
                          SELECT e.id,
                                 e.application_id,
                                 e.label,
                                 e.url,
                                 e.kind,
                                 e.method
                          FROM application_endpoints e
                                   JOIN applications a ON a.id = e.application_id
                          WHERE a.is_default = TRUE
                          ORDER BY e.application_id, e.id
                          """


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def map_endpoint(record: Record) -> Endpoint:
    """
    Converts a database record to an Endpoint domain object.

    Args:
        record: A database record containing endpoint information.

    Returns:
        Endpoint: A domain object representing a probed endpoint.
    """
    method: Optional[str] = record["method"]
    return Endpoint(
        id=record["id"],
        application_id=record["application_id"],
        label=record["label"],
        url=record["url"],
        kind=EndpointKind(record["kind"]),
        method=method.upper() if method else None,
    )


class IntervalScheduler(WorkScheduler):
    """
    A PostgreSQL-backed scheduler that yields one batch of endpoints per tick.

    The first tick fires immediately, or at `last_run + interval` when a
    previous run is known. Afterwards ticks are aligned on the interval grid.
    """

    def __init__(
        self,
        worker_id: str,
        pool: Pool,
        interval: timedelta,
        last_run: Optional[datetime] = None,
        recover_time: int = 10,
        max_sleep_duration: int = 60,
    ) -> None:
        """
        Initializes a new IntervalScheduler instance.

        Args:
            worker_id: A unique identifier for this worker instance.
            pool: A connection pool to the PostgreSQL database.
            interval: Time between two ticks.
            last_run: Timestamp of the last completed tick, if one is known.
            recover_time: Time in seconds to wait after an error before retrying.
            max_sleep_duration: Longest single sleep, so that stop() is noticed.

        Raises:
            ValueError: If any of the parameters have invalid values.
        """
        if not isinstance(worker_id, str) or not worker_id:
            raise ValueError("worker_id must be provided and must be not blank.")

        if not isinstance(interval, timedelta) or interval <= timedelta(0):
            raise ValueError("interval must be a positive timedelta.")

        if not isinstance(recover_time, int) or recover_time < 1:
            raise ValueError("recover_time must be a positive integer.")

        self._worker_id: str = worker_id
        self._pool: Pool = pool
        self._interval: timedelta = interval
        self._recover_time: int = recover_time
        self._max_sleep_duration: int = max_sleep_duration
        self._is_running: bool = False
        self._has_fired: bool = False
        self._next_fire_at: Optional[datetime] = last_run + interval if last_run else None

    @property
    def interval(self) -> timedelta:
        return self._interval

    @property
    def next_fire_at(self) -> Optional[datetime]:
        return self._next_fire_at

    async def start(self) -> None:
        """
        Prepares the scheduler to start yielding ticks.
        """
        logger.info(f"Starting scheduler (interval: {self._interval})...")
        self._is_running = True

    async def stop(self) -> None:
        """
        Gracefully stops the scheduler.
        """
        logger.info("Closing scheduler...")
        self._is_running = False

    def _advance(self, now: datetime) -> datetime:
        """
        Computes the next fire time after a tick fired at `now`.

        Slots that already passed are skipped rather than replayed.
        """
        next_fire_at = (self._next_fire_at or now) + self._interval
        skipped = 0
        while next_fire_at <= now:
            next_fire_at += self._interval
            skipped += 1

        if skipped and self._has_fired:
            logger.warning(f"Previous tick overran its slot. Skipped {skipped} tick(s).")
        elif skipped:
            logger.info(f"Resuming after downtime. Skipped {skipped} missed tick(s).")
        return next_fire_at

    async def __anext__(self) -> List[Endpoint]:
        """
        Waits for the next tick and returns the endpoints to probe.

        Returns:
            List[Endpoint]: Every endpoint of the default applications.

        Raises:
            StopAsyncIteration: When the scheduler has been stopped.
        """
        while self._is_running:
            now = _utcnow()
            if self._next_fire_at is not None and now < self._next_fire_at:
                # Sleep in bounded steps so that stop() is observed
                sleep_duration_seconds = min(
                    (self._next_fire_at - now).total_seconds(), self._max_sleep_duration
                )
                logger.debug(f"Next tick in {sleep_duration_seconds:.2f} seconds.")
                await asyncio.sleep(sleep_duration_seconds)
                continue

            try:
                async with self._pool.acquire() as conn:
                    records = await conn.fetch(DEFAULT_ENDPOINTS_QUERY)
            except Exception as e:
                # Log the error and retry the same tick
                logger.error(f"Error loading endpoints: {e}")
                await asyncio.sleep(self._recover_time)
                continue

            self._next_fire_at = self._advance(now)
            self._has_fired = True
            batch = [map_endpoint(record) for record in records]
            logger.info(f"Tick fired with {len(batch)} endpoints. Next tick at {self._next_fire_at}.")
            return batch

        # If we're no longer running, signal the end of iteration
        raise StopAsyncIteration
