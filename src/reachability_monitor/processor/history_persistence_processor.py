import asyncio
import logging
from typing import List

from asyncpg import Pool, exceptions

from reachability_monitor.contracts import ResultProcessor
from reachability_monitor.domain import EndpointCheck

# Module logger
logger = logging.getLogger(__name__)

INSERT_HISTORY_SQL = """
    INSERT INTO probe_history (
        application_id, endpoint_id, status, http_status,
        latency_ms, error, url, created_at, failure
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9);
"""


class HistoryPersistenceProcessor(ResultProcessor):
    """
    Appends EndpointCheck results to the 'probe_history' table in batches.

    Rows are only ever inserted. A record is never updated or deleted, so the
    history of an endpoint grows by exactly one row per tick.
    """

    def __init__(self, worker_id: str, pool: Pool, max_buffer_size: int = 50) -> None:
        """
        Initializes the processor.

        Args:
            worker_id: A unique identifier for the worker using this processor.
            pool: The asyncpg connection pool.
            max_buffer_size: The maximum number of results to buffer in memory
                before a flush is automatically triggered.
        """
        if not isinstance(max_buffer_size, int) or max_buffer_size < 1:
            raise ValueError("max_buffer_size must be a positive integer.")

        self._worker_id: str = worker_id
        self._pool: Pool = pool
        self._max_buffer_size: int = max_buffer_size

        # The buffer stores tuples ready for insertion.
        self._buffer: List[tuple] = []
        self._lock = asyncio.Lock()

    def _transform_check(self, check: EndpointCheck) -> tuple:
        """
        Transforms an EndpointCheck into a tuple matching the 'probe_history' schema.
        """
        result = check.result
        return (
            check.endpoint.application_id,
            check.endpoint.id,
            result.status.value,
            result.http_status,
            result.latency_ms,
            result.error,
            result.final_url,
            check.checked_at,
            result.failure.value if result.failure else None,
        )

    async def process(self, check: EndpointCheck) -> None:
        """
        Transforms and adds a check to the internal buffer. If the buffer
        reaches the maximum size, it triggers a flush to the database.
        """
        record_to_insert = self._transform_check(check)

        async with self._lock:
            self._buffer.append(record_to_insert)
            should_flush = len(self._buffer) >= self._max_buffer_size

        if should_flush:
            logger.info(
                f"History buffer limit of {self._max_buffer_size} reached. Flushing automatically."
            )
            await self.flush()

    async def flush(self) -> None:
        """
        Persists all currently buffered records to the database in a single batch.
        This method is safe to call even if the buffer is empty.
        """
        async with self._lock:
            if not self._buffer:
                return

            # Copy and clear the buffer to keep the lock short.
            records_to_insert = list(self._buffer)
            self._buffer.clear()

        logger.info(f"Flushing {len(records_to_insert)} history records to the database.")

        try:
            async with self._pool.acquire(timeout=10.0) as conn:
                async with conn.transaction():
                    await conn.executemany(INSERT_HISTORY_SQL, records_to_insert)

            logger.debug(f"Successfully flushed {len(records_to_insert)} history records.")
        except asyncio.TimeoutError:
            logger.error(
                f"Timeout during DB flush. {len(records_to_insert)} history records may be lost."
            )
        except exceptions.PostgresError as e:
            logger.error(
                f"Database error during batch flush of history: {e}. "
                f"{len(records_to_insert)} history records may be lost."
            )
        except Exception as e:
            logger.error(
                f"An unexpected error occurred during history flush: {e}. "
                f"{len(records_to_insert)} history records may be lost."
            )
