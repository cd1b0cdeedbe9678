"""
Read access to the probe history.

History is written only by the HistoryPersistenceProcessor. This repository
serves the HTTP API: newest-first queries filtered by application and
endpoint, and the timestamp of the last completed tick.
"""

from datetime import datetime
from typing import List, Optional

from asyncpg import Pool, Record

from reachability_monitor.domain import FailureKind, HistoryEntry, ProbeStatus

DEFAULT_HISTORY_LIMIT = 100
MAX_HISTORY_LIMIT = 1000

QUERY_HISTORY_SQL = """
    SELECT id, application_id, endpoint_id, status, http_status,
           latency_ms, error, url, created_at, failure
    FROM probe_history
    WHERE ($1::INTEGER IS NULL OR application_id = $1)
      AND ($2::INTEGER IS NULL OR endpoint_id = $2)
    ORDER BY created_at DESC, id DESC
    LIMIT $3;
"""

LAST_RUN_SQL = "SELECT MAX(created_at) FROM probe_history"


def map_history_entry(record: Record) -> HistoryEntry:
    """
    Converts a database record to a HistoryEntry domain object.
    """
    return HistoryEntry(
        id=record["id"],
        application_id=record["application_id"],
        endpoint_id=record["endpoint_id"],
        status=ProbeStatus(record["status"]),
        http_status=record["http_status"],
        latency_ms=record["latency_ms"],
        error=record["error"],
        url=record["url"],
        created_at=record["created_at"],
        failure=FailureKind(record["failure"]) if record["failure"] else None,
    )


class HistoryRepository:
    def __init__(self, pool: Pool) -> None:
        self._pool: Pool = pool

    async def query(
        self,
        application_id: Optional[int] = None,
        endpoint_id: Optional[int] = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> List[HistoryEntry]:
        """
        Returns history records, newest first.

        Args:
            application_id: Only return records of this application, if given.
            endpoint_id: Only return records of this endpoint, if given.
            limit: Maximum number of records, between 1 and MAX_HISTORY_LIMIT.

        Raises:
            ValueError: If the limit is out of range.
        """
        if not isinstance(limit, int) or not 1 <= limit <= MAX_HISTORY_LIMIT:
            raise ValueError(f"limit must be an integer between 1 and {MAX_HISTORY_LIMIT}.")

        async with self._pool.acquire() as conn:
            records = await conn.fetch(QUERY_HISTORY_SQL, application_id, endpoint_id, limit)
        return [map_history_entry(record) for record in records]

    async def last_run(self) -> Optional[datetime]:
        """
        Returns the timestamp of the newest history record, or None.
        """
        async with self._pool.acquire() as conn:
            return await conn.fetchval(LAST_RUN_SQL)
