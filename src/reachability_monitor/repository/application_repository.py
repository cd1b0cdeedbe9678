"""
Read-only access to applications and their endpoints.
"""

from collections import OrderedDict
from typing import Dict, List, Optional, Sequence

from asyncpg import Pool, Record

from reachability_monitor.domain import AppCategory, Application, Endpoint, EndpointKind

APPLICATIONS_SQL = """
    SELECT a.id, a.name, a.description, a.category, a.is_default, a.created_at,
           e.id AS endpoint_id, e.label, e.url, e.kind, e.method
    FROM applications a
             LEFT JOIN application_endpoints e ON e.application_id = a.id
    WHERE ($1::INTEGER IS NULL OR a.id = $1)
    ORDER BY a.created_at DESC, a.id DESC, e.id;
"""


def map_applications(records: Sequence[Record]) -> List[Application]:
    """
    Groups joined application/endpoint rows into Application objects.

    Rows must be ordered by application. An application without endpoints
    comes back as a single row whose endpoint columns are NULL.
    """
    grouped: Dict[int, Application] = OrderedDict()
    endpoints: Dict[int, List[Endpoint]] = {}

    for record in records:
        application_id = record["id"]
        if application_id not in grouped:
            grouped[application_id] = Application(
                id=application_id,
                name=record["name"],
                description=record["description"],
                category=AppCategory(record["category"]),
                is_default=record["is_default"],
                created_at=record["created_at"],
                endpoints=(),
            )
            endpoints[application_id] = []

        if record["endpoint_id"] is not None:
            endpoints[application_id].append(
                Endpoint(
                    id=record["endpoint_id"],
                    application_id=application_id,
                    label=record["label"],
                    url=record["url"],
                    kind=EndpointKind(record["kind"]),
                    method=record["method"],
                )
            )

    return [
        application._replace(endpoints=tuple(endpoints[application_id]))
        for application_id, application in grouped.items()
    ]


class ApplicationRepository:
    def __init__(self, pool: Pool) -> None:
        self._pool: Pool = pool

    async def list_applications(self) -> List[Application]:
        """Returns every application with its endpoints, newest first."""
        async with self._pool.acquire() as conn:
            records = await conn.fetch(APPLICATIONS_SQL, None)
        return map_applications(records)

    async def get_application(self, application_id: int) -> Optional[Application]:
        async with self._pool.acquire() as conn:
            records = await conn.fetch(APPLICATIONS_SQL, application_id)
        applications = map_applications(records)
        return applications[0] if applications else None
