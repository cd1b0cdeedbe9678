"""
Database schema for the reachability monitor.

The statements are idempotent and run at every startup.
"""

import logging

from asyncpg import Pool

# Module logger
logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS applications (
        id          SERIAL PRIMARY KEY,
        name        TEXT        NOT NULL UNIQUE,
        description TEXT,
        category    TEXT        NOT NULL DEFAULT 'OTHER',
        is_default  BOOLEAN     NOT NULL DEFAULT FALSE,
        created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS application_endpoints (
        id             SERIAL PRIMARY KEY,
        application_id INTEGER     NOT NULL REFERENCES applications (id) ON DELETE CASCADE,
        label          TEXT        NOT NULL,
        url            TEXT        NOT NULL,
        kind           TEXT        NOT NULL DEFAULT 'WEB',
        method         TEXT,
        notes          TEXT,
        created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS probe_history (
        id             BIGSERIAL PRIMARY KEY,
        application_id INTEGER          NOT NULL REFERENCES applications (id) ON DELETE CASCADE,
        endpoint_id    INTEGER          NOT NULL REFERENCES application_endpoints (id) ON DELETE CASCADE,
        status         TEXT             NOT NULL,
        http_status    INTEGER,
        latency_ms     DOUBLE PRECISION NOT NULL,
        error          TEXT,
        url            TEXT             NOT NULL,
        created_at     TIMESTAMPTZ      NOT NULL,
        failure        TEXT
    )
    """,
    """
    ALTER TABLE probe_history ADD COLUMN IF NOT EXISTS failure TEXT
    """,
    """
    CREATE INDEX IF NOT EXISTS probe_history_application_created_idx
        ON probe_history (application_id, created_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS probe_history_endpoint_created_idx
        ON probe_history (endpoint_id, created_at DESC)
    """,
)


async def ensure_schema(pool: Pool) -> None:
    """
    Create the tables and indexes if they do not exist yet.

    Args:
        pool: The asyncpg connection pool.
    """
    async with pool.acquire() as conn:
        async with conn.transaction():
            for statement in SCHEMA_STATEMENTS:
                await conn.execute(statement)
    logger.info("Database schema is up to date.")
