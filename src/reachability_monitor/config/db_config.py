"""
Database configuration module for the reachability monitor.

This module creates and validates a connection pool to the PostgreSQL database
using the asyncpg library. It ensures that the database is accessible before
returning the connection pool.
"""

import logging

import asyncpg

from reachability_monitor.config import AppContext

# Module logger
logger = logging.getLogger(__name__)


async def initiate_db_pool(context: AppContext) -> asyncpg.pool.Pool:
    """
    Create and validate a connection pool to the PostgreSQL database.

    If the connection fails, the pool is closed and the exception is re-raised.

    Args:
        context: Configuration context containing database connection parameters.

    Returns:
        asyncpg.pool.Pool: A connection pool that can be used to execute database queries.

    Raises:
        Exception: If the database connection cannot be established.
    """
    pool: asyncpg.pool.Pool = await asyncpg.create_pool(
        dsn=context.dsn, max_size=context.db_pool_size
    )

    try:
        # Validate the connection by executing a simple query
        async with pool.acquire() as connection:
            await connection.fetchval("SELECT 1")
        logger.info("Database connection pool successfully created.")
        return pool
    except Exception as e:
        logger.error(f"Error: Could not connect to the database. {e}")
        await pool.close()
        raise
