"""
Main entry point for the reachability monitor service.

This module initializes and runs the service. It sets up logging, creates the
database and HTTP connections, bootstraps the schema and default applications,
starts the HTTP API and the scheduled re-check worker, and handles graceful
shutdown when the application is terminated.
"""

import asyncio
import logging
from datetime import timedelta
from typing import Optional

import aiohttp
import asyncpg
from aiohttp import web

from reachability_monitor.config import AppContext, get_context
from reachability_monitor.config.db_config import initiate_db_pool
from reachability_monitor.config.http_config import get_http_session
from reachability_monitor.config.logging_config import configure_logging
from reachability_monitor.domain import ProbeMode
from reachability_monitor.probe.aiohttp_probe import AiohttpProbe
from reachability_monitor.processor.blocked_alert_processor import BlockedAlertProcessor
from reachability_monitor.processor.delegating_processor import DelegatingResultProcessor
from reachability_monitor.processor.history_persistence_processor import (
    HistoryPersistenceProcessor,
)
from reachability_monitor.repository.application_repository import ApplicationRepository
from reachability_monitor.repository.history_repository import HistoryRepository
from reachability_monitor.repository.schema import ensure_schema
from reachability_monitor.repository.seed import ensure_default_applications
from reachability_monitor.scheduler.interval_scheduler import IntervalScheduler
from reachability_monitor.web.app import create_app
from reachability_monitor.worker import ProbeWorker


async def main(context: AppContext) -> None:
    """
    Set up and run the reachability monitor.

    This function initializes all components of the service:
    1. Creates an HTTP session for the probes
    2. Establishes the database connection pool and bootstraps the schema
    3. Creates the scheduler, probe and processors, and the worker around them
    4. Starts the HTTP API, then runs the worker until cancelled
    5. Releases every resource on shutdown

    Args:
        context: Configuration context containing all application settings.
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Starting application...")
    worker_id: str = context.worker_id

    http_session: aiohttp.ClientSession = get_http_session(context)
    logger.info("configured: http_session")

    db_pool: Optional[asyncpg.pool.Pool] = None
    runner: Optional[web.AppRunner] = None
    worker: Optional[ProbeWorker] = None

    try:
        db_pool = await initiate_db_pool(context)
        logger.info("initialized: db_pool")

        await ensure_schema(db_pool)
        if context.seed_defaults:
            await ensure_default_applications(db_pool)

        history_repository = HistoryRepository(db_pool)
        last_run = await history_repository.last_run()
        interval = timedelta(seconds=context.check_interval)

        probe = AiohttpProbe(
            session=http_session, mode=ProbeMode.FULL, timeout_ms=context.probe_timeout_ms
        )

        worker = ProbeWorker(
            worker_id=worker_id,
            scheduler=IntervalScheduler(
                worker_id=worker_id, pool=db_pool, interval=interval, last_run=last_run
            ),
            probe=probe,
            processor=DelegatingResultProcessor(
                worker_id,
                [
                    HistoryPersistenceProcessor(
                        worker_id=worker_id,
                        pool=db_pool,
                        max_buffer_size=context.history_buffer_size,
                    ),
                    BlockedAlertProcessor(worker_id=worker_id),
                ],
            ),
            num_workers=context.worker_number,
            last_run=last_run,
        )

        app = create_app(
            probe=probe,
            history_repository=history_repository,
            application_repository=ApplicationRepository(db_pool),
            status_provider=worker.status,
        )
        runner = web.AppRunner(app)
        await runner.setup()
        await web.TCPSite(runner, host=context.host, port=context.port).start()
        logger.info(f"HTTP API listening on {context.host}:{context.port}")

        if context.enable_scheduler:
            logger.info("Worker initialized. Starting scheduled re-checks...")
            await worker.start()
        else:
            logger.info("Scheduler disabled. Serving the HTTP API only.")
            await asyncio.Event().wait()

    except asyncio.CancelledError:
        logger.info("Application shutdown requested.")
    finally:
        # Ensure all resources are properly closed during shutdown
        logger.info("Shutting down resources...")
        if runner:
            await runner.cleanup()
        if worker:
            await worker.stop()
        await http_session.close()
        if db_pool:
            await db_pool.close()
        logger.info("Shutdown complete.")


def run() -> None:
    try:
        # Parse command-line arguments and environment variables
        app_context: AppContext = get_context()

        configure_logging(app_context)

        asyncio.run(main(app_context))
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")


if __name__ == "__main__":
    run()
