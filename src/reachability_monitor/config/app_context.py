"""
Configuration context for the reachability monitor.

This module defines a data structure that holds all configuration parameters
of the service. It serves as a central point for passing configuration
throughout the application.
"""

from typing import NamedTuple


class AppContext(NamedTuple):
    """
    A data structure containing all configuration parameters of the service.

    It is created by parsing command-line arguments and environment variables.

    Attributes:
        dsn: Database connection string for PostgreSQL.
        worker_id: Unique identifier for this service instance.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
        db_pool_size: Maximum number of connections in the database connection pool.
        worker_number: Maximum number of probes in flight during a tick.
        check_interval: Seconds between two scheduler ticks.
        probe_timeout_ms: Total time budget of a single probe, in milliseconds.
        history_buffer_size: Number of history records buffered before a flush.
        host: Interface the HTTP API listens on.
        port: Port the HTTP API listens on.
        enable_scheduler: Whether this instance runs the periodic re-checks.
        seed_defaults: Whether the default applications are seeded at startup.
    """

    dsn: str
    worker_id: str
    logging_type: str
    logging_config_file: str
    db_pool_size: int
    worker_number: int
    check_interval: int
    probe_timeout_ms: int
    history_buffer_size: int
    host: str
    port: int
    enable_scheduler: bool
    seed_defaults: bool
