"""
Configuration module for the reachability monitor.

This module provides functionality to parse command-line arguments and environment
variables to create a configuration context for the service. It defines
default values and help text for all configurable parameters.
"""

import argparse
import os
from typing import Any, List, Optional
from uuid import uuid4

from reachability_monitor.config.app_context import AppContext
from reachability_monitor.config.constants import (
    DEFAULT_CHECK_INTERVAL_SECONDS,
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DSN,
    DEFAULT_ENABLE_SCHEDULER,
    DEFAULT_HISTORY_BUFFER_SIZE,
    DEFAULT_HOST,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_PORT,
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_SEED_DEFAULTS,
    DEFAULT_WORKER_ID_PREFIX,
    DEFAULT_WORKER_NUMBER,
    ENV_PREFIX,
)


def _env(name: str, default: Any) -> Any:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    return default if value is None else value


def _parse_bool(value: str) -> bool:
    return str(value).strip().lower() == "true"


def get_context(argv: Optional[List[str]] = None) -> AppContext:
    """
    Parse command-line arguments and environment variables to create a configuration context.

    For each option, it first checks for a command-line argument, then falls back
    to an environment variable, and finally uses a default value.

    Args:
        argv: Arguments to parse. Defaults to sys.argv[1:].

    Returns:
        AppContext: A configuration context object containing all parsed settings.
    """
    parser = argparse.ArgumentParser(
        description="Reachability monitor: scheduled and ad hoc HTTP reachability checks."
    )

    parser.add_argument(
        "-dsn",
        type=str,
        default=_env("DSN", DEFAULT_DSN),
        help="Specifies the DSN (connection string) for the PostgreSQL database.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}DSN environment variable.\n"
        f"If that is also absent, a default value for a local database is used: {DEFAULT_DSN}",
    )

    parser.add_argument(
        "-wid",
        "--worker-id",
        type=str,
        default=_env("WORKER_ID", f"{DEFAULT_WORKER_ID_PREFIX}{uuid4()}"),
        help="Specifies the identifier of this service instance.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}WORKER_ID environment variable.\n"
        f"If that is also absent, the default value will be {DEFAULT_WORKER_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "-ps",
        "--db-pool-size",
        type=int,
        default=int(_env("DB_POOL_SIZE", DEFAULT_DB_POOL_SIZE)),
        help="Specifies the maximum number of connections in the database connection pool.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}DB_POOL_SIZE environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_DB_POOL_SIZE} is used.",
    )

    parser.add_argument(
        "-wn",
        "--worker-number",
        type=int,
        default=int(_env("WORKER_NUMBER", DEFAULT_WORKER_NUMBER)),
        help="Specifies the maximum number of probes in flight during a tick.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}WORKER_NUMBER environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_WORKER_NUMBER} is used.",
    )

    parser.add_argument(
        "-ci",
        "--check-interval",
        type=int,
        default=int(_env("CHECK_INTERVAL", DEFAULT_CHECK_INTERVAL_SECONDS)),
        help="Specifies the number of seconds between two scheduled re-checks.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}CHECK_INTERVAL environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_CHECK_INTERVAL_SECONDS} seconds is used.",
    )

    parser.add_argument(
        "-pt",
        "--probe-timeout-ms",
        type=int,
        default=int(_env("PROBE_TIMEOUT_MS", DEFAULT_PROBE_TIMEOUT_MS)),
        help="Specifies the total timeout of a single probe, in milliseconds.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}PROBE_TIMEOUT_MS environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_PROBE_TIMEOUT_MS} ms is used.",
    )

    parser.add_argument(
        "-hbs",
        "--history-buffer-size",
        type=int,
        default=int(_env("HISTORY_BUFFER_SIZE", DEFAULT_HISTORY_BUFFER_SIZE)),
        help="Specifies how many history records are buffered before being written.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}HISTORY_BUFFER_SIZE environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_HISTORY_BUFFER_SIZE} is used.",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=_env("HOST", DEFAULT_HOST),
        help="Specifies the interface the HTTP API listens on.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}HOST environment variable.\n"
        f"If that is also absent, {DEFAULT_HOST} is used.",
    )

    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=int(_env("PORT", DEFAULT_PORT)),
        help="Specifies the port the HTTP API listens on.\n"
        f"If not provided, the value is read from the {ENV_PREFIX}PORT environment variable.\n"
        f"If that is also absent, {DEFAULT_PORT} is used.",
    )

    parser.add_argument(
        "-es",
        "--enable-scheduler",
        type=str,
        default=_env("ENABLE_SCHEDULER", DEFAULT_ENABLE_SCHEDULER),
        help="Specifies whether this instance runs the scheduled re-checks (true/false).\n"
        f"If not provided, the value is read from the {ENV_PREFIX}ENABLE_SCHEDULER environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_ENABLE_SCHEDULER} is used.",
    )

    parser.add_argument(
        "-sd",
        "--seed-defaults",
        type=str,
        default=_env("SEED_DEFAULTS", DEFAULT_SEED_DEFAULTS),
        help="Specifies whether the default applications are seeded at startup (true/false).\n"
        f"If not provided, the value is read from the {ENV_PREFIX}SEED_DEFAULTS environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_SEED_DEFAULTS} is used.",
    )

    parser.add_argument(
        "-lt",
        "--logging-type",
        type=str,
        default=_env("LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'dev' and 'prod', system will use built-in configurations.\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "-lcf",
        "--logging-config-file",
        type=str,
        default=_env("LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    # Parse the command-line arguments
    args: Any = parser.parse_args(argv)

    # Create and return an AppContext with the parsed settings
    return AppContext(
        dsn=args.dsn,
        worker_id=args.worker_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
        db_pool_size=args.db_pool_size,
        worker_number=args.worker_number,
        check_interval=args.check_interval,
        probe_timeout_ms=args.probe_timeout_ms,
        history_buffer_size=args.history_buffer_size,
        host=args.host,
        port=args.port,
        enable_scheduler=_parse_bool(args.enable_scheduler),
        seed_defaults=_parse_bool(args.seed_defaults),
    )
