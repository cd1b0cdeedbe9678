"""
Logging configuration module for the reachability monitor.

This module configures logging for the application based on the provided
configuration context. It supports built-in configurations for development
and production, and custom configuration files.
"""

import json
import logging.config
import os
from typing import Any, Dict

from reachability_monitor.config import AppContext


def configure_logging(context: AppContext) -> None:
    """
    Configure logging for the application based on the provided configuration.

    Three types of logging configurations are supported:
    - dev: Development logging configuration
    - prod: Production logging configuration
    - custom: Custom logging configuration from a specified file

    A worker ID filter is attached to every root handler so that each record
    identifies the service instance that emitted it.

    Args:
        context: Configuration context containing logging settings.

    Raises:
        ValueError: If the logging type is invalid or if a custom logging
            configuration file is not provided when using the 'custom' type.
    """
    logging_type: str = context.logging_type.lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")
    elif logging_type == "dev":
        file_path = _get_local_package_file_path("logging-config-dev.json")
        _load_logging_config(file_path)
    elif logging_type == "prod":
        file_path = _get_local_package_file_path("logging-config-prod.json")
        _load_logging_config(file_path)
    elif logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        else:
            _load_logging_config(context.logging_config_file)
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    # Handler filters see records propagated from every logger, logger filters do not
    instance_filter = _WorkerIdFilter(worker_id=context.worker_id)
    for handler in logging.getLogger().handlers:
        handler.addFilter(instance_filter)

    logging.debug("Logging configured and WorkerIdFilter added.")


def _load_logging_config(config_file: str) -> None:
    """
    Load logging configuration from a JSON file and apply it with dictConfig.

    Args:
        config_file: Path to the JSON file containing logging configuration.

    Raises:
        RuntimeError: If the file is not found, contains invalid JSON, or
            if there is any other error loading the configuration.
    """
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
            logging.config.dictConfig(config)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err
    except Exception as err:
        raise RuntimeError(f"Error loading logging config: {str(err)}") from err


def _get_local_package_file_path(config_file: str) -> str:
    """
    Get the absolute path to a file in the same directory as this module.

    Args:
        config_file: Name of the file to locate.

    Returns:
        str: Absolute path to the specified file.
    """
    return os.path.join(os.path.dirname(__file__), config_file)


class _WorkerIdFilter(logging.Filter):
    """
    A logging filter that injects the worker ID into every log record.
    """

    def __init__(self, worker_id: str) -> None:
        super().__init__()
        self._worker_id: str = worker_id

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Add the worker ID to the log record. Always lets the record through.
        """
        record.worker_id = self._worker_id
        return True
