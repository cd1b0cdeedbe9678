"""
Unit tests for the logging configuration module.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

import json
import logging
import os
from unittest.mock import MagicMock, mock_open, patch

import pytest

from reachability_monitor.config.app_context import AppContext
from reachability_monitor.config.logging_config import (
    _get_local_package_file_path,
    _load_logging_config,
    _WorkerIdFilter,
    configure_logging,
)


def _context(logging_type: str, logging_config_file: str = "") -> AppContext:
    return AppContext(
        dsn="postgresql://localhost/test",
        worker_id="test-worker",
        logging_type=logging_type,
        logging_config_file=logging_config_file,
        db_pool_size=5,
        worker_number=5,
        check_interval=60,
        probe_timeout_ms=8000,
        history_buffer_size=10,
        host="127.0.0.1",
        port=3001,
        enable_scheduler=True,
        seed_defaults=True,
    )


@pytest.mark.parametrize("logging_type", ["dev", "prod", "DEV"])
def test_configure_logging_should_load_builtin_configuration(logging_type: str) -> None:
    """
    Tests that the built-in configurations are loaded from the package directory.
    """
    # Arrange
    context = _context(logging_type)
    expected_file = f"logging-config-{logging_type.lower()}.json"

    with patch("reachability_monitor.config.logging_config._load_logging_config") as mock_load:
        with patch("logging.getLogger") as mock_get_logger:
            mock_get_logger.return_value.handlers = []

            # Act
            configure_logging(context)

    # Assert
    mock_load.assert_called_once()
    assert mock_load.call_args.args[0].endswith(expected_file)


def test_configure_logging_should_load_custom_file() -> None:
    """
    Tests that the custom logging type loads the given file.
    """
    # Arrange
    context = _context("custom", "/path/to/custom.json")

    with patch("reachability_monitor.config.logging_config._load_logging_config") as mock_load:
        with patch("logging.getLogger") as mock_get_logger:
            mock_get_logger.return_value.handlers = []

            # Act
            configure_logging(context)

    # Assert
    mock_load.assert_called_once_with("/path/to/custom.json")


def test_configure_logging_should_require_file_for_custom_type() -> None:
    """
    Tests that the custom logging type without a file raises a ValueError.
    """
    # Act & Assert
    with pytest.raises(ValueError, match="Custom logging configuration file must be provided."):
        configure_logging(_context("custom"))


@pytest.mark.parametrize("logging_type", ["", "verbose"])
def test_configure_logging_should_reject_invalid_type(logging_type: str) -> None:
    """
    Tests that an empty or unknown logging type raises a ValueError.
    """
    # Act & Assert
    with pytest.raises(ValueError):
        configure_logging(_context(logging_type))


def test_configure_logging_should_add_worker_id_filter_to_root_handlers() -> None:
    """
    Tests that every root handler receives the worker ID filter.
    """
    # Arrange
    handler = MagicMock(spec=logging.Handler)

    with patch("reachability_monitor.config.logging_config._load_logging_config"):
        with patch("logging.getLogger") as mock_get_logger:
            mock_get_logger.return_value.handlers = [handler]

            # Act
            configure_logging(_context("dev"))

    # Assert
    handler.addFilter.assert_called_once()
    added_filter = handler.addFilter.call_args.args[0]
    assert isinstance(added_filter, _WorkerIdFilter)


def test_worker_id_filter_should_inject_worker_id() -> None:
    """
    Tests that the filter sets worker_id on the record and lets it through.
    """
    # Arrange
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)

    # Act
    result = _WorkerIdFilter(worker_id="worker-1").filter(record)

    # Assert
    assert result is True
    assert record.worker_id == "worker-1"


def test_load_logging_config_should_apply_dict_config() -> None:
    """
    Tests that a valid JSON file is passed to dictConfig.
    """
    # Arrange
    config = {"version": 1}

    with patch("builtins.open", mock_open(read_data=json.dumps(config))):
        with patch("logging.config.dictConfig") as mock_dict_config:
            # Act
            _load_logging_config("/path/to/config.json")

    # Assert
    mock_dict_config.assert_called_once_with(config)


def test_load_logging_config_should_wrap_missing_file() -> None:
    """
    Tests that a missing file is reported as a RuntimeError.
    """
    # Arrange
    with patch("builtins.open", side_effect=FileNotFoundError()):
        # Act & Assert
        with pytest.raises(RuntimeError, match="Logging config file not found"):
            _load_logging_config("/missing.json")


def test_load_logging_config_should_wrap_invalid_json() -> None:
    """
    Tests that invalid JSON is reported as a RuntimeError.
    """
    # Arrange
    with patch("builtins.open", mock_open(read_data="{not json")):
        # Act & Assert
        with pytest.raises(RuntimeError, match="Invalid JSON format"):
            _load_logging_config("/broken.json")


@pytest.mark.parametrize("file_name", ["logging-config-dev.json", "logging-config-prod.json"])
def test_builtin_configurations_should_be_valid_dict_configs(file_name: str) -> None:
    """
    Tests that the shipped configurations exist and reference the worker ID.
    """
    # Arrange
    file_path = _get_local_package_file_path(file_name)

    # Act
    with open(file_path) as f:
        config = json.load(f)

    # Assert
    assert os.path.isabs(file_path)
    assert config["version"] == 1
    assert "root" in config
    assert any("worker_id" in str(formatter) for formatter in config["formatters"].values())
