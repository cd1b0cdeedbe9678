"""
Unit tests for the IntervalScheduler class.

This module contains tests for the IntervalScheduler class, ensuring that it
fires ticks on the interval grid, loads the endpoints of the default
applications on every tick and skips slots that a long tick overran.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing. Time is simulated:
_utcnow and asyncio.sleep are patched so that sleeping advances a fake clock.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from reachability_monitor.domain import Endpoint, EndpointKind
from reachability_monitor.scheduler.interval_scheduler import (
    DEFAULT_ENDPOINTS_QUERY,
    IntervalScheduler,
    map_endpoint,
)

START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
INTERVAL = timedelta(minutes=15)
MODULE = "reachability_monitor.scheduler.interval_scheduler"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now
        self.sleeps: List[float] = []

    def utcnow(self) -> datetime:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)


def _record(**overrides: Any) -> Dict[str, Any]:
    record = {
        "id": 11,
        "application_id": 1,
        "label": "Web",
        "url": "https://dropbox.com",
        "kind": "WEB",
        "method": None,
    }
    record.update(overrides)
    return record


@pytest.fixture
def clock():
    """
    Patches the scheduler's clock and sleep with a fake clock starting at START.
    """
    fake = FakeClock(START)
    with patch(f"{MODULE}._utcnow", side_effect=fake.utcnow):
        with patch(f"{MODULE}.asyncio.sleep", new=AsyncMock(side_effect=fake.sleep)):
            yield fake


@pytest.fixture
def mock_conn() -> MagicMock:
    """
    Creates a mock connection returning one endpoint record.
    """
    conn = MagicMock()
    conn.fetch = AsyncMock(return_value=[_record()])
    return conn


@pytest.fixture
def mock_pool(mock_conn: MagicMock) -> MagicMock:
    """
    Creates a mock asyncpg.Pool whose acquire() yields mock_conn.
    """
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = mock_conn
    return pool


def test_map_endpoint_should_convert_record() -> None:
    """
    Tests that a record is converted to an Endpoint with an upper-cased method.
    """
    # Act
    endpoint = map_endpoint(_record(id=12, kind="API", method="post"))

    # Assert
    assert endpoint == Endpoint(
        id=12,
        application_id=1,
        label="Web",
        url="https://dropbox.com",
        kind=EndpointKind.API,
        method="POST",
    )


def test_map_endpoint_should_keep_missing_method() -> None:
    # Act & Assert
    assert map_endpoint(_record()).method is None


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"worker_id": ""}, "worker_id must be provided and must be not blank."),
        ({"interval": timedelta(0)}, "interval must be a positive timedelta."),
        ({"interval": 900}, "interval must be a positive timedelta."),
        ({"recover_time": 0}, "recover_time must be a positive integer."),
    ],
)
def test_init_should_validate_parameters(kwargs: Dict[str, Any], message: str) -> None:
    """
    Tests that the constructor rejects invalid parameters.
    """
    # Arrange
    params: Dict[str, Any] = {"worker_id": "test-worker", "pool": MagicMock(), "interval": INTERVAL}
    params.update(kwargs)

    # Act & Assert
    with pytest.raises(ValueError, match=message):
        IntervalScheduler(**params)


def test_init_should_schedule_first_tick_after_last_run() -> None:
    """
    Tests that a known last run puts the first tick one interval later.
    """
    # Act
    scheduler = IntervalScheduler("test-worker", MagicMock(), INTERVAL, last_run=START)

    # Assert
    assert scheduler.next_fire_at == START + INTERVAL
    assert scheduler.interval == INTERVAL


@pytest.mark.asyncio
async def test_anext_should_fire_immediately_without_last_run(
    clock: FakeClock, mock_pool: MagicMock, mock_conn: MagicMock
) -> None:
    """
    Tests that the first tick fires at once when no previous run is known.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL)
    await scheduler.start()

    # Act
    batch = await scheduler.__anext__()

    # Assert
    assert [endpoint.id for endpoint in batch] == [11]
    mock_conn.fetch.assert_awaited_once_with(DEFAULT_ENDPOINTS_QUERY)
    assert clock.sleeps == []
    assert scheduler.next_fire_at == START + INTERVAL


@pytest.mark.asyncio
async def test_anext_should_wait_until_next_fire_time(
    clock: FakeClock, mock_pool: MagicMock
) -> None:
    """
    Tests that the scheduler sleeps in bounded steps until the next tick is due.
    """
    # Arrange
    scheduler = IntervalScheduler(
        "test-worker", mock_pool, INTERVAL, last_run=START, max_sleep_duration=600
    )
    await scheduler.start()

    # Act
    await scheduler.__anext__()

    # Assert
    assert clock.sleeps == [600, 300]
    assert clock.now == START + INTERVAL
    assert scheduler.next_fire_at == START + 2 * INTERVAL


@pytest.mark.asyncio
async def test_consecutive_ticks_should_stay_on_interval_grid(
    clock: FakeClock, mock_pool: MagicMock
) -> None:
    """
    Tests that two consecutive ticks are one interval apart.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL, max_sleep_duration=3600)
    await scheduler.start()

    # Act
    await scheduler.__anext__()
    first_tick = clock.now
    clock.now += timedelta(seconds=5)  # the tick itself took 5 seconds
    await scheduler.__anext__()

    # Assert
    assert clock.now - first_tick == INTERVAL


@pytest.mark.asyncio
async def test_anext_should_skip_slots_missed_while_service_was_down(
    clock: FakeClock, mock_pool: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    """
    Tests that slots missed before startup are skipped and reported as downtime, not as an overrun.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL, last_run=START - INTERVAL)
    clock.now = START + 2 * INTERVAL + INTERVAL / 2
    await scheduler.start()

    # Act
    with caplog.at_level(logging.INFO, logger=MODULE):
        await scheduler.__anext__()

    # Assert
    assert clock.sleeps == []
    assert scheduler.next_fire_at == START + 3 * INTERVAL
    assert "Resuming after downtime. Skipped 2 missed tick(s)." in caplog.text
    assert not [r for r in caplog.records if r.levelno == logging.WARNING]


@pytest.mark.asyncio
async def test_anext_should_skip_slots_missed_by_an_overrunning_tick(
    clock: FakeClock, mock_pool: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    """
    Tests that slots passed while a tick ran are skipped with a warning, not replayed.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL)
    await scheduler.start()
    await scheduler.__anext__()
    clock.now = START + 2 * INTERVAL + INTERVAL / 2  # the tick ran for two and a half intervals

    # Act
    with caplog.at_level(logging.WARNING, logger=MODULE):
        await scheduler.__anext__()

    # Assert
    assert clock.sleeps == []
    assert scheduler.next_fire_at == START + 3 * INTERVAL
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert warnings == ["Previous tick overran its slot. Skipped 1 tick(s)."]


@pytest.mark.asyncio
async def test_anext_should_retry_after_database_error(
    clock: FakeClock, mock_pool: MagicMock, mock_conn: MagicMock
) -> None:
    """
    Tests that a failed endpoint query is retried after recover_time.
    """
    # Arrange
    mock_conn.fetch.side_effect = [ConnectionError("db down"), [_record(id=42)]]
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL, recover_time=7)
    await scheduler.start()

    # Act
    batch = await scheduler.__anext__()

    # Assert
    assert [endpoint.id for endpoint in batch] == [42]
    assert clock.sleeps == [7]
    assert mock_conn.fetch.await_count == 2


@pytest.mark.asyncio
async def test_anext_should_return_empty_batch_when_nothing_is_scheduled(
    clock: FakeClock, mock_pool: MagicMock, mock_conn: MagicMock
) -> None:
    """
    Tests that a tick without endpoints is still a tick.
    """
    # Arrange
    mock_conn.fetch.return_value = []
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL)
    await scheduler.start()

    # Act
    batch = await scheduler.__anext__()

    # Assert
    assert batch == []
    assert scheduler.next_fire_at == START + INTERVAL


@pytest.mark.asyncio
async def test_anext_should_stop_iteration_when_not_running(mock_pool: MagicMock) -> None:
    """
    Tests that a scheduler that was never started yields nothing.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL)

    # Act
    batches = [batch async for batch in scheduler]

    # Assert
    assert batches == []
    mock_pool.acquire.assert_not_called()


@pytest.mark.asyncio
async def test_stop_should_end_iteration_while_waiting(
    clock: FakeClock, mock_pool: MagicMock
) -> None:
    """
    Tests that stop() is observed after the current bounded sleep.
    """
    # Arrange
    scheduler = IntervalScheduler("test-worker", mock_pool, INTERVAL, last_run=START)

    async def stop_while_sleeping(seconds: float) -> None:
        await scheduler.stop()

    await scheduler.start()

    # Act & Assert
    with patch(f"{MODULE}.asyncio.sleep", new=AsyncMock(side_effect=stop_while_sleeping)):
        with pytest.raises(StopAsyncIteration):
            await scheduler.__anext__()

    mock_pool.acquire.assert_not_called()
