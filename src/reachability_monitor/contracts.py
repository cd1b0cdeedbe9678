"""
Core interfaces for the reachability monitor.

This module defines the abstract base classes that form the foundation of the
monitor's architecture: where scheduled work comes from, how a single URL is
probed, and what happens to each result. These interfaces keep the worker
independent of the database and HTTP libraries behind them.
"""

import abc
from datetime import timedelta
from typing import AsyncIterator, List

from .domain import Endpoint, EndpointCheck, ProbeResult, ProbeTarget


class WorkScheduler(abc.ABC):
    """
    Abstract interface for a tick scheduler.

    Its responsibility is to provide an asynchronous stream of ticks, each tick
    being the list of endpoints that have to be probed at that moment.
    """

    @abc.abstractmethod
    async def start(self) -> None:
        """
        Prepares the scheduler to start yielding work.

        This method should be called before using the scheduler in an async for loop.
        """
        pass

    @abc.abstractmethod
    async def stop(self) -> None:
        """
        Gracefully stops the scheduler.

        After this call the async iteration ends at the next opportunity.
        """
        pass

    @property
    @abc.abstractmethod
    def interval(self) -> timedelta:
        """The time between two consecutive ticks."""

    def __aiter__(self) -> AsyncIterator[List[Endpoint]]:
        """
        Allows the scheduler to be used in an 'async for' loop.

        Returns:
            AsyncIterator[List[Endpoint]]: The scheduler instance itself.
        """
        return self

    @abc.abstractmethod
    async def __anext__(self) -> List[Endpoint]:
        """
        Waits for the next tick and returns the endpoints to probe.

        Returns:
            List[Endpoint]: The endpoints due in this tick. May be empty.

        Raises:
            StopAsyncIteration: When the scheduler has been stopped.
        """
        raise StopAsyncIteration


class ReachabilityProbe(abc.ABC):
    """
    Abstract interface for a component that probes a single URL.

    Its responsibility is to encapsulate the network I/O for a ProbeTarget and
    classify the outcome as reachable or blocked.
    """

    @abc.abstractmethod
    async def probe(self, target: ProbeTarget) -> ProbeResult:
        """
        Issues one bounded-time request to the target and classifies the outcome.

        Args:
            target: The URL, method and optional payload to send.

        Returns:
            ProbeResult: The terminal outcome of the probe.

        Implementations must never raise: invalid input, network failures,
        timeouts and unsuccessful statuses are all reported as blocked results.
        """
        pass


class ResultProcessor(abc.ABC):
    """
    Abstract interface for a component that processes an endpoint check.

    This enables a pipeline pattern where multiple processors act on the
    outcome of a check, e.g. persisting history or alerting on blocked endpoints.
    """

    @abc.abstractmethod
    async def process(self, check: EndpointCheck) -> None:
        """
        Processes or buffers a single EndpointCheck.

        Args:
            check: The result of probing one endpoint during a tick.
        """
        pass

    @abc.abstractmethod
    async def flush(self) -> None:
        """
        Forces the persistence of any buffered results.

        Called at the end of every tick and during shutdown. For processors
        that do not buffer data, this method can be a no-op.
        """
        pass
