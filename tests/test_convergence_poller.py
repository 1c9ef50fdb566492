from __future__ import annotations

import asyncio

import pytest

from ml_state_convergence.application.services import ConvergencePoller
from ml_state_convergence.domain.errors import RemoteApiError
from ml_state_convergence.domain.resource_types import ResourceKind


class SequenceChecker:
    """Checker double returning scripted results and counting calls."""

    def __init__(self, results: list[bool]) -> None:
        self._results = list(results)
        self.calls = 0

    async def __call__(self) -> bool:
        self.calls += 1
        if self._results:
            return self._results.pop(0)
        return False


def test_poller_stops_on_first_true_result() -> None:
    poller = ConvergencePoller(poll_interval_seconds=0.001)
    checker = SequenceChecker([False, False, True])

    asyncio.run(poller.wait_for(ResourceKind.JOB, "job-1", checker))

    assert checker.calls == 3


def test_poller_reraises_checker_error_without_retry() -> None:
    poller = ConvergencePoller(poll_interval_seconds=0.001)
    calls = 0
    failure = RemoteApiError("security_exception: missing authentication credentials")

    async def checker() -> bool:
        nonlocal calls
        calls += 1
        raise failure

    with pytest.raises(RemoteApiError) as exc_info:
        asyncio.run(poller.wait_for(ResourceKind.DATAFEED, "feed-1", checker))

    assert exc_info.value is failure
    assert calls == 1
    assert any("datafeed 'feed-1'" in note for note in exc_info.value.__notes__)


def test_poller_propagates_deadline_expiry() -> None:
    poller = ConvergencePoller(poll_interval_seconds=0.005)
    checker = SequenceChecker([])

    async def scenario() -> None:
        async with asyncio.timeout(0.05):
            await poller.wait_for(ResourceKind.JOB, "job-1", checker)

    with pytest.raises(TimeoutError):
        asyncio.run(scenario())

    assert checker.calls >= 1


def test_poller_returns_promptly_when_cancelled() -> None:
    poller = ConvergencePoller(poll_interval_seconds=10.0)
    checker = SequenceChecker([])

    async def scenario() -> None:
        task = asyncio.create_task(poller.wait_for(ResourceKind.JOB, "job-1", checker))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=1.0)

    asyncio.run(scenario())

    assert checker.calls == 1


def test_poller_defaults_to_two_second_interval() -> None:
    assert ConvergencePoller().poll_interval_seconds == 2.0


@pytest.mark.parametrize("interval", [0, -1.5])
def test_poller_rejects_non_positive_interval(interval: float) -> None:
    with pytest.raises(ValueError, match="Poll interval must be > 0"):
        ConvergencePoller(poll_interval_seconds=interval)
