from __future__ import annotations

import asyncio

import pytest

from ml_state_convergence.domain.errors import RemoteConflictError, ResourceNotFoundError
from ml_state_convergence.domain.models import NodeInfo
from ml_state_convergence.domain.resource_types import (
    DatafeedState,
    JobState,
    ResourceKind,
    TransitionAction,
)
from ml_state_convergence.infrastructure.remote import InMemoryRemoteResourceApi


def test_missing_resource_reports_none() -> None:
    remote_api = InMemoryRemoteResourceApi()

    assert asyncio.run(remote_api.get_status(ResourceKind.JOB, "job-1")) is None


def test_action_passes_through_transient_state() -> None:
    remote_api = InMemoryRemoteResourceApi(settle_after_reads=1)
    remote_api.register(
        ResourceKind.JOB,
        "job-1",
        JobState.CLOSED,
        node=NodeInfo(id="node-a", name="ml-node-1"),
    )

    async def scenario() -> list[str]:
        await remote_api.dispatch_transition(ResourceKind.JOB, "job-1", TransitionAction.OPEN)
        observed = []
        for _ in range(3):
            snapshot = await remote_api.get_status(ResourceKind.JOB, "job-1")
            assert snapshot is not None
            assert snapshot.node is not None and snapshot.node.name == "ml-node-1"
            assert snapshot.timing is None
            observed.append(snapshot.current_state)
        return observed

    assert asyncio.run(scenario()) == ["opening", "opened", "opened"]


def test_start_advances_datafeed_search_count() -> None:
    remote_api = InMemoryRemoteResourceApi(settle_after_reads=0)
    remote_api.register(ResourceKind.DATAFEED, "feed-1", DatafeedState.STOPPED, search_count=7)

    async def scenario() -> int | None:
        await remote_api.dispatch_transition(
            ResourceKind.DATAFEED,
            "feed-1",
            TransitionAction.START,
            extra_params={"start": "2024-01-01T00:00:00Z"},
        )
        snapshot = await remote_api.get_status(ResourceKind.DATAFEED, "feed-1")
        assert snapshot is not None
        assert snapshot.current_state == "started"
        return snapshot.search_count

    assert asyncio.run(scenario()) == 8
    assert remote_api.dispatched[0].extra_params == {"start": "2024-01-01T00:00:00Z"}


def test_redundant_action_is_a_conflict() -> None:
    remote_api = InMemoryRemoteResourceApi()
    remote_api.register(ResourceKind.DATAFEED, "feed-1", DatafeedState.STOPPED)

    with pytest.raises(RemoteConflictError, match="already stopped"):
        asyncio.run(
            remote_api.dispatch_transition(ResourceKind.DATAFEED, "feed-1", TransitionAction.STOP)
        )


def test_action_on_missing_resource_is_not_found() -> None:
    remote_api = InMemoryRemoteResourceApi()

    with pytest.raises(ResourceNotFoundError):
        asyncio.run(
            remote_api.dispatch_transition(ResourceKind.JOB, "job-1", TransitionAction.OPEN)
        )

    assert remote_api.dispatched == []


def test_scripted_states_are_reported_in_order_then_held() -> None:
    remote_api = InMemoryRemoteResourceApi()
    remote_api.register(ResourceKind.DATAFEED, "feed-1", DatafeedState.STOPPED)
    remote_api.script_states(ResourceKind.DATAFEED, "feed-1", ["starting", ("started", 3)])

    async def scenario() -> list[tuple[str, int | None]]:
        observed = []
        for _ in range(3):
            snapshot = await remote_api.get_status(ResourceKind.DATAFEED, "feed-1")
            assert snapshot is not None
            observed.append((snapshot.current_state, snapshot.search_count))
        return observed

    assert asyncio.run(scenario()) == [("starting", 0), ("started", 3), ("started", 3)]
    assert remote_api.status_reads[(ResourceKind.DATAFEED, "feed-1")] == 3
