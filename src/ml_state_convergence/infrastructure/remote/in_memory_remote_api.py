"""In-memory remote resource API for local development and tests."""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from ml_state_convergence.domain.errors import RemoteConflictError, ResourceNotFoundError
from ml_state_convergence.domain.models import NodeInfo, RemoteStatusSnapshot, TimingCounters
from ml_state_convergence.domain.ports import RemoteResourceApi
from ml_state_convergence.domain.resource_types import (
    DatafeedState,
    JobState,
    ResourceKind,
    TransitionAction,
)

_ACTION_TARGET_STATES: dict[TransitionAction, str] = {
    TransitionAction.OPEN: JobState.OPENED,
    TransitionAction.CLOSE: JobState.CLOSED,
    TransitionAction.START: DatafeedState.STARTED,
    TransitionAction.STOP: DatafeedState.STOPPED,
}
_ACTION_TRANSIENT_STATES: dict[TransitionAction, str] = {
    TransitionAction.OPEN: JobState.OPENING,
    TransitionAction.CLOSE: JobState.CLOSING,
    TransitionAction.START: DatafeedState.STARTING,
    TransitionAction.STOP: DatafeedState.STOPPING,
}

ScriptedState = str | tuple[str, int]


@dataclass(slots=True, frozen=True)
class DispatchedTransition:
    """A control action received by the in-memory remote."""

    resource_kind: ResourceKind
    resource_id: str
    action: TransitionAction
    force: bool
    timeout: timedelta | None
    extra_params: Mapping[str, str]


@dataclass(slots=True)
class _InMemoryResource:
    state: str
    search_count: int
    node: NodeInfo | None
    scripted: deque[tuple[str, int | None]] = field(default_factory=deque)
    pending_action: TransitionAction | None = None
    pending_reads: int = 0


class InMemoryRemoteResourceApi(RemoteResourceApi):
    """Simulated remote whose resources settle a few status reads after an action.

    Scripted states take precedence: once `script_states` queued observations
    for a resource, each status read pops one and actions no longer move it.
    """

    def __init__(self, settle_after_reads: int = 1) -> None:
        self._settle_after_reads = max(settle_after_reads, 0)
        self._resources: dict[tuple[ResourceKind, str], _InMemoryResource] = {}
        self.dispatched: list[DispatchedTransition] = []
        self.status_reads: Counter[tuple[ResourceKind, str]] = Counter()

    def register(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        state: str,
        *,
        search_count: int = 0,
        node: NodeInfo | None = None,
    ) -> None:
        """Create or replace one resource."""

        self._resources[(resource_kind, resource_id)] = _InMemoryResource(
            state=state,
            search_count=search_count,
            node=node,
        )

    def remove(self, resource_kind: ResourceKind, resource_id: str) -> None:
        """Delete one resource so that later reads report it missing."""

        self._resources.pop((resource_kind, resource_id), None)

    def script_states(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        states: Iterable[ScriptedState],
    ) -> None:
        """Queue observations, either a state or a (state, search_count) pair."""

        resource = self._require(resource_kind, resource_id)
        for item in states:
            if isinstance(item, tuple):
                resource.scripted.append(item)
            else:
                resource.scripted.append((item, None))

    async def get_status(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
    ) -> RemoteStatusSnapshot | None:
        key = (resource_kind, resource_id)
        self.status_reads[key] += 1
        resource = self._resources.get(key)
        if resource is None:
            return None

        if resource.scripted:
            state, search_count = resource.scripted.popleft()
            resource.state = state
            if search_count is not None:
                resource.search_count = search_count
        elif resource.pending_action is not None:
            self._advance_pending(resource)

        timing = None
        if resource_kind is ResourceKind.DATAFEED:
            timing = TimingCounters(search_count=resource.search_count)
        return RemoteStatusSnapshot(
            resource_id=resource_id,
            current_state=resource.state,
            node=resource.node,
            timing=timing,
        )

    async def dispatch_transition(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        action: TransitionAction,
        *,
        force: bool = False,
        timeout: timedelta | None = None,
        extra_params: Mapping[str, str] | None = None,
    ) -> None:
        resource = self._require(resource_kind, resource_id)
        self.dispatched.append(
            DispatchedTransition(
                resource_kind=resource_kind,
                resource_id=resource_id,
                action=action,
                force=force,
                timeout=timeout,
                extra_params=dict(extra_params or {}),
            )
        )
        if resource.scripted:
            return

        target_state = _ACTION_TARGET_STATES[action]
        if resource.state == target_state:
            raise RemoteConflictError(
                f"Cannot {action} {resource_kind} [{resource_id}] because it is already "
                f"{target_state}."
            )
        resource.pending_action = action
        resource.pending_reads = self._settle_after_reads
        resource.state = _ACTION_TRANSIENT_STATES[action]
        if self._settle_after_reads == 0:
            self._advance_pending(resource)

    def dispatched_actions(self, resource_kind: ResourceKind, resource_id: str) -> list[str]:
        """Return actions received for one resource, in order."""

        return [
            item.action
            for item in self.dispatched
            if item.resource_kind is resource_kind and item.resource_id == resource_id
        ]

    def _advance_pending(self, resource: _InMemoryResource) -> None:
        if resource.pending_reads > 0:
            resource.pending_reads -= 1
            return
        action = resource.pending_action
        if action is None:
            return
        resource.state = _ACTION_TARGET_STATES[action]
        if action is TransitionAction.START:
            resource.search_count += 1
        resource.pending_action = None

    def _require(self, resource_kind: ResourceKind, resource_id: str) -> _InMemoryResource:
        resource = self._resources.get((resource_kind, resource_id))
        if resource is None:
            raise ResourceNotFoundError(f"ML {resource_kind} {resource_id} does not exist")
        return resource


__all__ = ["DispatchedTransition", "InMemoryRemoteResourceApi", "ScriptedState"]
