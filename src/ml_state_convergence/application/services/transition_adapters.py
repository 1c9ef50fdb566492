"""Per-kind transition strategies used by the generic state controller."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Protocol

from ml_state_convergence.domain.errors import RemoteStateError
from ml_state_convergence.domain.models import RemoteStatusSnapshot
from ml_state_convergence.domain.requests import TransitionRequest
from ml_state_convergence.domain.resource_types import (
    DatafeedState,
    JobState,
    ResourceKind,
    TransitionAction,
    ensure_desired_state,
)

logger = logging.getLogger(__name__)


class DeletionPolicy(StrEnum):
    """What removing a state declaration does to the remote resource."""

    INERT = "inert"
    STOP_FIRST = "stop_first"


@dataclass(slots=True, frozen=True)
class TransitionCommand:
    """One remote control action with its parameters."""

    action: TransitionAction
    force: bool = False
    timeout: timedelta | None = None
    extra_params: Mapping[str, str] = field(default_factory=dict)


class TransitionAdapter(Protocol):
    """Kind-specific knowledge plugged into `ResourceStateController`."""

    kind: ResourceKind
    deletion_policy: DeletionPolicy
    stopped_state: str
    has_progress_counter: bool

    def command_for(self, request: TransitionRequest) -> TransitionCommand:
        """Return the control action that moves the resource to request.desired_state."""

    def stop_command(self, force: bool) -> TransitionCommand:
        """Return the action used to halt the resource before deletion.

        Only called for `DeletionPolicy.STOP_FIRST` adapters.
        """

    def is_converged(
        self,
        request: TransitionRequest,
        baseline: RemoteStatusSnapshot,
        current: RemoteStatusSnapshot,
    ) -> bool:
        """Return True once current satisfies request; raise for unrecoverable states."""

    def progress_counter(self, snapshot: RemoteStatusSnapshot) -> int | None:
        """Return a monotonic progress counter, if the kind exposes one."""

    def allows_missed_transition(self, request: TransitionRequest) -> bool:
        """Whether a different final state is acceptable when progress advanced."""


class JobTransitionAdapter:
    """Open/close transitions for anomaly detection jobs."""

    kind = ResourceKind.JOB
    deletion_policy = DeletionPolicy.INERT
    stopped_state: str = JobState.CLOSED
    has_progress_counter = False

    def command_for(self, request: TransitionRequest) -> TransitionCommand:
        desired_state = ensure_desired_state(self.kind, request.desired_state)
        if desired_state == JobState.OPENED:
            return TransitionCommand(action=TransitionAction.OPEN)
        return self._close_command(request.force, request.timeout)

    def stop_command(self, force: bool) -> TransitionCommand:
        # Unused while job deletion is INERT.
        return self._close_command(force, None)

    def is_converged(
        self,
        request: TransitionRequest,
        baseline: RemoteStatusSnapshot,
        current: RemoteStatusSnapshot,
    ) -> bool:
        if current.current_state == JobState.FAILED:
            explanation = current.assignment_explanation or "no assignment explanation"
            raise RemoteStateError(
                f"ML job '{current.resource_id}' entered the failed state while moving to "
                f"'{request.desired_state}': {explanation}",
                last_snapshot=current,
            )
        return current.current_state == request.desired_state

    def progress_counter(self, snapshot: RemoteStatusSnapshot) -> int | None:
        return None

    def allows_missed_transition(self, request: TransitionRequest) -> bool:
        return False

    def _close_command(self, force: bool, timeout: timedelta | None) -> TransitionCommand:
        return TransitionCommand(action=TransitionAction.CLOSE, force=force, timeout=timeout)


class DatafeedTransitionAdapter:
    """Start/stop transitions for datafeeds.

    A datafeed started with an `end` in the past may run its searches and stop
    again between two polls. The cumulative search count tells such a missed
    transition apart from a start that never happened.
    """

    kind = ResourceKind.DATAFEED
    deletion_policy = DeletionPolicy.STOP_FIRST
    stopped_state: str = DatafeedState.STOPPED
    has_progress_counter = True

    def command_for(self, request: TransitionRequest) -> TransitionCommand:
        desired_state = ensure_desired_state(self.kind, request.desired_state)
        if desired_state == DatafeedState.STARTED:
            extra_params: dict[str, str] = {}
            if request.start is not None:
                extra_params["start"] = _format_rfc3339(request.start)
            if request.end is not None:
                extra_params["end"] = _format_rfc3339(request.end)
            return TransitionCommand(
                action=TransitionAction.START,
                timeout=request.timeout,
                extra_params=extra_params,
            )
        return TransitionCommand(
            action=TransitionAction.STOP,
            force=request.force,
            timeout=request.timeout,
        )

    def stop_command(self, force: bool) -> TransitionCommand:
        return TransitionCommand(action=TransitionAction.STOP, force=force)

    def is_converged(
        self,
        request: TransitionRequest,
        baseline: RemoteStatusSnapshot,
        current: RemoteStatusSnapshot,
    ) -> bool:
        if current.current_state == request.desired_state:
            return True
        if not self._ran_and_stopped(request, baseline, current):
            return False
        logger.info(
            "Datafeed '%s' stopped again before it was observed as started; "
            "search count advanced from %s to %s.",
            current.resource_id,
            baseline.search_count,
            current.search_count,
        )
        return True

    def progress_counter(self, snapshot: RemoteStatusSnapshot) -> int | None:
        return snapshot.search_count

    def allows_missed_transition(self, request: TransitionRequest) -> bool:
        return request.desired_state == DatafeedState.STARTED

    def _ran_and_stopped(
        self,
        request: TransitionRequest,
        baseline: RemoteStatusSnapshot,
        current: RemoteStatusSnapshot,
    ) -> bool:
        if not self.allows_missed_transition(request):
            return False
        if current.current_state != DatafeedState.STOPPED:
            return False
        before = baseline.search_count
        after = current.search_count
        return before is not None and after is not None and after > before


def _format_rfc3339(value: datetime) -> str:
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def default_adapters() -> dict[ResourceKind, TransitionAdapter]:
    """Return one adapter per supported resource kind."""

    return {
        ResourceKind.JOB: JobTransitionAdapter(),
        ResourceKind.DATAFEED: DatafeedTransitionAdapter(),
    }


__all__ = [
    "DatafeedTransitionAdapter",
    "DeletionPolicy",
    "JobTransitionAdapter",
    "TransitionAdapter",
    "TransitionCommand",
    "default_adapters",
]
