"""Status snapshots and convergence results."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, frozen=True)
class NodeInfo:
    """Node a resource is currently assigned to."""

    id: str
    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class SearchInterval:
    """Time window covered by the latest datafeed search."""

    start_millis: int
    end_millis: int


@dataclass(slots=True, frozen=True)
class RunningState:
    """Realtime flags and progress window of a running datafeed."""

    real_time_configured: bool = False
    real_time_running: bool = False
    search_interval: SearchInterval | None = None


@dataclass(slots=True, frozen=True)
class TimingCounters:
    """Cumulative counters that only ever grow while a datafeed exists."""

    search_count: int = 0
    bucket_count: int = 0
    total_search_time_ms: float = 0.0


@dataclass(slots=True, frozen=True)
class RemoteStatusSnapshot:
    """One status fetch worth of remote state."""

    resource_id: str
    current_state: str
    node: NodeInfo | None = None
    running_state: RunningState | None = None
    timing: TimingCounters | None = None
    assignment_explanation: str | None = None

    @property
    def search_count(self) -> int | None:
        """Return the cumulative search count when timing stats are present."""

        if self.timing is None:
            return None
        return self.timing.search_count


@dataclass(slots=True, frozen=True)
class ConvergenceOutcome:
    """Result of one reconciliation."""

    converged: bool
    final_snapshot: RemoteStatusSnapshot | None = None
    error: Exception | None = None


__all__ = [
    "ConvergenceOutcome",
    "NodeInfo",
    "RemoteStatusSnapshot",
    "RunningState",
    "SearchInterval",
    "TimingCounters",
]
