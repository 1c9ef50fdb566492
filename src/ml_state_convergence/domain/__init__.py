"""Domain public API."""

from ml_state_convergence.domain.errors import (
    ConvergenceTimeoutError,
    DriftError,
    RemoteApiError,
    RemoteConflictError,
    RemoteStateError,
    ResourceNotFoundError,
    StateConfigurationError,
    StateConvergenceError,
)
from ml_state_convergence.domain.models import (
    ConvergenceOutcome,
    NodeInfo,
    RemoteStatusSnapshot,
    RunningState,
    SearchInterval,
    TimingCounters,
)
from ml_state_convergence.domain.ports import RemoteResourceApi, StateChecker
from ml_state_convergence.domain.requests import TransitionRequest, parse_duration
from ml_state_convergence.domain.resource_types import (
    DESIRED_STATES,
    DatafeedState,
    JobState,
    ResourceKind,
    TransitionAction,
    ensure_desired_state,
)

__all__ = [
    "ConvergenceOutcome",
    "ConvergenceTimeoutError",
    "DESIRED_STATES",
    "DatafeedState",
    "DriftError",
    "JobState",
    "NodeInfo",
    "RemoteApiError",
    "RemoteConflictError",
    "RemoteResourceApi",
    "RemoteStateError",
    "RemoteStatusSnapshot",
    "ResourceKind",
    "ResourceNotFoundError",
    "RunningState",
    "SearchInterval",
    "StateChecker",
    "StateConfigurationError",
    "StateConvergenceError",
    "TimingCounters",
    "TransitionAction",
    "TransitionRequest",
    "ensure_desired_state",
    "parse_duration",
]
