"""Resource kind and state helpers."""

from enum import StrEnum

from ml_state_convergence.domain.errors import StateConfigurationError


class ResourceKind(StrEnum):
    """Remote resource families with a reconcilable state."""

    JOB = "job"
    DATAFEED = "datafeed"


class JobState(StrEnum):
    """Anomaly detection job states reported by the remote."""

    OPENED = "opened"
    CLOSED = "closed"
    OPENING = "opening"
    CLOSING = "closing"
    FAILED = "failed"


class DatafeedState(StrEnum):
    """Datafeed states reported by the remote."""

    STARTED = "started"
    STOPPED = "stopped"
    STARTING = "starting"
    STOPPING = "stopping"


class TransitionAction(StrEnum):
    """Remote control actions."""

    OPEN = "open"
    CLOSE = "close"
    START = "start"
    STOP = "stop"


# Transient states are observed while converging but are never a valid target.
DESIRED_STATES: dict[ResourceKind, frozenset[str]] = {
    ResourceKind.JOB: frozenset({JobState.OPENED, JobState.CLOSED}),
    ResourceKind.DATAFEED: frozenset({DatafeedState.STARTED, DatafeedState.STOPPED}),
}


def ensure_desired_state(resource_kind: ResourceKind, desired_state: str) -> str:
    """Ensure desired_state is a valid target for resource_kind."""

    valid_states = DESIRED_STATES[resource_kind]
    if desired_state not in valid_states:
        expected = "', '".join(sorted(valid_states))
        raise StateConfigurationError(
            f"Invalid state '{desired_state}' for {resource_kind}. "
            f"Valid states are '{expected}'."
        )
    return desired_state


__all__ = [
    "DESIRED_STATES",
    "DatafeedState",
    "JobState",
    "ResourceKind",
    "TransitionAction",
    "ensure_desired_state",
]
