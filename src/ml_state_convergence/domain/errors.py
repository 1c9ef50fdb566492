"""Domain exceptions for state convergence operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ml_state_convergence.domain.models import RemoteStatusSnapshot


class StateConvergenceError(Exception):
    """Base class for state convergence errors.

    `last_snapshot` holds the most recent remote status observed before the
    failure, when one was fetched.
    """

    def __init__(self, message: str, last_snapshot: RemoteStatusSnapshot | None = None) -> None:
        super().__init__(message)
        self.last_snapshot = last_snapshot


class StateConfigurationError(StateConvergenceError):
    """Raised when a transition request cannot be acted upon as configured."""


class ResourceNotFoundError(StateConvergenceError):
    """Raised when the remote resource does not exist."""


class RemoteApiError(StateConvergenceError):
    """Raised by remote API adapters when a call fails."""


class RemoteConflictError(RemoteApiError):
    """Raised when the remote rejects an action because it is already applied."""


class RemoteStateError(RemoteApiError):
    """Raised when the remote reports a state the resource cannot recover from."""


class DriftError(StateConvergenceError):
    """Raised when the reported state matches but the transition did not occur."""


class ConvergenceTimeoutError(StateConvergenceError, TimeoutError):
    """Raised when a resource did not converge before the deadline."""


__all__ = [
    "ConvergenceTimeoutError",
    "DriftError",
    "RemoteApiError",
    "RemoteConflictError",
    "RemoteStateError",
    "ResourceNotFoundError",
    "StateConfigurationError",
    "StateConvergenceError",
]
