"""Ports for the remote resource API and state checkers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from typing import Protocol

from ml_state_convergence.domain.models import RemoteStatusSnapshot
from ml_state_convergence.domain.resource_types import ResourceKind, TransitionAction

StateChecker = Callable[[], Awaitable[bool]]
"""Read-only predicate answering "is the resource in the desired state now?"."""


class RemoteResourceApi(Protocol):
    """Remote platform port exposing status reads and control actions.

    Implementations raise `RemoteApiError` subclasses for failed calls:
    `RemoteConflictError` when an action is rejected because it is already
    applied, `RemoteStateError` when the resource is unusable. Actions on a
    missing resource raise `ResourceNotFoundError`.
    """

    async def get_status(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
    ) -> RemoteStatusSnapshot | None:
        """Return the current status snapshot, or None when the resource is missing."""

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
        """Issue a control action and return once the remote acknowledged it."""


__all__ = ["RemoteResourceApi", "StateChecker"]
