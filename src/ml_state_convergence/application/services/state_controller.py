"""Generic controller reconciling one remote resource to a desired state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ml_state_convergence.application.services.convergence_poller import ConvergencePoller
from ml_state_convergence.application.services.drift import verify_convergence
from ml_state_convergence.application.services.transition_adapters import (
    DeletionPolicy,
    TransitionAdapter,
    TransitionCommand,
)
from ml_state_convergence.domain.errors import (
    ConvergenceTimeoutError,
    RemoteConflictError,
    ResourceNotFoundError,
    StateConfigurationError,
)
from ml_state_convergence.domain.models import ConvergenceOutcome, RemoteStatusSnapshot
from ml_state_convergence.domain.ports import RemoteResourceApi, StateChecker
from ml_state_convergence.domain.requests import TransitionRequest
from ml_state_convergence.domain.resource_types import ResourceKind

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _ObservedSnapshot:
    """Latest snapshot seen during one reconciliation."""

    latest: RemoteStatusSnapshot


class ResourceStateController:
    """Reconcile resources of one kind: fetch, dispatch once, poll, verify."""

    def __init__(
        self,
        remote_api: RemoteResourceApi,
        adapter: TransitionAdapter,
        poller: ConvergencePoller,
        default_timeout_seconds: float | None = None,
    ) -> None:
        self._remote_api = remote_api
        self._adapter = adapter
        self._poller = poller
        self._default_timeout_seconds = default_timeout_seconds

    @property
    def kind(self) -> ResourceKind:
        """Return the resource kind handled by this controller."""

        return self._adapter.kind

    async def reconcile(self, request: TransitionRequest) -> ConvergenceOutcome:
        """Drive request.resource_id to request.desired_state.

        Raises `ResourceNotFoundError`, `StateConfigurationError`, `DriftError`,
        remote API errors unchanged, and `ConvergenceTimeoutError` (a
        `TimeoutError`) when the deadline expires before convergence.
        """

        if request.resource_kind is not self.kind:
            raise StateConfigurationError(
                f"Controller for {self.kind} cannot reconcile {request.describe()}."
            )

        baseline = await self._fetch_existing(request.resource_id)
        if baseline.current_state == request.desired_state:
            logger.debug(
                "ML %s %s is already in desired state %s",
                self.kind,
                request.resource_id,
                request.desired_state,
            )
            return ConvergenceOutcome(converged=True, final_snapshot=baseline)

        command = self._adapter.command_for(request)
        deadline_seconds = self._deadline_seconds(request)
        observed = _ObservedSnapshot(latest=baseline)
        try:
            async with asyncio.timeout(deadline_seconds) as deadline:
                await self._dispatch(request.resource_id, command)
                await self._poller.wait_for(
                    self.kind,
                    request.resource_id,
                    self._build_checker(request, baseline, observed),
                )
                final = await self._fetch_existing(request.resource_id)
                observed.latest = final
        except TimeoutError as exc:
            if not deadline.expired():
                raise
            raise ConvergenceTimeoutError(
                f"{request.describe()} did not converge within {deadline_seconds}s. "
                f"Last observed state: [{observed.latest.current_state}]. "
                "You may retry the operation with a larger timeout.",
                last_snapshot=observed.latest,
            ) from exc

        verify_convergence(self._adapter, request, baseline, final)
        logger.info(
            "ML %s %s successfully transitioned to state %s",
            self.kind,
            request.resource_id,
            request.desired_state,
        )
        return ConvergenceOutcome(converged=True, final_snapshot=final)

    async def release(self, resource_id: str, force: bool = False) -> None:
        """Apply the kind's deletion policy when a state declaration is removed."""

        if self._adapter.deletion_policy is DeletionPolicy.INERT:
            logger.info(
                "Dropping state tracking for ML %s %s; the remote resource is left as is.",
                self.kind,
                resource_id,
            )
            return

        snapshot = await self._remote_api.get_status(self.kind, resource_id)
        if snapshot is None:
            logger.debug("ML %s %s no longer exists; nothing to stop.", self.kind, resource_id)
            return
        if snapshot.current_state == self._adapter.stopped_state:
            return

        try:
            await self._dispatch(resource_id, self._adapter.stop_command(force))
        except RemoteConflictError as exc:
            logger.warning("ML %s %s was already stopped: %s", self.kind, resource_id, exc)
        except ResourceNotFoundError:
            logger.debug("ML %s %s disappeared before it was stopped.", self.kind, resource_id)

    def _build_checker(
        self,
        request: TransitionRequest,
        baseline: RemoteStatusSnapshot,
        observed: _ObservedSnapshot,
    ) -> StateChecker:
        async def checker() -> bool:
            current = await self._fetch_existing(request.resource_id)
            observed.latest = current
            return self._adapter.is_converged(request, baseline, current)

        return checker

    async def _fetch_existing(self, resource_id: str) -> RemoteStatusSnapshot:
        snapshot = await self._remote_api.get_status(self.kind, resource_id)
        if snapshot is None:
            raise ResourceNotFoundError(f"ML {self.kind} {resource_id} does not exist")
        return snapshot

    async def _dispatch(self, resource_id: str, command: TransitionCommand) -> None:
        logger.info(
            "Dispatching %s for ML %s %s (force=%s, timeout=%s).",
            command.action,
            self.kind,
            resource_id,
            command.force,
            command.timeout,
        )
        try:
            await self._remote_api.dispatch_transition(
                self.kind,
                resource_id,
                command.action,
                force=command.force,
                timeout=command.timeout,
                extra_params=dict(command.extra_params),
            )
        except Exception as exc:
            exc.add_note(f"while dispatching {command.action} for ML {self.kind} {resource_id}")
            raise

    def _deadline_seconds(self, request: TransitionRequest) -> float | None:
        if request.timeout is not None:
            return request.timeout.total_seconds()
        return self._default_timeout_seconds


__all__ = ["ResourceStateController"]
