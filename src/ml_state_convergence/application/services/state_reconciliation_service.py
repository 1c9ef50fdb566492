"""Entry point routing transition requests to per-kind controllers."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ml_state_convergence.application.services.state_controller import ResourceStateController
from ml_state_convergence.domain.errors import StateConfigurationError, StateConvergenceError
from ml_state_convergence.domain.models import ConvergenceOutcome
from ml_state_convergence.domain.requests import TransitionRequest
from ml_state_convergence.domain.resource_types import ResourceKind

logger = logging.getLogger(__name__)


class StateReconciliationService:
    """Reconcile ML jobs and datafeeds through injected controllers."""

    def __init__(self, controllers: Mapping[ResourceKind, ResourceStateController]) -> None:
        self._controllers = dict(controllers)

    async def reconcile(self, request: TransitionRequest) -> ConvergenceOutcome:
        """Reconcile one request, raising on any failure."""

        controller = self._controller_for(request.resource_kind)
        return await controller.reconcile(request)

    async def reconcile_outcome(self, request: TransitionRequest) -> ConvergenceOutcome:
        """Reconcile one request and report domain failures in the outcome.

        The outcome keeps the last snapshot observed before the failure so
        callers can record how far the resource got. Cancellation and unexpected
        exceptions still raise.
        """

        try:
            return await self.reconcile(request)
        except StateConvergenceError as exc:
            logger.warning("Reconciling %s failed: %s", request.describe(), exc)
            return ConvergenceOutcome(converged=False, final_snapshot=exc.last_snapshot, error=exc)

    async def release(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        force: bool = False,
    ) -> None:
        """Apply the deletion policy of resource_kind to resource_id."""

        await self._controller_for(resource_kind).release(resource_id, force=force)

    def _controller_for(self, resource_kind: ResourceKind) -> ResourceStateController:
        controller = self._controllers.get(resource_kind)
        if controller is None:
            raise StateConfigurationError(f"No state controller configured for {resource_kind}.")
        return controller


__all__ = ["StateReconciliationService"]
