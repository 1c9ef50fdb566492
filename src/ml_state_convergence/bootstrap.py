"""Engine wiring."""

import logging

from ml_state_convergence.application.services import (
    ConvergencePoller,
    ResourceStateController,
    StateReconciliationService,
    TransitionAdapter,
    default_adapters,
)
from ml_state_convergence.config import Settings
from ml_state_convergence.domain.ports import RemoteResourceApi
from ml_state_convergence.domain.resource_types import ResourceKind

logger = logging.getLogger(__name__)


def _build_controllers(
    remote_api: RemoteResourceApi,
    settings: Settings,
    adapters: dict[ResourceKind, TransitionAdapter],
) -> dict[ResourceKind, ResourceStateController]:
    poller = ConvergencePoller(poll_interval_seconds=settings.poll_interval_seconds)
    return {
        kind: ResourceStateController(
            remote_api=remote_api,
            adapter=adapter,
            poller=poller,
            default_timeout_seconds=settings.default_timeout_seconds,
        )
        for kind, adapter in adapters.items()
    }


def build_state_reconciliation_service(
    remote_api: RemoteResourceApi,
    settings: Settings | None = None,
) -> StateReconciliationService:
    """Compose service graph around one remote API client."""

    settings = settings or Settings()
    if settings.default_timeout_seconds is None:
        logger.warning(
            "No default convergence timeout configured; requests without a timeout "
            "may wait indefinitely."
        )
    controllers = _build_controllers(remote_api, settings, default_adapters())
    return StateReconciliationService(controllers)


__all__ = ["build_state_reconciliation_service"]
