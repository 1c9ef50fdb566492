"""Application services public API."""

from ml_state_convergence.application.services.convergence_poller import ConvergencePoller
from ml_state_convergence.application.services.drift import verify_convergence
from ml_state_convergence.application.services.state_controller import ResourceStateController
from ml_state_convergence.application.services.state_reconciliation_service import (
    StateReconciliationService,
)
from ml_state_convergence.application.services.transition_adapters import (
    DatafeedTransitionAdapter,
    DeletionPolicy,
    JobTransitionAdapter,
    TransitionAdapter,
    TransitionCommand,
    default_adapters,
)

__all__ = [
    "ConvergencePoller",
    "DatafeedTransitionAdapter",
    "DeletionPolicy",
    "JobTransitionAdapter",
    "ResourceStateController",
    "StateReconciliationService",
    "TransitionAdapter",
    "TransitionCommand",
    "default_adapters",
    "verify_convergence",
]
