"""Infrastructure layer public API."""

from ml_state_convergence.infrastructure.remote import (
    DispatchedTransition,
    InMemoryRemoteResourceApi,
)

__all__ = ["DispatchedTransition", "InMemoryRemoteResourceApi"]
