"""Remote resource API adapters."""

from ml_state_convergence.infrastructure.remote.in_memory_remote_api import (
    DispatchedTransition,
    InMemoryRemoteResourceApi,
)

__all__ = ["DispatchedTransition", "InMemoryRemoteResourceApi"]
