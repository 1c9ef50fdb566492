"""Post-convergence verification of a state transition."""

from __future__ import annotations

import logging

from ml_state_convergence.application.services.transition_adapters import TransitionAdapter
from ml_state_convergence.domain.errors import DriftError
from ml_state_convergence.domain.models import RemoteStatusSnapshot
from ml_state_convergence.domain.requests import TransitionRequest

logger = logging.getLogger(__name__)


def verify_convergence(
    adapter: TransitionAdapter,
    request: TransitionRequest,
    baseline: RemoteStatusSnapshot,
    final: RemoteStatusSnapshot,
) -> None:
    """Raise `DriftError` unless final shows a genuine transition from baseline.

    A progress counter that went backwards means the remote reset the resource
    instead of transitioning it, even when the reported state matches. A final
    state other than the desired one is only accepted for missed transitions
    whose counter strictly advanced.
    """

    before = adapter.progress_counter(baseline)
    after = adapter.progress_counter(final)

    if adapter.has_progress_counter and (before is None or after is None):
        logger.warning(
            "Expected %s '%s' to report progress counters before and after the update. "
            "Before %s - After %s",
            request.resource_kind,
            request.resource_id,
            baseline,
            final,
        )
    elif before is not None and after is not None and after < before:
        raise DriftError(
            f"[{request.resource_id}] {request.resource_kind} reports state "
            f"[{final.current_state}] but its progress counter regressed from "
            f"{before} to {after}; the remote reset it instead of transitioning.",
            last_snapshot=final,
        )

    if final.current_state == request.desired_state:
        return

    if (
        adapter.allows_missed_transition(request)
        and before is not None
        and after is not None
        and after > before
    ):
        logger.info(
            "%s '%s' settled in [%s] after running; progress advanced from %s to %s.",
            request.resource_kind,
            request.resource_id,
            final.current_state,
            before,
            after,
        )
        return

    raise DriftError(
        f"[{request.resource_id}] {request.resource_kind} did not settle into the "
        f"[{request.desired_state}] state. The current state is [{final.current_state}]",
        last_snapshot=final,
    )


__all__ = ["verify_convergence"]
