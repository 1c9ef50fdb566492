"""Fixed-cadence poller driving a state checker to completion."""

from __future__ import annotations

import asyncio
import logging

from ml_state_convergence.domain.ports import StateChecker
from ml_state_convergence.domain.resource_types import ResourceKind

_DEFAULT_POLL_INTERVAL_SECONDS = 2.0

logger = logging.getLogger(__name__)


class ConvergencePoller:
    """Invoke a checker until it reports the desired state.

    The poller has no attempt limit and applies no deadline of its own. Callers
    bound the wait with `asyncio.timeout()`; expiry and cancellation propagate
    unchanged. A checker exception ends polling on the first occurrence.
    """

    def __init__(self, poll_interval_seconds: float = _DEFAULT_POLL_INTERVAL_SECONDS) -> None:
        if poll_interval_seconds <= 0:
            raise ValueError(f"Poll interval must be > 0 seconds, got {poll_interval_seconds}.")
        self._poll_interval_seconds = poll_interval_seconds

    @property
    def poll_interval_seconds(self) -> float:
        """Return delay between two checker invocations."""

        return self._poll_interval_seconds

    async def wait_for(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        checker: StateChecker,
    ) -> None:
        """Return once checker() is True, re-raising its first error."""

        attempt = 0
        while True:
            attempt += 1
            try:
                in_desired_state = await checker()
            except Exception as exc:
                exc.add_note(
                    f"while waiting for {resource_kind} '{resource_id}' (check #{attempt})"
                )
                raise

            if in_desired_state:
                logger.debug(
                    "%s '%s' reached desired state after %s check(s).",
                    resource_kind,
                    resource_id,
                    attempt,
                )
                return

            logger.debug(
                "%s '%s' not yet in desired state (check #%s), next check in %ss.",
                resource_kind,
                resource_id,
                attempt,
                self._poll_interval_seconds,
            )
            await asyncio.sleep(self._poll_interval_seconds)


__all__ = ["ConvergencePoller"]
