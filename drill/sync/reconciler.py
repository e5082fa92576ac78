"""
State Reconciler - Reconciles local drill state with the stored session.

Another tab or device may have advanced the same session. The stored
session (authoritative) wins only when it is strictly further along:

    remote.progress.done > local.progress.done  -> adopt remote
    otherwise                                   -> keep local

Rules:
- Only an IDLE local state is ever overwritten. Transient or reviewing
  states hold user input in flight.
- A missing remote session is never acted on here. The client that
  completes a session handles that transition itself.
- Ties are no-ops.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from ..engine_core.state import DrillState, SessionState, PracticeStatus


class ReconcileReason(Enum):
    ADOPTED = "adopted"  # Remote was ahead
    LOCAL_BUSY = "local_busy"  # Local not idle
    REMOTE_ABSENT = "remote_absent"
    NOT_AHEAD = "not_ahead"  # Remote done <= local done


@dataclass
class ReconciliationResult:
    """
    Result of reconciling local state with the stored session.
    """
    reason: ReconcileReason
    new_state: DrillState | None = None

    @property
    def adopted(self) -> bool:
        return self.reason == ReconcileReason.ADOPTED


def reconcile(local: DrillState, remote: SessionState | None) -> ReconciliationResult:
    """Decide whether local state must be replaced by the stored session."""
    if local.status != PracticeStatus.IDLE:
        return ReconciliationResult(reason=ReconcileReason.LOCAL_BUSY)

    if remote is None:
        return ReconciliationResult(reason=ReconcileReason.REMOTE_ABSENT)

    if remote.progress.done <= local.progress.done:
        return ReconciliationResult(reason=ReconcileReason.NOT_AHEAD)

    return ReconciliationResult(
        reason=ReconcileReason.ADOPTED,
        new_state=DrillState.from_session(remote),
    )
