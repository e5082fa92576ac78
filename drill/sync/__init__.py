"""
Sync Module - Keeps a client's session in step with the server.

A session can be open in several tabs or devices at once. Each client
polls the stored session and adopts it when it is further along
(higher done count). There is no push channel and no locking: the
most advanced state wins.
"""

from .client import PracticeClient, LocalPracticeClient, HttpPracticeClient
from .reconciler import reconcile, ReconciliationResult, ReconcileReason
from .poller import SyncPoller

__all__ = [
    "PracticeClient",
    "LocalPracticeClient",
    "HttpPracticeClient",
    "reconcile",
    "ReconciliationResult",
    "ReconcileReason",
    "SyncPoller",
]
