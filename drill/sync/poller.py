"""
Sync Poller - Periodic reconciliation for one practice driver.

While the driver is active and not completed, every interval:
1. Skip unless the driver is IDLE
2. Fetch the stored session
3. Hand it to the driver, which reconciles under its own lock

Fetch failures are logged; the next tick is the retry.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import threading

from ..config import DEFAULT_SYNC_INTERVAL
from ..engine_core.state import PracticeStatus
from ..errors import DrillError
from .reconciler import ReconciliationResult, ReconcileReason

if TYPE_CHECKING:
    from ..session.driver import PracticeDriver

logger = logging.getLogger(__name__)


class SyncPoller:
    """
    Polls the session store on a background thread.

    Usage:
        poller = SyncPoller(driver, interval=2.0)
        poller.start()
        ...
        poller.stop()

    poll_once() runs a single tick and can be called directly.
    """

    def __init__(self, driver: PracticeDriver, interval: float = DEFAULT_SYNC_INTERVAL):
        self.driver = driver
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> ReconciliationResult | None:
        """
        Run one sync tick.

        Returns the reconciliation result, or None if the tick was
        skipped or the fetch failed.
        """
        if not self.driver.is_active:
            return None
        if self.driver.state.status != PracticeStatus.IDLE:
            return None

        try:
            remote = self.driver.client.get_session()
        except DrillError as e:
            logger.warning("Sync poll failed: %s", e)
            return None

        result = self.driver.reconcile(remote)
        if result.reason == ReconcileReason.ADOPTED:
            logger.info(
                "Synced from server: done=%d/%d",
                result.new_state.progress.done,
                result.new_state.progress.total,
            )
        return result

    def run(self):
        """Poll until stopped or the session is no longer active."""
        while not self._stop_event.wait(self.interval):
            if not self.driver.is_active:
                break
            self.poll_once()

    def start(self):
        """Start polling on a daemon thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="drill-sync", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None):
        """Stop polling and wait for the thread to exit."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
