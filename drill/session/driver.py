"""
Practice Driver - Runs one practice session on a client.

The driver:
1. Starts or resumes the owner's session
2. Applies user actions through the reducer
3. Performs the repository call each transition asks for
4. Reverts transient error displays once their delay has elapsed
5. Accepts reconciled state from the sync poller

Persistence failures are logged and never roll back a local
transition: the local queue is what the user sees until a later
reconciliation corrects it.
"""

from __future__ import annotations
import logging
import threading
import time
from typing import Callable

from ..engine_core.state import DrillState, SessionState
from ..engine_core.action import Action, PersistOp, TransitionResult
from ..engine_core.reducer import Reducer, initial_state
from ..errors import DrillError, ConflictError
from ..sync.client import PracticeClient
from ..sync.reconciler import reconcile, ReconciliationResult, ReconcileReason
from .initializer import SessionInitializer, SessionNotSavedError

logger = logging.getLogger(__name__)


class PracticeDriver:
    """
    The client-side session runtime.

    Usage:
        driver = PracticeDriver(client)
        driver.start("3")

        result = driver.submit("cat")
        if result.session_finished:
            ...

        # Call periodically so ERROR / REVIEW_ERROR revert
        driver.tick()
    """

    def __init__(
        self,
        client: PracticeClient,
        reducer: Reducer | None = None,
        initializer: SessionInitializer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.reducer = reducer or Reducer()
        self.initializer = initializer or SessionInitializer(client)
        self.clock = clock
        self.list_selector: str | None = None
        self._state: DrillState | None = None
        self._lock = threading.RLock()

    @property
    def state(self) -> DrillState | None:
        return self._state

    @property
    def is_active(self) -> bool:
        """Started and not completed."""
        state = self._state
        return state is not None and not state.is_completed

    def start(self, list_selector: str) -> DrillState:
        """
        Resume the owner's session for list_selector, or start a new one.

        A stored session for a different selector is replaced. If another
        client creates a session for the same selector between our read
        and our create, that session is resumed instead.

        Raises NotFoundError when the selector yields no words,
        ConflictError when a session for another selector is in the way,
        and TransientIOError when the words cannot be fetched.
        """
        existing = None
        try:
            existing = self.client.get_session()
        except DrillError as e:
            logger.warning("Failed to fetch existing session: %s", e)

        if existing is not None and existing.list_selector == list_selector:
            logger.info("Resuming session at %d/%d", existing.progress.done, existing.progress.total)
            return self._adopt(list_selector, existing)

        try:
            session = self.initializer.initialize(
                list_selector,
                replace_existing=existing is not None,
            )
        except ConflictError:
            session = self.client.get_session()
            if session is None or session.list_selector != list_selector:
                raise
            logger.info("Session created elsewhere, resuming it")
        except SessionNotSavedError as e:
            # Practice continues locally; the next update will fail the same way
            logger.error("%s", e.message)
            with self._lock:
                self.list_selector = list_selector
                self._state = initial_state(e.queue, e.progress)
                return self._state

        return self._adopt(list_selector, session)

    def submit(self, text: str) -> TransitionResult:
        return self.dispatch(Action.submit(text))

    def declare_known(self) -> TransitionResult:
        return self.dispatch(Action.declare_known())

    def confirm_correct(self) -> TransitionResult:
        return self.dispatch(Action.confirm_correct())

    def mark_wrong(self) -> TransitionResult:
        return self.dispatch(Action.mark_wrong())

    def tick(self) -> TransitionResult | None:
        """Revert a transient status whose delay has elapsed."""
        with self._lock:
            state = self._state
            if state is None or not state.status.is_transient:
                return None
            if state.revert_at is not None and self.clock() < state.revert_at:
                return None
            return self.dispatch(Action.revert())

    def dispatch(self, action: Action) -> TransitionResult:
        """Apply an action and carry out its persistence step."""
        with self._lock:
            if self._state is None:
                return TransitionResult.failure("No session started", error_code="NOT_STARTED")

            result = self.reducer.apply(self._state, action, self.clock())
            if not result.success:
                logger.debug("Rejected %s: %s", action.action_type.value, result.error)
                return result

            self._state = result.new_state
            if result.persist == PersistOp.UPDATE:
                self._persist_safely(
                    self.client.update_session,
                    self._state.queue,
                    self._state.progress,
                )
            elif result.persist == PersistOp.REMOVE:
                self._persist_safely(self.client.remove_session)
                logger.info("Session finished: %d words", self._state.progress.total)
            return result

    def reconcile(self, remote: SessionState | None) -> ReconciliationResult:
        """Adopt remote if it is ahead of the local state."""
        with self._lock:
            if self._state is None:
                return ReconciliationResult(reason=ReconcileReason.LOCAL_BUSY)
            result = reconcile(self._state, remote)
            if result.adopted:
                self._state = result.new_state
            return result

    def _adopt(self, list_selector: str, session: SessionState) -> DrillState:
        with self._lock:
            self.list_selector = list_selector
            self._state = DrillState.from_session(session)
            return self._state

    def _persist_safely(self, call, *args):
        try:
            call(*args)
        except DrillError as e:
            logger.error("Failed to save progress: %s", e)
