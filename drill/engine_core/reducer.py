"""
Reducer - Applies practice actions to local drill state.

The reducer is the single point of state mutation for a client.
All transitions go through Reducer.apply(); apply_action() wraps it
for one-off calls.

Design principles:
- Pure function: (state, action, now) -> TransitionResult
- Validates status before applying (guards against double submits)
- Never performs I/O: the result names the repository call to make
- Time is passed in, so auto-revert deadlines are testable
"""

from __future__ import annotations
from dataclasses import dataclass

from ..config import DEFAULT_FEEDBACK_DELAY
from .state import DrillState, PracticeStatus, Progress
from .action import Action, ActionType, Outcome, PersistOp, TransitionResult
from .answers import answers_match, display_answer, correction_message

INVALID_STATE = "INVALID_STATE"


@dataclass
class Reducer:
    """
    Reducer applies actions to drill state.

    Stateless - all state is in DrillState.
    feedback_delay is how long ERROR/REVIEW_ERROR stay up.
    """
    feedback_delay: float = DEFAULT_FEEDBACK_DELAY

    def apply(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        """
        Apply an action to the drill state.

        Returns TransitionResult with new state or a rejection.
        """
        validation_error = self._validate_action(state, action, now)
        if validation_error:
            return TransitionResult.failure(validation_error, error_code=INVALID_STATE)

        handler = self._get_handler(action.action_type)
        return handler(state, action, now)

    def _validate_action(self, state: DrillState, action: Action, now: float) -> str | None:
        """
        Validate that an action is allowed in the current status.

        Returns error message if invalid, None if valid.
        """
        status = state.status
        if status == PracticeStatus.COMPLETED:
            return "Session is completed - no actions allowed"

        if state.current_word is None:
            return "Queue is empty"

        action_type = action.action_type
        if action_type in {ActionType.SUBMIT_ANSWER, ActionType.DECLARE_KNOWN}:
            if not status.accepts_answer:
                return f"Cannot {action_type.value} while {status.value}"
            if action_type == ActionType.SUBMIT_ANSWER and action.text is None:
                return "No answer submitted"

        elif action_type in {ActionType.CONFIRM_CORRECT, ActionType.MARK_WRONG}:
            if status != PracticeStatus.REVIEWING:
                return f"Cannot {action_type.value} while {status.value}"

        elif action_type == ActionType.REVERT:
            if not status.is_transient:
                return f"Nothing to revert while {status.value}"
            if state.revert_at is not None and now < state.revert_at:
                return "Feedback delay has not elapsed"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.SUBMIT_ANSWER: self._handle_submit,
            ActionType.DECLARE_KNOWN: self._handle_declare_known,
            ActionType.CONFIRM_CORRECT: self._handle_confirm_correct,
            ActionType.MARK_WRONG: self._handle_mark_wrong,
            ActionType.REVERT: self._handle_revert,
        }
        return handlers[action_type]

    def _handle_submit(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        """Handle a typed answer."""
        word = state.current_word
        if answers_match(action.text, word.target_text):
            return self._confirm(state)

        # Mismatch: show the answer, keep the queue, allow retry
        feedback = correction_message(word.target_text)
        new_state = state._copy_with(
            status=PracticeStatus.ERROR,
            feedback=feedback,
            revealed_answer=None,
            revert_at=now + self.feedback_delay,
        )
        return TransitionResult.success_with_state(
            new_state,
            Outcome.MISMATCH,
            messages=[feedback],
        )

    def _handle_declare_known(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        """Reveal the answer for self-grading."""
        answer = display_answer(state.current_word.target_text)
        new_state = state._copy_with(
            status=PracticeStatus.REVIEWING,
            feedback=None,
            revealed_answer=answer,
            revert_at=None,
        )
        return TransitionResult.success_with_state(new_state, Outcome.REVEALED, messages=[answer])

    def _handle_confirm_correct(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        return self._confirm(state)

    def _confirm(self, state: DrillState) -> TransitionResult:
        """Pop the front word and count it as done."""
        new_queue = state.queue[1:]
        new_progress = state.progress.advance()

        if not new_queue:
            new_state = DrillState(
                status=PracticeStatus.COMPLETED,
                queue=(),
                progress=new_progress,
            )
            return TransitionResult.success_with_state(
                new_state,
                Outcome.COMPLETED,
                persist=PersistOp.REMOVE,
                messages=[f"All {new_progress.total} words done"],
            )

        new_state = DrillState(
            status=PracticeStatus.IDLE,
            queue=new_queue,
            progress=new_progress,
        )
        return TransitionResult.success_with_state(new_state, Outcome.ADVANCED, persist=PersistOp.UPDATE)

    def _handle_mark_wrong(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        """Move the revealed word to the back of the queue."""
        front = state.queue[0]
        feedback = correction_message(front.target_text)
        new_state = DrillState(
            status=PracticeStatus.REVIEW_ERROR,
            queue=state.queue[1:] + (front,),
            progress=state.progress,
            feedback=feedback,
            revert_at=now + self.feedback_delay,
        )
        return TransitionResult.success_with_state(
            new_state,
            Outcome.ROTATED,
            persist=PersistOp.UPDATE,
            messages=[feedback],
        )

    def _handle_revert(self, state: DrillState, action: Action, now: float) -> TransitionResult:
        """Clear transient feedback and present the current front."""
        new_state = state._copy_with(
            status=PracticeStatus.IDLE,
            feedback=None,
            revealed_answer=None,
            revert_at=None,
        )
        return TransitionResult.success_with_state(new_state, Outcome.REVERTED)


def apply_action(
    state: DrillState,
    action: Action,
    now: float,
    feedback_delay: float = DEFAULT_FEEDBACK_DELAY,
) -> TransitionResult:
    """
    Convenience function to apply an action.

    Creates a reducer and applies the action.
    """
    reducer = Reducer(feedback_delay=feedback_delay)
    return reducer.apply(state, action, now)


def initial_state(queue, progress: Progress) -> DrillState:
    """Idle state presenting the front of queue."""
    return DrillState(status=PracticeStatus.IDLE, queue=tuple(queue), progress=progress)
