"""
Action System - User actions and transition results.

Actions represent:
1. User input (submit answer, "I know this", confirm, "I was wrong")
2. Timer expiry (revert a transient error display)

All local state changes flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ActionType(Enum):
    """Types of actions the state machine accepts."""
    SUBMIT_ANSWER = "submit_answer"
    DECLARE_KNOWN = "declare_known"
    CONFIRM_CORRECT = "confirm_correct"
    MARK_WRONG = "mark_wrong"
    REVERT = "revert"  # Feedback delay elapsed


class Outcome(Enum):
    """Classification of what a transition did."""
    REJECTED = "rejected"
    MISMATCH = "mismatch"
    REVEALED = "revealed"
    ADVANCED = "advanced"
    COMPLETED = "completed"
    ROTATED = "rotated"
    REVERTED = "reverted"


class PersistOp(Enum):
    """Repository call the caller must make after a transition."""
    NONE = "none"
    UPDATE = "update"
    REMOVE = "remove"


@dataclass(frozen=True)
class Action:
    """
    A user or timer action to apply to a DrillState.
    """
    action_type: ActionType
    text: str | None = None  # Submitted answer

    @classmethod
    def submit(cls, text: str) -> Action:
        """Factory for submit answer."""
        return cls(action_type=ActionType.SUBMIT_ANSWER, text=text)

    @classmethod
    def declare_known(cls) -> Action:
        """Factory for "I know this"."""
        return cls(action_type=ActionType.DECLARE_KNOWN)

    @classmethod
    def confirm_correct(cls) -> Action:
        """Factory for confirming a revealed answer."""
        return cls(action_type=ActionType.CONFIRM_CORRECT)

    @classmethod
    def mark_wrong(cls) -> Action:
        """Factory for "I was wrong"."""
        return cls(action_type=ActionType.MARK_WRONG)

    @classmethod
    def revert(cls) -> Action:
        """Factory for feedback timer expiry."""
        return cls(action_type=ActionType.REVERT)


@dataclass
class TransitionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action was accepted
    - New state (if accepted)
    - What happened, and which persistence call must follow
    """
    success: bool
    new_state: Any | None = None  # DrillState
    outcome: Outcome = Outcome.REJECTED
    persist: PersistOp = PersistOp.NONE
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    messages: list[str] = field(default_factory=list)

    @property
    def session_finished(self) -> bool:
        return self.outcome == Outcome.COMPLETED

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> TransitionResult:
        """Create a rejection result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        outcome: Outcome,
        persist: PersistOp = PersistOp.NONE,
        messages: list[str] | None = None,
    ) -> TransitionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            outcome=outcome,
            persist=persist,
            messages=messages or [],
        )
