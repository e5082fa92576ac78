"""
Engine Core - Pure practice state machine.

The engine:
1. Holds the local DrillState for one client
2. Applies user actions via the reducer
3. Reports which repository call each transition needs
"""

from .state import Word, Progress, SessionState, DrillState, PracticeStatus, check_invariants
from .action import Action, ActionType, Outcome, PersistOp, TransitionResult
from .answers import normalize_answer, answers_match, display_answer, correction_message
from .reducer import Reducer, apply_action, initial_state

__all__ = [
    "Word",
    "Progress",
    "SessionState",
    "DrillState",
    "PracticeStatus",
    "check_invariants",
    "Action",
    "ActionType",
    "Outcome",
    "PersistOp",
    "TransitionResult",
    "normalize_answer",
    "answers_match",
    "display_answer",
    "correction_message",
    "Reducer",
    "apply_action",
    "initial_state",
]
