"""
Practice State - Words, progress and the two views of a session.

Two state containers live here:
- SessionState: the authoritative, persisted record (one per owner)
- DrillState: the client-side view the state machine steps through

Design principles:
- Immutable: all mutations return new objects
- Serializable: to_dict()/from_dict() use the wire field names
- Queue front is the word currently presented
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class PracticeStatus(Enum):
    """Status of the word currently presented."""
    IDLE = "idle"  # Awaiting input
    ERROR = "error"  # Last submission mismatched, auto-reverts
    REVIEWING = "reviewing"  # User claimed to know it, answer revealed
    REVIEW_ERROR = "review_error"  # Self-graded wrong, auto-reverts
    COMPLETED = "completed"  # Queue exhausted

    @property
    def is_transient(self) -> bool:
        return self in {PracticeStatus.ERROR, PracticeStatus.REVIEW_ERROR}

    @property
    def accepts_answer(self) -> bool:
        return self in {PracticeStatus.IDLE, PracticeStatus.ERROR}


@dataclass(frozen=True)
class Word:
    """
    A word from a unit.

    source_text is shown to the user, target_text is the expected answer.
    """
    word_id: int
    source_text: str
    target_text: str
    list_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.word_id,
            "sourceText": self.source_text,
            "targetText": self.target_text,
            "listId": self.list_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Word:
        return cls(
            word_id=int(data["id"]),
            source_text=data["sourceText"],
            target_text=data["targetText"],
            list_id=int(data["listId"]),
        )


@dataclass(frozen=True)
class Progress:
    """Words finished out of the total the session started with."""
    total: int
    done: int = 0

    def advance(self) -> Progress:
        return Progress(total=self.total, done=self.done + 1)

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "done": self.done}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Progress:
        return cls(total=int(data["total"]), done=int(data["done"]))


def check_invariants(queue: tuple[Word, ...], progress: Progress) -> str | None:
    """
    Check the queue/progress invariants of a persisted session.

    Returns error message if broken, None if valid.
    """
    if progress.total < 0 or progress.done < 0:
        return "Progress counters must be non-negative"
    if len(queue) + progress.done != progress.total:
        return (
            f"Queue length {len(queue)} plus done {progress.done} "
            f"must equal total {progress.total}"
        )
    if progress.done >= progress.total:
        return "A finished session cannot be stored"
    return None


@dataclass(frozen=True)
class SessionState:
    """
    The authoritative practice session for one owner.

    Invariants (at every persisted snapshot):
    - len(queue) + progress.done == progress.total
    - progress.done < progress.total
    """
    owner: str
    list_selector: str
    queue: tuple[Word, ...]
    progress: Progress
    updated_at: float = 0.0

    @property
    def front(self) -> Word | None:
        return self.queue[0] if self.queue else None

    def with_progress(
        self,
        queue: tuple[Word, ...],
        progress: Progress,
        updated_at: float,
    ) -> SessionState:
        return replace(self, queue=tuple(queue), progress=progress, updated_at=updated_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "listSelector": self.list_selector,
            "queue": [w.to_dict() for w in self.queue],
            "progress": self.progress.to_dict(),
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionState:
        return cls(
            owner=data.get("owner", ""),
            list_selector=data["listSelector"],
            queue=tuple(Word.from_dict(w) for w in data["queue"]),
            progress=Progress.from_dict(data["progress"]),
            updated_at=float(data.get("updatedAt", 0.0)),
        )


@dataclass(frozen=True)
class DrillState:
    """
    Local state of one client driving a session.

    feedback is the message shown in ERROR/REVIEW_ERROR.
    revealed_answer is filled while REVIEWING.
    revert_at is the deadline after which a transient status reverts.
    """
    status: PracticeStatus
    queue: tuple[Word, ...]
    progress: Progress
    feedback: str | None = None
    revealed_answer: str | None = None
    revert_at: float | None = None

    @property
    def current_word(self) -> Word | None:
        return self.queue[0] if self.queue else None

    @property
    def is_completed(self) -> bool:
        return self.status == PracticeStatus.COMPLETED

    @classmethod
    def from_session(cls, session: SessionState) -> DrillState:
        """Fresh idle state presenting the session's front word."""
        return cls(
            status=PracticeStatus.IDLE,
            queue=tuple(session.queue),
            progress=session.progress,
        )

    def _copy_with(self, **kwargs) -> DrillState:
        return replace(self, **kwargs)
