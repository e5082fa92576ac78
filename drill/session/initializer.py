"""
Session Initializer - Builds a new practice queue from a list selector.

Selectors:
- "7"        one unit; NotFoundError if it is missing or not owned
- "7,9,x"    several units; non-numeric ids dropped, units not owned skipped
- "all"      every unit the owner has

The resolved words are shuffled with random.Random.shuffle (a
Fisher-Yates shuffle, every permutation equally likely) and stored
with progress {total: len(words), done: 0}.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random

from ..engine_core.state import SessionState, Word, Progress
from ..errors import DrillError, ConflictError, NotFoundError
from ..sync.client import PracticeClient

logger = logging.getLogger(__name__)

ALL_UNITS = "all"


class SessionNotSavedError(DrillError):
    """A new session was built but the store rejected or failed the write."""

    def __init__(self, message: str, queue: tuple[Word, ...], progress: Progress):
        super().__init__(message)
        self.queue = queue
        self.progress = progress


class SelectorKind(Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"
    ALL = "all"


@dataclass(frozen=True)
class Selector:
    """A parsed list selector."""
    raw: str
    kind: SelectorKind
    unit_ids: tuple[int, ...] = ()


def parse_unit_ids(raw: str) -> list[int]:
    """
    Parse "1,2,x" into [1, 2].

    Malformed ids are filtered out rather than failing the request.
    """
    ids = []
    for part in raw.split(","):
        part = part.strip()
        try:
            ids.append(int(part))
        except ValueError:
            continue
    return ids


def parse_selector(raw: str) -> Selector:
    """Classify a selector string."""
    selector = raw.strip()
    if selector.lower() == ALL_UNITS:
        return Selector(raw=raw, kind=SelectorKind.ALL)
    if "," in selector:
        return Selector(raw=raw, kind=SelectorKind.MULTIPLE, unit_ids=tuple(parse_unit_ids(selector)))
    return Selector(raw=raw, kind=SelectorKind.SINGLE, unit_ids=tuple(parse_unit_ids(selector)))


@dataclass
class SessionInitializer:
    """
    Creates a new session for a selector.

    Usage:
        initializer = SessionInitializer(client)
        session = initializer.initialize("3,4")
    """
    client: PracticeClient
    rng: random.Random = field(default_factory=random.Random)

    def resolve_words(self, list_selector: str) -> list[Word]:
        """Resolve a selector to the words it covers."""
        selector = parse_selector(list_selector)

        if selector.kind == SelectorKind.ALL:
            words = []
            for unit_id in self.client.list_unit_ids():
                words.extend(self.client.get_unit_words(unit_id))
            return words

        if selector.kind == SelectorKind.MULTIPLE:
            return self.client.get_words(list(selector.unit_ids))

        if not selector.unit_ids:
            raise NotFoundError(f"Unit not found: {list_selector}")
        return self.client.get_unit_words(selector.unit_ids[0])

    def shuffle(self, words: list[Word]) -> list[Word]:
        """Uniformly shuffled copy of words."""
        shuffled = list(words)
        self.rng.shuffle(shuffled)
        return shuffled

    def initialize(self, list_selector: str, replace_existing: bool = False) -> SessionState:
        """
        Build and persist a new session.

        With replace_existing, the stored session is removed once the
        new words are resolved; a failed removal is only logged.

        Raises NotFoundError if the selector yields no words (nothing
        is created or removed), ConflictError if the owner already has
        a session, and SessionNotSavedError if the store fails.
        """
        words = self.resolve_words(list_selector)
        if not words:
            raise NotFoundError(
                "No words found",
                details={"list_selector": list_selector},
            )

        queue = tuple(self.shuffle(words))
        progress = Progress(total=len(queue), done=0)

        if replace_existing:
            try:
                self.client.remove_session()
            except DrillError as e:
                logger.error("Failed to remove previous session: %s", e)

        try:
            session = self.client.create_session(list_selector, queue, progress)
        except ConflictError:
            raise
        except DrillError as e:
            raise SessionNotSavedError(
                f"Failed to create session: {e}",
                queue=queue,
                progress=progress,
            ) from e

        logger.info("Initialized session for selector %s with %d words", list_selector, len(queue))
        return session
