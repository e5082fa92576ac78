"""
Session Module - The one active practice session per user.

A session represents one pass through a shuffled word queue:
- Created when the user starts practicing a selector
- Updated after every answer that changes the queue
- Deleted when the queue empties or the user starts another one

The repository is the single source of truth. Each client runs a
PracticeDriver holding its local view of the session.
"""

from .repository import SessionRepository, InMemorySessionRepository, JsonFileSessionRepository
from .initializer import SessionInitializer, Selector, SelectorKind, parse_selector, parse_unit_ids
from .driver import PracticeDriver

__all__ = [
    "SessionRepository",
    "InMemorySessionRepository",
    "JsonFileSessionRepository",
    "SessionInitializer",
    "Selector",
    "SelectorKind",
    "parse_selector",
    "parse_unit_ids",
    "PracticeDriver",
]
