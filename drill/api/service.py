"""
API Service - Business logic layer between the API and the stores.

The service:
1. Scopes every call to the authenticated owner
2. Delegates session storage to the SessionRepository
3. Reads and writes units through the word store

This layer is framework-agnostic (used by FastAPI and by
LocalPracticeClient in-process). Errors are raised as drill errors.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from ..engine_core.state import SessionState, Word, Progress
from ..session.repository import SessionRepository, InMemorySessionRepository
from ..session.initializer import parse_unit_ids
from ..words.store import InMemoryWordStore, Unit

logger = logging.getLogger(__name__)


@dataclass
class PracticeService:
    """
    Main service for the practice API.

    Usage:
        service = PracticeService()

        unit = service.upload_unit("alice", "Animals", "cat,кот\\ndog,собака")
        session = service.get_session("alice")
    """
    repository: SessionRepository = field(default_factory=InMemorySessionRepository)
    word_store: InMemoryWordStore = field(default_factory=InMemoryWordStore)

    # =========================================================================
    # Sessions
    # =========================================================================

    def get_session(self, owner: str) -> SessionState | None:
        return self.repository.get(owner)

    def create_session(
        self,
        owner: str,
        list_selector: str,
        queue: list[Word] | tuple[Word, ...],
        progress: Progress,
    ) -> SessionState:
        return self.repository.create(owner, list_selector, queue, progress)

    def update_session(
        self,
        owner: str,
        queue: list[Word] | tuple[Word, ...],
        progress: Progress,
    ):
        self.repository.update(owner, queue, progress)

    def remove_session(self, owner: str):
        self.repository.remove(owner)

    # =========================================================================
    # Units and words
    # =========================================================================

    def list_units(self, owner: str) -> list[Unit]:
        return self.word_store.list_units(owner)

    def get_unit(self, owner: str, unit_id: int) -> tuple[Unit, list[Word]]:
        return self.word_store.get_unit(owner, unit_id)

    def get_words(self, owner: str, unit_ids: list[int] | str) -> list[Word]:
        """
        Words of several units owned by owner.

        unit_ids may be the raw "1,2,3" query value; malformed ids are
        dropped and an empty id set gives an empty list.
        """
        if isinstance(unit_ids, str):
            unit_ids = parse_unit_ids(unit_ids)
        if not unit_ids:
            return []
        return self.word_store.words_for_units(owner, unit_ids)

    def upload_unit(self, owner: str, name: str, content: str) -> Unit:
        return self.word_store.import_csv(owner, name, content)

    def delete_unit(self, owner: str, unit_id: int):
        self.word_store.delete_unit(owner, unit_id)
