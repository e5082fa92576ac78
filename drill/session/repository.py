"""
Session Repository - Persists the one active session per owner.

Contract:
- get(owner)      -> SessionState | None, no side effects
- create(...)     -> SessionState, ConflictError if one exists
- update(...)     -> None, NotFoundError if none exists
- remove(owner)   -> None, idempotent

Every mutation is a read-modify-write done under one lock, so it is
atomic relative to reads of the same owner. Updates are also checked:
- total must match the stored total
- len(queue) + done == total, and done < total
- done may not go below the stored done (stale writer loses)

Backends:
- InMemorySessionRepository: dict, for tests and single-process servers
- JsonFileSessionRepository: one JSON document per owner on disk
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
import hashlib
import json
import logging
import os
import tempfile
import threading
import time

from ..engine_core.state import SessionState, Word, Progress, check_invariants
from ..errors import ConflictError, NotFoundError, ValidationError, TransientIOError

logger = logging.getLogger(__name__)


class SessionRepository(ABC):
    """
    Base class for session storage.

    Subclasses provide raw load/store/delete under the shared lock;
    the contract checks live here.
    """

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def _load(self, owner: str) -> SessionState | None:
        """Read the stored session for owner, or None."""
        pass

    @abstractmethod
    def _store(self, session: SessionState):
        """Write session, replacing any stored one for its owner."""
        pass

    @abstractmethod
    def _delete(self, owner: str):
        """Delete the stored session for owner if present."""
        pass

    def get(self, owner: str) -> SessionState | None:
        with self._lock:
            return self._load(owner)

    def create(
        self,
        owner: str,
        list_selector: str,
        queue: list[Word] | tuple[Word, ...],
        progress: Progress,
    ) -> SessionState:
        """
        Create the owner's session.

        Raises ConflictError if the owner already has one.
        """
        queue = tuple(queue)
        error = check_invariants(queue, progress)
        if error:
            raise ValidationError(error)

        with self._lock:
            if self._load(owner) is not None:
                raise ConflictError(
                    "Session already exists",
                    details={"owner": owner},
                )
            session = SessionState(
                owner=owner,
                list_selector=list_selector,
                queue=queue,
                progress=progress,
                updated_at=time.time(),
            )
            self._store(session)

        logger.info(
            "Session created for %s: selector=%s, total=%d",
            owner, list_selector, progress.total,
        )
        return session

    def update(
        self,
        owner: str,
        queue: list[Word] | tuple[Word, ...],
        progress: Progress,
    ):
        """
        Replace queue and progress of the owner's session.

        Raises NotFoundError if there is none, ConflictError if the
        update is behind the stored progress.
        """
        queue = tuple(queue)
        with self._lock:
            current = self._load(owner)
            if current is None:
                raise NotFoundError("No active session", details={"owner": owner})

            if progress.total != current.progress.total:
                raise ValidationError(
                    f"Total is fixed at {current.progress.total}",
                    details={"total": progress.total},
                )
            error = check_invariants(queue, progress)
            if error:
                raise ValidationError(error)
            if progress.done < current.progress.done:
                raise ConflictError(
                    "Session has advanced past this update",
                    details={"stored_done": current.progress.done, "done": progress.done},
                )

            self._store(current.with_progress(queue, progress, updated_at=time.time()))

    def remove(self, owner: str):
        with self._lock:
            self._delete(owner)
        logger.debug("Session removed for %s", owner)


class InMemorySessionRepository(SessionRepository):
    """Sessions held in a dict keyed by owner."""

    def __init__(self):
        super().__init__()
        self._sessions: dict[str, SessionState] = {}

    def _load(self, owner: str) -> SessionState | None:
        return self._sessions.get(owner)

    def _store(self, session: SessionState):
        self._sessions[session.owner] = session

    def _delete(self, owner: str):
        self._sessions.pop(owner, None)


class JsonFileSessionRepository(SessionRepository):
    """
    File-based session storage.

    Usage:
        repo = JsonFileSessionRepository(data_dir="~/.drill/sessions")
        repo.create("alice", "all", queue, Progress(total=len(queue)))

    Design decisions:
    - One file per owner, named by a hash of the owner id
    - Writes go to a temp file in the same directory, then os.replace
    - OSError is reported as TransientIOError
    """

    def __init__(self, data_dir: str | Path | None = None):
        super().__init__()
        if data_dir is None:
            data_dir = Path.home() / ".drill" / "sessions"
        self.data_dir = Path(data_dir).expanduser()

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _load(self, owner: str) -> SessionState | None:
        path = self._get_path(owner)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise TypeError(f"Expected an object, got {type(data).__name__}")
            return SessionState.from_dict(data)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise TransientIOError(f"Failed to read session: {e}") from e
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            # Unreadable document, treat as absent
            logger.warning("Discarding corrupt session file %s", path)
            path.unlink(missing_ok=True)
            return None

    def _store(self, session: SessionState):
        path = self._get_path(session.owner)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(session.to_dict(), f, ensure_ascii=False)
                os.replace(tmp_path, path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise TransientIOError(f"Failed to write session: {e}") from e

    def _delete(self, owner: str):
        try:
            self._get_path(owner).unlink(missing_ok=True)
        except OSError as e:
            raise TransientIOError(f"Failed to delete session: {e}") from e

    def _get_path(self, owner: str) -> Path:
        """
        Get file path for an owner's session.

        Uses SHA-256 truncated to 16 chars.
        """
        owner_hash = hashlib.sha256(owner.encode("utf-8")).hexdigest()[:16]
        return self.data_dir / f"{owner_hash}.json"
