"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the server.
JSON field names are camelCase (listSelector, sourceText, ...);
Python attributes are snake_case.

Error Codes:
- SESSION_NOT_FOUND: No active session for the user
- SESSION_CONFLICT: Session already exists, or the update is stale
- UNIT_NOT_FOUND: Unit does not exist or belongs to someone else
- VALIDATION_ERROR: Payload breaks a session invariant
- UNAUTHORIZED: Missing or unknown bearer token
- TRANSIENT_IO_ERROR: Storage unavailable, retry later
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.state import Word, Progress, SessionState
from ..words.store import Unit


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_CONFLICT = "SESSION_CONFLICT"
    UNIT_NOT_FOUND = "UNIT_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    TRANSIENT_IO_ERROR = "TRANSIENT_IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class WordModel(BaseModel):
    """A word as it travels in a queue."""
    id: int
    source_text: str = Field(alias="sourceText", description="Shown to the user")
    target_text: str = Field(alias="targetText", description="Expected answer")
    list_id: int = Field(alias="listId")

    model_config = {"populate_by_name": True}

    def to_word(self) -> Word:
        return Word(
            word_id=self.id,
            source_text=self.source_text,
            target_text=self.target_text,
            list_id=self.list_id,
        )

    @classmethod
    def from_word(cls, word: Word) -> "WordModel":
        return cls(
            id=word.word_id,
            source_text=word.source_text,
            target_text=word.target_text,
            list_id=word.list_id,
        )


class ProgressModel(BaseModel):
    """Words finished out of the session total."""
    total: int = Field(ge=0)
    done: int = Field(ge=0)

    def to_progress(self) -> Progress:
        return Progress(total=self.total, done=self.done)


class UnitModel(BaseModel):
    """A word list."""
    id: int
    name: str
    created_at: float = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_unit(cls, unit: Unit) -> "UnitModel":
        return cls(id=unit.unit_id, name=unit.name, created_at=unit.created_at)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Body of POST /session."""
    list_selector: str = Field(alias="listSelector", min_length=1)
    queue: list[WordModel]
    progress: ProgressModel

    model_config = {"populate_by_name": True}


class UpdateSessionRequest(BaseModel):
    """Body of PUT /session."""
    queue: list[WordModel]
    progress: ProgressModel


# =============================================================================
# Response Models
# =============================================================================

class SessionModel(BaseModel):
    """The stored practice session."""
    list_selector: str = Field(alias="listSelector")
    queue: list[WordModel]
    progress: ProgressModel
    updated_at: float = Field(alias="updatedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_session(cls, session: SessionState) -> "SessionModel":
        return cls(
            list_selector=session.list_selector,
            queue=[WordModel.from_word(w) for w in session.queue],
            progress=ProgressModel(total=session.progress.total, done=session.progress.done),
            updated_at=session.updated_at,
        )


class UnitDetailResponse(BaseModel):
    """A unit and its words."""
    unit: UnitModel
    words: list[WordModel]


class WordsResponse(BaseModel):
    """Words of several units."""
    words: list[WordModel]


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
