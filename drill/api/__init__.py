"""
API Module - HTTP interface for practice clients.

Clients:
1. Upload word lists (units)
2. Fetch or create their practice session
3. Save progress after each answer
4. Poll the session to stay in step with other tabs

Every call is scoped to the owner resolved from the bearer token.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    UpdateSessionRequest,
    # Responses
    SessionModel,
    UnitModel,
    UnitDetailResponse,
    WordsResponse,
    SuccessResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    WordModel,
    ProgressModel,
    ErrorCode,
)
from .service import PracticeService
from .auth import TokenIdentityService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "UpdateSessionRequest",
    # Responses
    "SessionModel",
    "UnitModel",
    "UnitDetailResponse",
    "WordsResponse",
    "SuccessResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "WordModel",
    "ProgressModel",
    "ErrorCode",
    # Service
    "PracticeService",
    "TokenIdentityService",
    "create_app",
]
