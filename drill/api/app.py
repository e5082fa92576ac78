"""
FastAPI Application - REST API for practice clients.

Endpoints (all require a bearer token):
    GET    /api/v1/session          Current session, or null
    POST   /api/v1/session          Create session (409 if one exists)
    PUT    /api/v1/session          Update queue/progress (404 if none)
    DELETE /api/v1/session          Remove session (always 200)
    GET    /api/v1/units            List the user's units
    POST   /api/v1/units            Upload a CSV unit
    GET    /api/v1/units/{id}       Unit and its words
    DELETE /api/v1/units/{id}       Delete a unit
    GET    /api/v1/words?units=1,2  Words of several units

Session sync between tabs is done by clients polling GET /session;
there is no push channel.

All responses are JSON with explicit Pydantic schemas.
Uploads are multipart/form-data.
"""

from typing import Annotated, Optional
import logging

from fastapi import Depends, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..config import DrillConfig
from ..errors import (
    DrillError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    TransientIOError,
)
from .auth import TokenIdentityService
from .service import PracticeService
from .schemas import (
    # Request models
    CreateSessionRequest,
    UpdateSessionRequest,
    # Response models
    SessionModel,
    UnitModel,
    UnitDetailResponse,
    WordModel,
    WordsResponse,
    SuccessResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ErrorCode,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

_STATUS_BY_ERROR: list[tuple[type[DrillError], int]] = [
    (AuthenticationError, 401),
    (ConflictError, 409),
    (NotFoundError, 404),
    (ValidationError, 400),
    (TransientIOError, 503),
]


def status_for_error(error: DrillError) -> int:
    for error_cls, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status_code
    return 500


def build_service(config: DrillConfig) -> PracticeService:
    """Service with the repository backend selected by config."""
    from ..session.repository import InMemorySessionRepository, JsonFileSessionRepository

    if config.data_dir:
        repository = JsonFileSessionRepository(data_dir=f"{config.data_dir}/sessions")
    else:
        repository = InMemorySessionRepository()
    return PracticeService(repository=repository)


def create_app(
    service: PracticeService | None = None,
    config: DrillConfig | None = None,
    identity: TokenIdentityService | None = None,
):
    """
    Create the FastAPI application.

    Args:
        service: Optional PracticeService (built from config if not provided)
        config: Optional DrillConfig (read from environment if not provided)
        identity: Optional token resolver (built from config.api_tokens)

    Returns:
        FastAPI application instance
    """
    config = config or DrillConfig.from_env()
    api_service = service or build_service(config)
    identity = identity or TokenIdentityService(tokens=dict(config.api_tokens))

    app = FastAPI(
        title="Drill API",
        description="""
Vocabulary practice sessions with resume and multi-tab sync.

## Session Flow

1. `GET /session` - resume if a session exists for the same selector
2. Otherwise fetch words and `POST /session` with a shuffled queue
3. `PUT /session` after every answer that changes the queue
4. `DELETE /session` when the queue empties
5. Poll `GET /session` every 2 s and adopt it if `progress.done` is higher

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | No active session |
| `SESSION_CONFLICT` | Session exists, or update is stale |
| `UNIT_NOT_FOUND` | Unit missing or not yours |
| `VALIDATION_ERROR` | Invariant violated or bad upload |
| `UNAUTHORIZED` | Missing or unknown token |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    bearer = HTTPBearer(auto_error=False)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details or None,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(DrillError)
    async def handle_drill_error(request: Request, exc: DrillError) -> JSONResponse:
        status_code = status_for_error(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return make_error_response(
            ErrorCode(exc.error_code),
            exc.message,
            status_code=status_code,
            details=exc.details,
        )

    def current_owner(
        credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer)],
    ) -> str:
        """Resolve the bearer token to an owner."""
        owner = identity.resolve(credentials.credentials if credentials else None)
        if owner is None:
            raise AuthenticationError("Missing or invalid token")
        return owner

    Owner = Annotated[str, Depends(current_owner)]

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.get(
        f"{API_PREFIX}/session",
        response_model=Optional[SessionModel],
        responses={401: {"model": ErrorResponse}},
        tags=["Session"],
        summary="Get the current practice session",
    )
    async def get_session(owner: Owner) -> Optional[SessionModel]:
        """Returns the stored session, or `null` if there is none."""
        session = api_service.get_session(owner)
        if session is None:
            return None
        return SessionModel.from_session(session)

    @app.post(
        f"{API_PREFIX}/session",
        response_model=SessionModel,
        status_code=201,
        responses={
            400: {"model": ErrorResponse, "description": "Invariant violated"},
            409: {"model": ErrorResponse, "description": "Session already exists"},
        },
        tags=["Session"],
        summary="Create a practice session",
    )
    async def create_session(owner: Owner, body: CreateSessionRequest) -> SessionModel:
        """
        Create the user's session.

        On `409`, fetch the existing session and continue with it.
        """
        session = api_service.create_session(
            owner,
            body.list_selector,
            [w.to_word() for w in body.queue],
            body.progress.to_progress(),
        )
        return SessionModel.from_session(session)

    @app.put(
        f"{API_PREFIX}/session",
        response_model=SuccessResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invariant violated"},
            404: {"model": ErrorResponse, "description": "No active session"},
            409: {"model": ErrorResponse, "description": "Update is behind stored progress"},
        },
        tags=["Session"],
        summary="Save queue and progress",
    )
    async def update_session(owner: Owner, body: UpdateSessionRequest) -> SuccessResponse:
        api_service.update_session(
            owner,
            [w.to_word() for w in body.queue],
            body.progress.to_progress(),
        )
        return SuccessResponse()

    @app.delete(
        f"{API_PREFIX}/session",
        response_model=SuccessResponse,
        tags=["Session"],
        summary="Remove the practice session",
    )
    async def remove_session(owner: Owner) -> SuccessResponse:
        """Idempotent: succeeds when there is no session."""
        api_service.remove_session(owner)
        return SuccessResponse()

    # =========================================================================
    # Unit & Word Endpoints
    # =========================================================================

    @app.get(
        f"{API_PREFIX}/units",
        response_model=list[UnitModel],
        tags=["Units"],
        summary="List your units",
    )
    async def list_units(owner: Owner) -> list[UnitModel]:
        return [UnitModel.from_unit(u) for u in api_service.list_units(owner)]

    @app.post(
        f"{API_PREFIX}/units",
        response_model=UnitModel,
        status_code=201,
        responses={400: {"model": ErrorResponse, "description": "Empty or invalid file"}},
        tags=["Units"],
        summary="Upload a CSV word list",
    )
    async def upload_unit(
        owner: Owner,
        file: Annotated[UploadFile, File(description="CSV: answer,prompt per row")],
        name: Annotated[Optional[str], Form(description="Unit name")] = None,
    ) -> UnitModel:
        """
        Upload a word list.

        Each row is `answer,prompt`. Cells are trimmed and capitalized;
        short rows are skipped.
        """
        raw = await file.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError("File must be UTF-8 text")

        unit = api_service.upload_unit(owner, name or file.filename or "Untitled", content)
        return UnitModel.from_unit(unit)

    @app.get(
        f"{API_PREFIX}/units/{{unit_id}}",
        response_model=UnitDetailResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Units"],
        summary="Get a unit and its words",
    )
    async def get_unit(owner: Owner, unit_id: int) -> UnitDetailResponse:
        unit, words = api_service.get_unit(owner, unit_id)
        return UnitDetailResponse(
            unit=UnitModel.from_unit(unit),
            words=[WordModel.from_word(w) for w in words],
        )

    @app.delete(
        f"{API_PREFIX}/units/{{unit_id}}",
        response_model=SuccessResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Units"],
        summary="Delete a unit",
    )
    async def delete_unit(owner: Owner, unit_id: int) -> SuccessResponse:
        api_service.delete_unit(owner, unit_id)
        return SuccessResponse()

    @app.get(
        f"{API_PREFIX}/words",
        response_model=WordsResponse,
        responses={400: {"model": ErrorResponse, "description": "No units specified"}},
        tags=["Units"],
        summary="Words of several units",
    )
    async def get_words(
        owner: Owner,
        units: Annotated[Optional[str], Query(description="Comma-separated unit ids")] = None,
    ) -> WordsResponse:
        """Non-numeric ids are ignored; units you don't own are skipped."""
        if not units:
            raise ValidationError("No units specified")
        words = api_service.get_words(owner, units)
        return WordsResponse(words=[WordModel.from_word(w) for w in words])

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="drill",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Drill API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn drill.api.app:app
app = create_app()
