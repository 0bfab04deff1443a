"""
api_endpoints.py - Location editor REST API routes v1.0

FastAPI endpoints exposing the editor command protocol per session.

Endpoints:
- POST   /api/v1/locations/sessions                 - Create session
- GET    /api/v1/locations/sessions/{id}            - Current state
- POST   /api/v1/locations/sessions/{id}/commands   - Apply a command
- POST   /api/v1/locations/sessions/{id}/undo       - Undo
- POST   /api/v1/locations/sessions/{id}/redo       - Redo
- GET    /api/v1/locations/sessions/{id}/validation - Outstanding issues
- DELETE /api/v1/locations/sessions/{id}            - Close session
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import threading
import uuid

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from floorweave.bootstrap.config import EngineConfig, FloorweaveConfig
from floorweave.errors import (
    FloorweaveError,
    HistoryError,
    LayoutInfeasibleError,
    SpaceNotFoundError,
    StructuralInvalidError,
)
from floorweave.interior.integration.commands import command_from_dict
from floorweave.interior.integration.editor import CommandResult, LocationEditor
from floorweave.interior.schema.space import Space, WallSettings
from floorweave.interior.schema.validation import ValidationSeverity

__all__ = [
    'create_location_router',
    'create_app',
    'SessionStore',
    'WallSettingsModel',
    'CreateSessionRequest',
    'CommandRequest',
    'SessionResponse',
    'CommandResponse',
    'ValidationResponse',
]

logger = logging.getLogger(__name__)


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class WallSettingsModel(BaseModel):
    """Global wall defaults."""
    thickness_ft: float = Field(10.0, description="Wall thickness (ft)")
    material: str = Field("stone", description="Wall material")


class CreateSessionRequest(BaseModel):
    """Request to open an editing session."""
    spaces: List[Dict[str, Any]] = Field(default_factory=list, description="Spaces in wire format")
    wall_settings: Optional[WallSettingsModel] = None


class CommandRequest(BaseModel):
    """One editor command."""
    type: str = Field(..., description="Command type, e.g. add_door")
    payload: Dict[str, Any] = Field(default_factory=dict)


class SessionResponse(BaseModel):
    """Current session state."""
    session_id: str
    spaces: List[Dict[str, Any]]
    wall_settings: Dict[str, Any]
    validation_errors: List[Dict[str, Any]] = []
    history: Dict[str, Any] = {}


class CommandResponse(BaseModel):
    """State after a command."""
    session_id: str
    success: bool
    label: str
    spaces: List[Dict[str, Any]]
    wall_settings: Dict[str, Any]
    validation_errors: List[Dict[str, Any]] = []
    warnings: List[Dict[str, Any]] = []
    history: Dict[str, Any] = {}


class ValidationResponse(BaseModel):
    """Outstanding validation issues."""
    session_id: str
    is_valid: bool
    errors_count: int
    warnings_count: int
    issues: List[Dict[str, Any]]


# =============================================================================
# SESSIONS
# =============================================================================

@dataclass
class _Session:
    editor: LocationEditor
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionStore:
    """In-memory sessions, one editor and one writer lock each."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self._config = config or EngineConfig()
        self._sessions: Dict[str, _Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, spaces: List[Space], wall_settings: Optional[WallSettings] = None) -> str:
        session_id = uuid.uuid4().hex[:12]
        editor = LocationEditor(spaces=spaces, wall_settings=wall_settings, config=self._config)
        with self._lock:
            self._sessions[session_id] = _Session(editor=editor)
        logger.info(f"Opened session {session_id} with {len(spaces)} space(s)")
        return session_id

    def get(self, session_id: str) -> _Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        return session

    def close(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
        logger.info(f"Closed session {session_id}")


def _status_for(error: FloorweaveError) -> int:
    if isinstance(error, StructuralInvalidError):
        return 422
    if isinstance(error, LayoutInfeasibleError):
        return 409
    if isinstance(error, SpaceNotFoundError):
        return 404
    if isinstance(error, HistoryError):
        return 409
    return 400


def _command_response(session_id: str, result: CommandResult) -> CommandResponse:
    data = result.to_dict()
    return CommandResponse(session_id=session_id, **data)


# =============================================================================
# ROUTER FACTORY
# =============================================================================

def create_location_router(store: Optional[SessionStore] = None) -> APIRouter:
    """
    Create FastAPI router for location editor sessions.

    Args:
        store: SessionStore instance; a fresh one is created if omitted

    Returns:
        FastAPI APIRouter
    """
    if store is None:
        store = SessionStore()

    router = APIRouter(
        prefix="/api/v1/locations/sessions",
        tags=["locations"],
    )

    def run(session_id: str, action) -> CommandResponse:
        session = store.get(session_id)
        with session.lock:
            try:
                result = action(session.editor)
            except FloorweaveError as e:
                raise HTTPException(status_code=_status_for(e), detail=e.to_dict())
        return _command_response(session_id, result)

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    @router.post("", response_model=SessionResponse, status_code=201)
    def create_session(request: CreateSessionRequest) -> SessionResponse:
        """
        Open a session from a list of spaces.

        Reciprocal doors are synchronized on load; invalid doors are reported
        in ``validation_errors`` rather than rejected.
        """
        try:
            spaces = [Space.from_dict(s) for s in request.spaces]
        except (KeyError, TypeError, ValueError) as e:
            raise HTTPException(status_code=422, detail=f"Malformed space payload: {e}")

        settings = None
        if request.wall_settings is not None:
            settings = WallSettings(
                thickness_ft=request.wall_settings.thickness_ft,
                material=request.wall_settings.material,
            )

        try:
            session_id = store.create(spaces, settings)
        except FloorweaveError as e:
            raise HTTPException(status_code=_status_for(e), detail=e.to_dict())
        return get_session(session_id)

    @router.get("/{session_id}", response_model=SessionResponse)
    def get_session(session_id: str) -> SessionResponse:
        session = store.get(session_id)
        with session.lock:
            editor = session.editor
            return SessionResponse(
                session_id=session_id,
                spaces=[s.to_dict() for s in editor.spaces],
                wall_settings=editor.wall_settings.to_dict(),
                validation_errors=[v.to_dict() for v in editor.validation_errors()],
                history=editor.history.state().to_dict(),
            )

    @router.delete("/{session_id}", status_code=204)
    def delete_session(session_id: str) -> None:
        store.close(session_id)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    @router.post("/{session_id}/commands", response_model=CommandResponse)
    def apply_command(session_id: str, request: CommandRequest) -> CommandResponse:
        """
        Apply one editor command.

        Rejections leave the session unchanged. Structural rejections return
        422, layout infeasibility 409, unknown spaces or doors 404.
        """
        try:
            command = command_from_dict({"type": request.type, "payload": request.payload})
        except FloorweaveError as e:
            raise HTTPException(status_code=_status_for(e), detail=e.to_dict())
        return run(session_id, lambda editor: editor.dispatch(command))

    @router.post("/{session_id}/undo", response_model=CommandResponse)
    def undo(session_id: str) -> CommandResponse:
        return run(session_id, lambda editor: editor.undo())

    @router.post("/{session_id}/redo", response_model=CommandResponse)
    def redo(session_id: str) -> CommandResponse:
        return run(session_id, lambda editor: editor.redo())

    # =========================================================================
    # VALIDATION
    # =========================================================================

    @router.get("/{session_id}/validation", response_model=ValidationResponse)
    def get_validation(session_id: str) -> ValidationResponse:
        session = store.get(session_id)
        with session.lock:
            issues = session.editor.validation_errors()

        errors = [i for i in issues if i.severity == ValidationSeverity.ERROR]
        return ValidationResponse(
            session_id=session_id,
            is_valid=not errors,
            errors_count=len(errors),
            warnings_count=len(issues) - len(errors),
            issues=[i.to_dict() for i in issues],
        )

    return router


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(config: Optional[FloorweaveConfig] = None) -> FastAPI:
    """
    Create the FastAPI application with the session router mounted.

    Args:
        config: Root configuration; defaults are used if omitted
    """
    config = config or FloorweaveConfig()

    app = FastAPI(
        title="Floorweave API",
        description="Floor plan layout and door-consistency engine",
        version=config.version,
        docs_url=config.api.docs_url if config.api.enable_docs else None,
        redoc_url="/redoc" if config.api.enable_docs else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_location_router(SessionStore(config.engine)))

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok", "version": config.version}

    return app
