"""
errors/taxonomy.py - Error classification for the layout engine v1.0

Structured issue records plus the exception types raised when a command is
rejected. Three failure families exist:

- structural: a door or space violates width/bounds/overlap/identity rules
  (command rejected, state untouched)
- layout: auto-layout cannot run because an unlocked space is unreachable
  (aggregate report, positions untouched)
- synchronization: a reciprocal door cannot be placed (warning only)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum
import uuid


class ErrorSeverity(Enum):
    """Issue severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ErrorCategory(Enum):
    """Issue categories."""
    # Door/space geometry (1xxx)
    STRUCTURAL = "structural"

    # Auto-layout preconditions (2xxx)
    LAYOUT = "layout"

    # Reciprocal door maintenance (3xxx)
    SYNC = "sync"

    # Door graph (4xxx)
    CONNECTIVITY = "connectivity"

    # Editor state and history (5xxx)
    STATE = "state"


class ErrorCode(Enum):
    """Specific issue codes."""

    # Structural (1xxx)
    STR_WIDTH_EXCEEDS_WALL = 1001
    STR_OUT_OF_BOUNDS = 1002
    STR_OVERLAP = 1003
    STR_INVALID_SIZE = 1004
    STR_DUPLICATE_IDENTITY = 1005
    STR_INVALID_DOOR = 1006
    STR_INVALID_SETTINGS = 1007
    STR_MALFORMED_PAYLOAD = 1008

    # Layout (2xxx)
    LAY_NO_ACCESS = 2001
    LAY_BROKEN_TARGET = 2002
    LAY_PENDING_TARGET = 2003

    # Synchronization (3xxx)
    SYN_UNSATISFIABLE = 3001
    SYN_TARGET_MISSING = 3002

    # Connectivity (4xxx)
    CON_BROKEN_CONNECTION = 4001
    CON_PENDING = 4002
    CON_DISCONNECTED = 4003

    # State (5xxx)
    STA_UNKNOWN_SPACE = 5001
    STA_UNKNOWN_DOOR = 5002
    STA_HISTORY = 5003
    STA_UNKNOWN_COMMAND = 5004


@dataclass
class EngineIssue:
    """Structured issue representation."""

    error_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    code: ErrorCode = ErrorCode.STR_INVALID_DOOR
    category: ErrorCategory = ErrorCategory.STRUCTURAL
    severity: ErrorSeverity = ErrorSeverity.ERROR

    message: str = ""
    detail: str = ""

    # Context
    source: str = ""  # Module that raised
    space_id: Optional[str] = None
    door_index: Optional[int] = None

    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_error(self) -> bool:
        return self.severity == ErrorSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "detail": self.detail,
            "source": self.source,
            "space_id": self.space_id,
            "door_index": self.door_index,
        }


# =============================================================================
# EXCEPTIONS
# =============================================================================

class FloorweaveError(Exception):
    """Base error carrying the structured issues that caused it."""

    def __init__(self, message: str, issues: Optional[List[EngineIssue]] = None):
        super().__init__(message)
        self.message = message
        self.issues: List[EngineIssue] = list(issues or [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "issues": [i.to_dict() for i in self.issues],
        }


class StructuralInvalidError(FloorweaveError):
    """A command would leave a door or space geometrically invalid."""


class LayoutInfeasibleError(FloorweaveError):
    """Auto-layout aborted before mutating any position."""


class SpaceNotFoundError(FloorweaveError):
    """A command referenced a space or door that does not exist."""


class HistoryError(FloorweaveError):
    """Undo/redo/restore requested outside the recorded history."""


# =============================================================================
# FACTORIES
# =============================================================================

def create_structural_error(
    code: ErrorCode,
    message: str,
    space_id: str = None,
    door_index: int = None,
    source: str = "validation",
) -> EngineIssue:
    """Factory for structural errors."""
    return EngineIssue(
        code=code,
        category=ErrorCategory.STRUCTURAL,
        severity=ErrorSeverity.ERROR,
        message=message,
        source=source,
        space_id=space_id,
        door_index=door_index,
    )


def create_layout_error(
    message: str,
    space_id: str,
    code: ErrorCode = ErrorCode.LAY_NO_ACCESS,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
) -> EngineIssue:
    """Factory for layout precondition issues."""
    return EngineIssue(
        code=code,
        category=ErrorCategory.LAYOUT,
        severity=severity,
        message=message,
        source="layout_generator",
        space_id=space_id,
    )


def create_sync_warning(
    message: str,
    space_id: str,
    detail: str = "",
    code: ErrorCode = ErrorCode.SYN_UNSATISFIABLE,
) -> EngineIssue:
    """Factory for reciprocal-door warnings. Never fatal."""
    return EngineIssue(
        code=code,
        category=ErrorCategory.SYNC,
        severity=ErrorSeverity.WARNING,
        message=message,
        detail=detail,
        source="door_sync",
        space_id=space_id,
    )


def create_state_error(
    code: ErrorCode,
    message: str,
    space_id: str = None,
    door_index: int = None,
) -> EngineIssue:
    """Factory for editor state errors (unknown ids, empty history)."""
    return EngineIssue(
        code=code,
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.ERROR,
        message=message,
        source="editor",
        space_id=space_id,
        door_index=door_index,
    )
