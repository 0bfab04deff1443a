"""
history/ - Snapshot History

Linear undo/redo over committed layout states.
"""

from .schemas import (
    Snapshot,
    HistoryState,
)

from .manager import (
    DEFAULT_HISTORY_LIMIT,
    SnapshotHistory,
)

__all__ = [
    # Schemas
    "Snapshot",
    "HistoryState",
    # Manager
    "DEFAULT_HISTORY_LIMIT",
    "SnapshotHistory",
]
