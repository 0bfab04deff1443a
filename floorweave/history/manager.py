"""
history/manager.py - Linear undo/redo over committed layouts
"""

from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING
import copy
import logging

from floorweave.errors import ErrorCode, HistoryError, create_state_error
from .schemas import Snapshot, HistoryState

if TYPE_CHECKING:
    from floorweave.interior.schema.space import Space, WallSettings

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class SnapshotHistory:
    """
    Capped stack of snapshots with a cursor.

    Pushing after an undo discards everything beyond the cursor. When the
    stack exceeds its limit the oldest entry is dropped.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError(f"History limit must be at least 1 (got {limit})")
        self._limit = limit
        self._snapshots: List[Snapshot] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    @property
    def current(self) -> Optional[Snapshot]:
        if 0 <= self._cursor < len(self._snapshots):
            return self._snapshots[self._cursor]
        return None

    def push(
        self,
        spaces: List[Space],
        label: str,
        wall_settings: Optional[WallSettings] = None,
    ) -> Snapshot:
        """Capture ``spaces`` (and the wall defaults in force) as the newest entry."""
        snapshot = Snapshot(
            label=label,
            spaces=copy.deepcopy(spaces),
            wall_settings=copy.deepcopy(wall_settings),
        )

        self._snapshots = self._snapshots[:self._cursor + 1]
        self._snapshots.append(snapshot)

        # Trim history
        if len(self._snapshots) > self._limit:
            self._snapshots = self._snapshots[-self._limit:]
        self._cursor = len(self._snapshots) - 1

        logger.debug(f"Snapshot '{label}' captured ({self._cursor + 1}/{len(self._snapshots)})")
        return snapshot

    def reset(
        self,
        spaces: List[Space],
        label: str = "Initial state",
        wall_settings: Optional[WallSettings] = None,
    ) -> Snapshot:
        """Clear history and start over from ``spaces``."""
        self._snapshots = []
        self._cursor = -1
        return self.push(spaces, label, wall_settings)

    def undo(self) -> Snapshot:
        """Step back and return a copy of that snapshot."""
        if not self.can_undo:
            raise HistoryError(
                "Nothing to undo",
                [create_state_error(ErrorCode.STA_HISTORY, "Nothing to undo")],
            )
        self._cursor -= 1
        logger.info(f"Undo to '{self._snapshots[self._cursor].label}'")
        return copy.deepcopy(self._snapshots[self._cursor])

    def redo(self) -> Snapshot:
        """Step forward and return a copy of that snapshot."""
        if not self.can_redo:
            raise HistoryError(
                "Nothing to redo",
                [create_state_error(ErrorCode.STA_HISTORY, "Nothing to redo")],
            )
        self._cursor += 1
        logger.info(f"Redo to '{self._snapshots[self._cursor].label}'")
        return copy.deepcopy(self._snapshots[self._cursor])

    def restore(self, position: int) -> Snapshot:
        """Move the cursor to ``position`` and return a copy of that snapshot."""
        if not 0 <= position < len(self._snapshots):
            message = f"No snapshot at position {position} (history has {len(self._snapshots)})"
            raise HistoryError(message, [create_state_error(ErrorCode.STA_HISTORY, message)])
        self._cursor = position
        logger.info(f"Restored snapshot '{self._snapshots[position].label}'")
        return copy.deepcopy(self._snapshots[position])

    def get_history(self) -> List[Snapshot]:
        return list(self._snapshots)

    def state(self) -> HistoryState:
        return HistoryState(
            cursor=self._cursor,
            size=len(self._snapshots),
            can_undo=self.can_undo,
            can_redo=self.can_redo,
            labels=[s.label for s in self._snapshots],
        )
