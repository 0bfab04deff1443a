"""
history/schemas.py - Snapshot data structures
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime
import uuid

if TYPE_CHECKING:
    from floorweave.interior.schema.space import Space, WallSettings


@dataclass
class Snapshot:
    """A captured layout state. Never mutated after capture."""

    snapshot_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])

    label: str = ""
    spaces: List[Space] = field(default_factory=list)
    wall_settings: Optional[WallSettings] = None

    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snapshot_id": self.snapshot_id,
            "label": self.label,
            "timestamp": self.timestamp.isoformat(),
            "num_spaces": len(self.spaces),
        }


@dataclass
class HistoryState:
    """Cursor position and undo/redo availability."""

    cursor: int = -1
    size: int = 0
    can_undo: bool = False
    can_redo: bool = False
    labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cursor": self.cursor,
            "size": self.size,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "labels": self.labels,
        }
