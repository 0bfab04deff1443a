"""
migration.py - Legacy layout migration

Older saved layouts carry relative door positions, ``width``/``position`` keys,
and reciprocal doors that were never flagged. These helpers bring them up to
the current shape.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Set
import copy
import logging

from floorweave.interior.doors.synchronization import (
    DEFAULT_POSITION_TOLERANCE_FT,
    DEFAULT_SEARCH_STEP_FT,
    SyncResult,
    door_pair_key,
    reciprocal_position,
    synchronize_reciprocal_doors,
)
from floorweave.interior.schema.space import Door, Space, SpaceIndex, normalize_door_fields

__all__ = [
    'ParentDoor',
    'normalize_door_fields',
    'identify_parent_doors',
    'rebuild_reciprocals',
]

logger = logging.getLogger(__name__)


@dataclass
class ParentDoor:
    """A door kept as the authoritative end of its connection."""

    space_id: str
    door_index: int
    door: Door

    def to_dict(self) -> Dict[str, Any]:
        return {
            "space_id": self.space_id,
            "door_index": self.door_index,
            "door": self.door.to_dict(),
        }


def identify_parent_doors(spaces: List[Space]) -> List[ParentDoor]:
    """
    Pick one door per connection.

    Both ends of a connection produce the same pair key; the first one seen in
    list order is kept. Doors whose target does not resolve are always kept.
    """
    index = SpaceIndex(spaces)
    seen: Set[str] = set()
    parents: List[ParentDoor] = []

    for space in spaces:
        for i, door in enumerate(space.doors):
            target_idx = index.resolve_target(space, door)
            if target_idx is None:
                parents.append(ParentDoor(space.space_id, i, door))
                continue

            target = spaces[target_idx]
            key = door_pair_key(space, door, target, reciprocal_position(space, target, door))
            if key in seen:
                logger.debug(f"Dropping duplicate end of {key}")
                continue
            seen.add(key)
            parents.append(ParentDoor(space.space_id, i, door))

    return parents


def rebuild_reciprocals(
    spaces: List[Space],
    tolerance: float = DEFAULT_POSITION_TOLERANCE_FT,
    search_step: float = DEFAULT_SEARCH_STEP_FT,
) -> SyncResult:
    """
    Strip every flagged reciprocal door and synchronize again.

    The input list is not modified.
    """
    stripped = copy.deepcopy(spaces)
    removed = 0
    for space in stripped:
        before = len(space.doors)
        space.doors = [d for d in space.doors if not d.is_reciprocal]
        removed += before - len(space.doors)

    logger.info(f"Stripped {removed} reciprocal door(s); rebuilding")
    return synchronize_reciprocal_doors(stripped, tolerance=tolerance, search_step=search_step)
