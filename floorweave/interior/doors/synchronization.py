"""
synchronization.py - Reciprocal door maintenance v1.0

Every door that leads to another space should have a mirror door in that
space, on the opposite wall, pointing back. Mirrors created here carry
``is_reciprocal=True`` and never spawn mirrors of their own.

The batch pass (``synchronize_reciprocal_doors``) runs in three phases so a
second run over its own output changes nothing:

1. match each parent door to an existing mirror in its target
2. drop unmatched mirrors that point back on the expected wall (drift left
   behind by resizes and moves)
3. create mirrors for parents that are still unmatched, searching along the
   wall when the preferred spot is taken
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Set, Tuple
import copy
import logging

from floorweave.errors import EngineIssue, ErrorCode, create_sync_warning
from floorweave.interior.schema.space import Space, Door, Wall, SpaceIndex, EPSILON
from floorweave.interior.schema.validation import validate_door

__all__ = [
    'DEFAULT_POSITION_TOLERANCE_FT',
    'DEFAULT_SEARCH_STEP_FT',
    'SyncResult',
    'opposite_wall',
    'reciprocal_position',
    'doors_conflict',
    'find_non_conflicting_position',
    'make_reciprocal_door',
    'door_pair_key',
    'leads_back',
    'synchronize_reciprocal_doors',
    'ensure_reciprocal',
    'remove_counterpart',
]

logger = logging.getLogger(__name__)

DEFAULT_POSITION_TOLERANCE_FT = 10.0
DEFAULT_SEARCH_STEP_FT = 1.0


@dataclass
class SyncResult:
    """Outcome of a synchronization pass."""

    spaces: List[Space] = field(default_factory=list)
    created: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    adjusted: List[str] = field(default_factory=list)
    warnings: List[EngineIssue] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.removed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "removed": self.removed,
            "adjusted": self.adjusted,
            "warnings": [w.to_dict() for w in self.warnings],
        }


# =============================================================================
# GEOMETRY
# =============================================================================

def opposite_wall(wall: Wall) -> Wall:
    """North<->south, east<->west."""
    return wall.opposite


def reciprocal_position(source: Space, target: Space, source_door: Door) -> float:
    """
    Where the mirror of ``source_door`` belongs on the target's opposite wall.

    Equal wall lengths keep the absolute position. Otherwise the relative
    position is preserved and the result is clamped so the door fits.
    """
    source_length = source.wall_length(source_door.wall)
    target_length = target.wall_length(source_door.wall)

    if source_length == target_length:
        return source_door.position_on_wall_ft

    position = source_door.position_on_wall_ft / source_length * target_length
    half = source_door.width_ft / 2
    lo, hi = half, target_length - half
    if position < lo:
        position = lo
    elif position > hi:
        position = hi
    return position


def doors_conflict(d1: Door, d2: Door) -> bool:
    """True if both doors share a wall and their intervals overlap."""
    return d1.conflicts_with(d2)


def find_non_conflicting_position(
    space: Space,
    door: Door,
    preferred: float,
    step: float = DEFAULT_SEARCH_STEP_FT,
    ignore: Optional[Door] = None,
) -> Optional[float]:
    """
    Search outward from ``preferred`` for a free spot on the door's wall.

    Tries ``preferred``, then preferred+step, preferred-step, preferred+2*step,
    and so on up to half the wall length. Candidates must keep the door inside
    the wall.

    Args:
        space: Space whose existing doors must be avoided
        door: Door being placed (wall and width are read)
        preferred: Starting position in feet
        step: Search increment in feet
        ignore: An existing door to treat as absent

    Returns:
        First free position, or None if the door cannot fit anywhere
    """
    length = space.wall_length(door.wall)
    half = door.width_ft / 2
    lo, hi = half, length - half
    if lo > hi + EPSILON:
        return None

    others = [d for d in space.doors if d is not ignore and d is not door]

    def is_free(position: float) -> bool:
        probe = copy.copy(door)
        probe.position_on_wall_ft = position
        return not any(existing.conflicts_with(probe) for existing in others)

    if is_free(preferred):
        return preferred

    distance = step
    limit = length / 2
    while distance <= limit + EPSILON:
        higher = preferred + distance
        if higher <= hi + EPSILON and is_free(higher):
            return higher
        lower = preferred - distance
        if lower >= lo - EPSILON and is_free(lower):
            return lower
        distance += step

    return None


def make_reciprocal_door(source: Space, target: Space, door: Door) -> Door:
    """Mirror of ``door`` for ``target`` at the expected position."""
    return Door(
        wall=door.wall.opposite,
        position_on_wall_ft=reciprocal_position(source, target, door),
        width_ft=door.width_ft,
        leads_to=source.name,
        is_reciprocal=True,
        style=door.style,
        door_type=door.door_type,
        material=door.material,
        state=door.state,
        color=door.color,
    )


def door_pair_key(source: Space, door: Door, target: Space, expected: float) -> str:
    """Order-independent descriptor of one door pair."""
    ends = sorted([
        f"{source.name}|{door.wall.value}|{door.position_on_wall_ft:.1f}",
        f"{target.name}|{door.wall.opposite.value}|{expected:.1f}",
    ])
    return "↔".join(ends)


def leads_back(candidate: Door, source: Space, wall: Wall) -> bool:
    """Candidate points at ``source`` and sits on ``wall``."""
    return candidate.wall == wall and source.answers_to(candidate.leads_to)


# =============================================================================
# PLACEMENT
# =============================================================================

def _place_mirror(
    target: Space,
    mirror: Door,
    step: float,
) -> Tuple[Optional[Door], Optional[str]]:
    """
    Fit a mirror door into the target, moving it along the wall if it
    collides. Returns the placed door, or None with the reason.
    """
    validation = validate_door(target, mirror)
    if not validation.valid and validation.has_code(ErrorCode.STR_OVERLAP):
        alternate = find_non_conflicting_position(target, mirror, mirror.position_on_wall_ft, step)
        if alternate is not None:
            logger.info(
                f"Adjusted reciprocal door in {target.name} from "
                f"{mirror.position_on_wall_ft:.1f}ft to {alternate:.1f}ft to avoid conflict"
            )
            mirror.position_on_wall_ft = alternate
            validation = validate_door(target, mirror)

    if validation.valid:
        return mirror, None
    return None, "; ".join(validation.messages)


def _unsatisfiable(source: Space, target: Space, mirror: Door, reason: str) -> EngineIssue:
    message = (
        f"Cannot create reciprocal door {target.name} -> {source.name} on "
        f"{mirror.wall.value} wall at {mirror.position_on_wall_ft:.1f}ft"
    )
    logger.warning(
        f"{message} (target {target.size.width:g}ft x {target.size.height:g}ft): {reason}"
    )
    return create_sync_warning(message, space_id=target.space_id, detail=reason)


def _expected_spot_blocked(target: Space, mirror: Door, candidate: Door) -> bool:
    return any(
        d is not candidate and d.conflicts_with(mirror)
        for d in target.doors
    )


# =============================================================================
# BATCH SYNCHRONIZATION
# =============================================================================

@dataclass
class _Link:
    source_idx: int
    door: Door
    target_idx: int
    mirror: Door
    match: Optional[Door] = None


def synchronize_reciprocal_doors(
    spaces: List[Space],
    tolerance: float = DEFAULT_POSITION_TOLERANCE_FT,
    search_step: float = DEFAULT_SEARCH_STEP_FT,
) -> SyncResult:
    """
    Ensure every parent door with a resolvable target has exactly one mirror.

    The input list is not modified; the result holds a synchronized copy.

    Args:
        spaces: Space list
        tolerance: Max distance (ft) between a mirror and its expected position
        search_step: Increment (ft) for the conflict search

    Returns:
        SyncResult with the new space list and what changed
    """
    result = SyncResult(spaces=copy.deepcopy(spaces))
    working = result.spaces
    index = SpaceIndex(working)

    links: List[_Link] = []
    processed: Set[str] = set()

    for source_idx, source in enumerate(working):
        for door in source.doors:
            if door.is_reciprocal or door.targets_sentinel:
                continue
            target_idx = index.resolve_target(source, door)
            if target_idx is None:
                if index.position_of(door.leads_to) is None:
                    logger.debug(f"Target space '{door.leads_to}' not found for door from '{source.name}'")
                continue
            target = working[target_idx]
            mirror = make_reciprocal_door(source, target, door)
            key = door_pair_key(source, door, target, mirror.position_on_wall_ft)
            if key in processed:
                continue
            processed.add(key)
            links.append(_Link(source_idx, door, target_idx, mirror))

    # Phase 1: match within tolerance, nearest first
    claimed: Set[int] = set()
    for link in links:
        source, target = working[link.source_idx], working[link.target_idx]
        candidates = [
            d for d in target.doors
            if id(d) not in claimed
            and leads_back(d, source, link.mirror.wall)
            and abs(d.position_on_wall_ft - link.mirror.position_on_wall_ft) < tolerance
        ]
        if candidates:
            link.match = min(candidates, key=lambda d: abs(d.position_on_wall_ft - link.mirror.position_on_wall_ft))
            claimed.add(id(link.match))

    # Mirrors moved by an earlier conflict search stay while their spot is still taken
    for link in links:
        if link.match is not None:
            continue
        source, target = working[link.source_idx], working[link.target_idx]
        for d in target.doors:
            if (id(d) not in claimed and d.is_reciprocal
                    and leads_back(d, source, link.mirror.wall)
                    and _expected_spot_blocked(target, link.mirror, d)):
                link.match = d
                claimed.add(id(d))
                break

    # Phase 2: drop stale mirrors
    for link in links:
        source, target = working[link.source_idx], working[link.target_idx]
        kept = []
        for d in target.doors:
            if id(d) not in claimed and d.is_reciprocal and leads_back(d, source, link.mirror.wall):
                logger.info(
                    f"Removing outdated reciprocal door: {target.name} -> {source.name} on "
                    f"{d.wall.value} wall at {d.position_on_wall_ft:.1f}ft "
                    f"(expected: {link.mirror.position_on_wall_ft:.1f}ft)"
                )
                result.removed.append(f"{target.space_id}:{d.wall.value}@{d.position_on_wall_ft:.1f}")
                continue
            kept.append(d)
        target.doors = kept

    # Phase 3: create missing mirrors
    for link in links:
        if link.match is not None:
            continue
        source, target = working[link.source_idx], working[link.target_idx]
        preferred = link.mirror.position_on_wall_ft
        placed, reason = _place_mirror(target, link.mirror, search_step)
        if placed is None:
            result.warnings.append(_unsatisfiable(source, target, link.mirror, reason))
            continue
        target.doors.append(placed)
        if placed.position_on_wall_ft != preferred:
            result.adjusted.append(target.space_id)
        result.created.append(f"{target.space_id}:{placed.wall.value}@{placed.position_on_wall_ft:.1f}")
        logger.debug(
            f"Created reciprocal door: {target.name} -> {source.name} on "
            f"{placed.wall.value} wall at {placed.position_on_wall_ft:.1f}ft"
        )

    if result.changed:
        logger.info(f"Door sync: {len(result.created)} created, {len(result.removed)} removed")
    return result


# =============================================================================
# SINGLE-DOOR MAINTENANCE
# =============================================================================

def ensure_reciprocal(
    spaces: List[Space],
    source_idx: int,
    door: Door,
    tolerance: float = DEFAULT_POSITION_TOLERANCE_FT,
    search_step: float = DEFAULT_SEARCH_STEP_FT,
) -> Optional[EngineIssue]:
    """
    Give one door a mirror if its target lacks one. Mutates ``spaces`` in place.

    Returns:
        A sync warning if the mirror could not be placed, else None
    """
    if door.is_reciprocal or door.targets_sentinel:
        return None

    source = spaces[source_idx]
    target_idx = SpaceIndex(spaces).resolve_target(source, door)
    if target_idx is None:
        return None
    target = spaces[target_idx]

    mirror = make_reciprocal_door(source, target, door)
    for existing in target.doors:
        if (leads_back(existing, source, mirror.wall)
                and abs(existing.position_on_wall_ft - mirror.position_on_wall_ft) < tolerance):
            return None

    placed, reason = _place_mirror(target, mirror, search_step)
    if placed is None:
        return _unsatisfiable(source, target, mirror, reason)

    target.doors.append(placed)
    logger.debug(f"Added reciprocal door in {target.name} at {placed.position_on_wall_ft:.1f}ft")
    return None


def remove_counterpart(
    spaces: List[Space],
    source_idx: int,
    door: Door,
    tolerance: float = DEFAULT_POSITION_TOLERANCE_FT,
) -> Optional[Door]:
    """
    Remove the door at the other end of ``door``'s connection. Mutates
    ``spaces`` in place.

    Works in both directions: for a parent door it removes the mirror, for a
    mirror it removes the parent. The nearest door leading back on the
    opposite wall within ``tolerance`` is taken.

    Returns:
        The removed door, or None if no counterpart was found
    """
    if door.targets_sentinel:
        return None

    source = spaces[source_idx]
    target_idx = SpaceIndex(spaces).resolve_target(source, door)
    if target_idx is None:
        return None
    target = spaces[target_idx]

    expected = reciprocal_position(source, target, door)
    wall = door.wall.opposite
    candidates = [
        d for d in target.doors
        if d is not door
        and leads_back(d, source, wall)
        and abs(d.position_on_wall_ft - expected) <= tolerance
    ]
    if not candidates:
        logger.debug(f"No counterpart for door {source.name} -> {target.name} on {door.wall.value} wall")
        return None

    counterpart = min(candidates, key=lambda d: abs(d.position_on_wall_ft - expected))
    target.doors = [d for d in target.doors if d is not counterpart]
    logger.debug(
        f"Removed counterpart door in {target.name} on {counterpart.wall.value} wall "
        f"at {counterpart.position_on_wall_ft:.1f}ft"
    )
    return counterpart
