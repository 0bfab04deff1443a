"""
layout_generator.py - Door-driven auto-layout v1.0

Positions spaces in feet purely from their door connectivity. A seed space is
placed first and every other space is attached to a placed neighbour through
a shared door, so the two doors line up across the combined wall thickness.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Tuple
from collections import deque
import copy
import logging
import math
import time

from floorweave.errors import (
    EngineIssue,
    ErrorAggregator,
    ErrorCode,
    ErrorReport,
    ErrorSeverity,
    create_layout_error,
)
from floorweave.interior.graph.connectivity import build_door_graph, connection_counts
from floorweave.interior.schema.space import (
    Space, Door, Wall, WallSettings, Position, SpaceIndex, PENDING,
)
from floorweave.interior.doors.synchronization import leads_back, reciprocal_position

__all__ = [
    'LayoutConfig',
    'LayoutResult',
    'LayoutGenerator',
    'compute_auto_layout',
    'check_layout_preconditions',
    'snap_to_grid',
]

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class LayoutConfig:
    """Configuration for auto-layout."""

    grid_size_ft: float = 5.0

    # Seed lands this many grid units from the origin on both axes
    seed_offset_units: float = 10.0

    # Unlocked spaces closer to the origin than this many grid units are shifted in
    padding_units: float = 2.0

    # Square packing for spaces unreachable from the seed
    fallback_origin_x_ft: float = 500.0
    fallback_cell_ft: float = 200.0

    @property
    def padding_ft(self) -> float:
        return self.grid_size_ft * self.padding_units

    @property
    def seed_origin_ft(self) -> float:
        return self.grid_size_ft * self.seed_offset_units


@dataclass
class LayoutResult:
    """Result of an auto-layout run."""

    success: bool
    spaces: List[Space] = field(default_factory=list)
    seed_id: Optional[str] = None

    # Space ids by how they were placed
    attached: List[str] = field(default_factory=list)
    packed: List[str] = field(default_factory=list)

    errors: List[EngineIssue] = field(default_factory=list)
    warnings: List[EngineIssue] = field(default_factory=list)
    report: Optional[ErrorReport] = None
    layout_time_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "success": self.success,
            "spaces": [s.to_dict() for s in self.spaces],
            "seed_id": self.seed_id,
            "attached": self.attached,
            "packed": self.packed,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "layout_time_ms": self.layout_time_ms,
        }


def snap_to_grid(value: float, grid: float) -> float:
    """Nearest grid multiple, halves rounding up."""
    return math.floor(value / grid + 0.5) * grid


# =============================================================================
# PRECONDITIONS
# =============================================================================

def check_layout_preconditions(spaces: List[Space]) -> Tuple[List[EngineIssue], List[EngineIssue]]:
    """
    Check that every unlocked space can be reached by layout.

    An unlocked space needs at least one door or an access point. Door targets
    that are pending or do not exist are reported as warnings. Locked spaces
    are exempt, with or without a position.

    Returns:
        (errors, warnings)
    """
    index = SpaceIndex(spaces)
    errors: List[EngineIssue] = []
    warnings: List[EngineIssue] = []

    for space in spaces:
        if not space.position_locked and not space.doors and not space.access_point:
            errors.append(create_layout_error(
                f'"{space.name}" has no doors and no access_point. Unlocked rooms must be '
                f"accessible for auto-layout. Either add a door/access_point, or lock this room's position.",
                space_id=space.space_id,
            ))

        for idx, door in enumerate(space.doors):
            if not door.leads_to or door.leads_to == PENDING:
                warnings.append(create_layout_error(
                    f'"{space.name}" door #{idx + 1} on {door.wall.value} wall has incomplete target ({door.leads_to or "none"}).',
                    space_id=space.space_id,
                    code=ErrorCode.LAY_PENDING_TARGET,
                    severity=ErrorSeverity.WARNING,
                ))
            elif not door.targets_sentinel and index.position_of(door.leads_to) is None:
                warnings.append(create_layout_error(
                    f'"{space.name}" has door to "{door.leads_to}" which doesn\'t exist.',
                    space_id=space.space_id,
                    code=ErrorCode.LAY_BROKEN_TARGET,
                    severity=ErrorSeverity.WARNING,
                ))

    return errors, warnings


# =============================================================================
# LAYOUT GENERATOR
# =============================================================================

class LayoutGenerator:
    """
    Breadth-first geometric placement from door connectivity.

    Anchored spaces (locked with a position) keep their coordinates and act
    as additional starting points. Everything else is recomputed.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        """
        Initialize the generator.

        Args:
            config: Layout configuration
        """
        self._config = config or LayoutConfig()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Main Generation
    # -------------------------------------------------------------------------

    def generate(self, spaces: List[Space], wall_settings: Optional[WallSettings] = None) -> LayoutResult:
        """
        Assign a position to every space that is not anchored.

        Args:
            spaces: Space list (not modified)
            wall_settings: Global wall defaults for gap computation

        Returns:
            LayoutResult; on a failed precondition ``success`` is False, the
            spaces are an unchanged copy and ``report`` itemizes the errors
        """
        start_time = time.time()
        settings = wall_settings or WallSettings()
        result_spaces = copy.deepcopy(spaces)

        if not result_spaces:
            return LayoutResult(success=True, spaces=result_spaces)

        errors, warnings = check_layout_preconditions(result_spaces)
        for warning in warnings:
            logger.warning(warning.message)

        if errors:
            aggregator = ErrorAggregator()
            aggregator.add_all(errors)
            report = aggregator.generate_report()
            logger.error(f"Cannot calculate room layout:\n{report.itemized()}")
            return LayoutResult(
                success=False,
                spaces=result_spaces,
                errors=errors,
                warnings=warnings,
                report=report,
                layout_time_ms=(time.time() - start_time) * 1000,
            )

        placed, seed_idx, attached = self._expand(result_spaces, settings)
        packed = self._pack_unreached(result_spaces, placed)
        self._normalize(result_spaces, placed)

        for i, space in enumerate(result_spaces):
            if i in placed and not space.is_anchored:
                x, y = placed[i]
                space.position = Position(x=x, y=y)

        elapsed = (time.time() - start_time) * 1000
        logger.info(
            f"Layout complete: seed '{result_spaces[seed_idx].name}', "
            f"{len(attached)} attached, {len(packed)} packed ({elapsed:.1f}ms)"
        )

        return LayoutResult(
            success=True,
            spaces=result_spaces,
            seed_id=result_spaces[seed_idx].space_id,
            attached=[result_spaces[i].space_id for i in attached],
            packed=[result_spaces[i].space_id for i in packed],
            warnings=warnings,
            layout_time_ms=elapsed,
        )

    # -------------------------------------------------------------------------
    # Seed and Expansion
    # -------------------------------------------------------------------------

    def select_seed(self, spaces: List[Space]) -> int:
        """Index of the space with the most resolvable doors; first wins ties."""
        counts = connection_counts(build_door_graph(spaces))
        best_idx, best = 0, 0
        for i, space in enumerate(spaces):
            if counts.get(space.space_id, 0) > best:
                best_idx, best = i, counts[space.space_id]
        logger.debug(f"Seed room: '{spaces[best_idx].name}' with {best} valid connections")
        return best_idx

    def _expand(
        self,
        spaces: List[Space],
        settings: WallSettings,
    ) -> Tuple[Dict[int, Tuple[float, float]], int, List[int]]:
        grid = self._config.grid_size_ft
        index = SpaceIndex(spaces)

        placed: Dict[int, Tuple[float, float]] = {}
        for i, space in enumerate(spaces):
            if space.is_anchored:
                placed[i] = (space.position.x, space.position.y)

        seed_idx = self.select_seed(spaces)
        if seed_idx not in placed:
            seed = spaces[seed_idx]
            if seed.position is not None:
                placed[seed_idx] = (seed.position.x, seed.position.y)
            else:
                origin = self._config.seed_origin_ft
                placed[seed_idx] = (origin, origin)

        queue = deque([seed_idx] + [i for i in placed if i != seed_idx])
        processed = set()
        attached: List[int] = []

        while queue:
            current_idx = queue.popleft()
            if current_idx in processed:
                continue
            processed.add(current_idx)
            current = spaces[current_idx]

            for door in current.doors:
                target_idx = index.resolve_target(current, door)
                if target_idx is None or target_idx in placed:
                    continue
                target = spaces[target_idx]

                x, y = self._attach(current, placed[current_idx], door, target, settings)
                placed[target_idx] = (snap_to_grid(x, grid), snap_to_grid(y, grid))
                attached.append(target_idx)
                queue.append(target_idx)
                logger.debug(
                    f"Placed '{target.name}' at {placed[target_idx]} via {door.wall.value} door of '{current.name}'"
                )

        return placed, seed_idx, attached

    def _attach(
        self,
        current: Space,
        current_pos: Tuple[float, float],
        door: Door,
        target: Space,
        settings: WallSettings,
    ) -> Tuple[float, float]:
        """Unsnapped top-left of ``target`` so its door meets ``door``."""
        from_pos = door.position_on_wall_ft
        to_door = self._matching_door(current, door, target)
        to_pos = to_door.position_on_wall_ft if to_door is not None else from_pos

        gap = current.effective_wall_thickness(settings) + target.effective_wall_thickness(settings)
        fx, fy = current_pos

        if door.wall == Wall.NORTH:
            return fx + from_pos - to_pos, fy - target.size.height - gap
        if door.wall == Wall.SOUTH:
            return fx + from_pos - to_pos, fy + current.size.height + gap
        if door.wall == Wall.EAST:
            return fx + current.size.width + gap, fy + from_pos - to_pos
        return fx - target.size.width - gap, fy + from_pos - to_pos

    @staticmethod
    def _matching_door(current: Space, door: Door, target: Space) -> Optional[Door]:
        """The target's door back to ``current`` on the opposite wall, nearest the expected spot."""
        candidates = [d for d in target.doors if leads_back(d, current, door.wall.opposite)]
        if not candidates:
            return None
        expected = reciprocal_position(current, target, door)
        return min(candidates, key=lambda d: abs(d.position_on_wall_ft - expected))

    # -------------------------------------------------------------------------
    # Packing and Normalization
    # -------------------------------------------------------------------------

    def _pack_unreached(self, spaces: List[Space], placed: Dict[int, Tuple[float, float]]) -> List[int]:
        unreached = [i for i in range(len(spaces)) if i not in placed]
        if not unreached:
            return []

        cols = math.ceil(math.sqrt(len(unreached)))
        cell = self._config.fallback_cell_ft
        for n, i in enumerate(unreached):
            col, row = n % cols, n // cols
            placed[i] = (self._config.fallback_origin_x_ft + col * cell, row * cell)
        logger.info(f"Packed {len(unreached)} unreachable room(s): {[spaces[i].name for i in unreached]}")
        return unreached

    def _normalize(self, spaces: List[Space], placed: Dict[int, Tuple[float, float]]) -> None:
        free = [i for i in placed if not spaces[i].is_anchored]
        if not free:
            return

        padding = self._config.padding_ft
        # Per axis, and only when something sits inside the padding
        shift_x = max(0.0, padding - min(placed[i][0] for i in free))
        shift_y = max(0.0, padding - min(placed[i][1] for i in free))
        if not shift_x and not shift_y:
            return
        for i in free:
            x, y = placed[i]
            placed[i] = (x + shift_x, y + shift_y)


def compute_auto_layout(
    spaces: List[Space],
    grid_size_ft: float = 5.0,
    wall_settings: Optional[WallSettings] = None,
) -> LayoutResult:
    """
    Convenience wrapper around ``LayoutGenerator``.

    Args:
        spaces: Space list
        grid_size_ft: Grid unit in feet
        wall_settings: Global wall defaults

    Returns:
        LayoutResult
    """
    generator = LayoutGenerator(LayoutConfig(grid_size_ft=grid_size_ft))
    return generator.generate(spaces, wall_settings)
